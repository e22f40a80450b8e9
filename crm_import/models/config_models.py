from __future__ import annotations

from dataclasses import dataclass

"""Config dataclasses for the customer CSV import.

Loaded and validated by crm_import.config.loader.
"""

DEFAULT_TABLE = "customers"
DEFAULT_TEMPLATE_FILENAME = "customers_import_template.csv"
DEFAULT_STATUS = "active"
DEFAULT_PAGE_SIZE = 1000


@dataclass(frozen=True)
class DatabaseConfig:
    """Database connection configuration.

    Used as fallback when environment variables are not set.
    Environment variables take precedence over these values.
    """
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str | None = None
    dsn: str | None = None


@dataclass(frozen=True)
class ImportConfig:
    """Root configuration object for the import pipeline."""
    table: str = DEFAULT_TABLE  # target table for bulk create
    template_filename: str = DEFAULT_TEMPLATE_FILENAME
    default_status: str = DEFAULT_STATUS  # applied when status cell is empty
    page_size: int = DEFAULT_PAGE_SIZE  # execute_values page size
    idempotency_table: str | None = None  # batch key table, disabled when None
    database: DatabaseConfig = DatabaseConfig()
