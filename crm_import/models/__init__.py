"""Domain models for the customer CSV import pipeline.

This package contains the schema, row, batch, error and result models used
throughout the application.
"""

from .config_models import DatabaseConfig, ImportConfig
from .error_record import ErrorRecord
from .field_schema import CUSTOMER_SCHEMA, FieldSchema, FieldSpec, ValueKind
from .import_batch import ImportBatch
from .processing_result import ImportResult, ImportStatus
from .row_data import ParsedCustomer, RawRow
from .validation_error import ErrorType, ValidationError

__all__ = [
    # Configuration models
    "DatabaseConfig",
    "ImportConfig",
    # Schema
    "CUSTOMER_SCHEMA",
    "FieldSchema",
    "FieldSpec",
    "ValueKind",
    # Processing models
    "RawRow",
    "ParsedCustomer",
    "ValidationError",
    "ErrorType",
    "ImportBatch",
    "ImportResult",
    "ImportStatus",
    "ErrorRecord",
]
