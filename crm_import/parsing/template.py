from __future__ import annotations

from pathlib import Path

from crm_import.models.config_models import DEFAULT_TEMPLATE_FILENAME
from crm_import.models.field_schema import CUSTOMER_SCHEMA, FieldSchema

"""Import template generator.

The template is the header line only: schema names in canonical order,
comma-joined, with a trailing newline. No data rows.
"""

__all__ = [
    "render_template",
    "write_template",
]


def render_template(schema: FieldSchema = CUSTOMER_SCHEMA) -> str:
    return ",".join(schema.names) + "\n"


def write_template(
    directory: Path,
    filename: str | None = None,
    schema: FieldSchema = CUSTOMER_SCHEMA,
) -> Path:
    """Write the template into directory and return its path.

    newline="" keeps the file byte-identical to render_template() on every platform.
    """
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / (filename or DEFAULT_TEMPLATE_FILENAME)
    with path.open("w", encoding="utf-8", newline="") as f:
        f.write(render_template(schema))
    return path
