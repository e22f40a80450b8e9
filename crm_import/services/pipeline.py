from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

from ..models.field_schema import CUSTOMER_SCHEMA, FieldSchema
from ..models.import_batch import ImportBatch
from ..models.row_data import ParsedCustomer
from ..models.validation_error import ValidationError
from ..parsing.reader import iter_rows, read_text
from ..validation.validator import validate_row

"""Parse + validate in one pass.

Every data line produces exactly one outcome: a ParsedCustomer or a
ValidationError, never both and never neither. Errors are accumulated and
returned together so a spreadsheet can be fixed in one pass.
"""

__all__ = [
    "build_batch",
    "load_batch",
]

logger = logging.getLogger(__name__)

RowCallback = Callable[[ParsedCustomer | ValidationError], None]


def build_batch(
    content: str,
    source_name: str = "<memory>",
    schema: FieldSchema = CUSTOMER_SCHEMA,
    on_row: RowCallback | None = None,
) -> ImportBatch:
    """Build an ImportBatch from the full text of an uploaded file.

    Args:
        content: File content, already read into memory
        source_name: File name used in logs and error records
        schema: Field schema (read-only)
        on_row: Optional callback invoked once per data line with its outcome

    Returns:
        ImportBatch with records and errors in line order
    """
    parsed = iter_rows(content, schema)
    if parsed.ignored_columns:
        logger.warning(
            "file=%s ignoring unknown columns: %s", source_name, ", ".join(parsed.ignored_columns)
        )

    records: list[ParsedCustomer] = []
    errors: list[ValidationError] = []
    for item in parsed.rows:
        outcome = item if isinstance(item, ValidationError) else validate_row(item, schema)
        if isinstance(outcome, ValidationError):
            errors.append(outcome)
            logger.debug("file=%s row=%d rejected: %s", source_name, outcome.row, outcome.message)
        else:
            records.append(outcome)
        if on_row is not None:
            on_row(outcome)

    batch = ImportBatch(
        records=tuple(records),
        errors=tuple(errors),
        columns=tuple(parsed.columns),
        ignored_columns=tuple(parsed.ignored_columns),
        source_name=source_name,
    )
    logger.debug(
        "file=%s columns=%s valid=%d errors=%d",
        source_name,
        list(batch.columns),
        len(batch.records),
        len(batch.errors),
    )
    return batch


def load_batch(
    path: Path,
    schema: FieldSchema = CUSTOMER_SCHEMA,
    on_row: RowCallback | None = None,
) -> ImportBatch:
    """Read a file and build its batch. Raises FileReadError when unreadable."""
    content = read_text(path)
    return build_batch(content, source_name=path.name, schema=schema, on_row=on_row)
