from __future__ import annotations

import re
import warnings
from collections.abc import Callable, Iterable
from typing import Any

import pandas as pd

from crm_import.models.field_schema import (
    CUSTOMER_SCHEMA,
    FLOOR_MAX,
    FLOOR_MIN,
    STATUS_CHOICES,
    FieldSchema,
    FieldSpec,
    ValueKind,
)
from crm_import.models.row_data import ParsedCustomer, RawRow
from crm_import.models.validation_error import ErrorType, ValidationError

"""Field validator for customer import rows.

Rules run in a fixed order and stop at the first failure, so a rejected row
contributes exactly one error:

1. required fields (name, phone, floor) non-empty
2. floor is an integer in [1, 10]
3. status, when given, is a known value (case-insensitive)
4. date fields, when given, parse as calendar dates -> rewritten YYYY-MM-DD
"""

__all__ = [
    "MISSING_REQUIRED_MESSAGE",
    "INVALID_FLOOR_MESSAGE",
    "INVALID_STATUS_MESSAGE",
    "normalize_date",
    "validate_row",
    "validate",
]

MISSING_REQUIRED_MESSAGE = "Missing required fields (name, phone, floor)"
INVALID_FLOOR_MESSAGE = f"Invalid floor number (must be {FLOOR_MIN}-{FLOOR_MAX})"
INVALID_STATUS_MESSAGE = f"Invalid status (must be one of: {', '.join(STATUS_CHOICES)})"
DATE_FORMAT = "%Y-%m-%d"

# YYYY-MM-DD or MM/DD/YYYY, optionally followed by a time of day and offset
DATE_SHAPE = re.compile(
    r"(\d{4}-\d{1,2}-\d{1,2}|\d{1,2}/\d{1,2}/\d{4})"
    r"([T ]\d{1,2}:\d{2}(:\d{2}(\.\d+)?)?\s*(Z|[+-]\d{2}:?\d{2})?)?"
)
INTEGER_SHAPE = re.compile(r"-?[0-9]+")

RowCheck = Callable[[RawRow, FieldSchema], ValidationError | None]


def normalize_date(value: str) -> str:
    """Parse a calendar date and return it as YYYY-MM-DD.

    Accepted shapes are YYYY-MM-DD and month-first MM/DD/YYYY (01/05/2024 ->
    2024-01-05), each with an optional time of day that is discarded. Keywords
    such as "today" and partial dates are rejected. Raises ValueError.
    """
    text = value.strip()
    if not text:
        raise ValueError("empty date")
    if DATE_SHAPE.fullmatch(text) is None:
        raise ValueError(f"not a calendar date: {value!r}")
    with warnings.catch_warnings():
        # format inference chatter for single values
        warnings.simplefilter("ignore", UserWarning)
        try:
            ts = pd.to_datetime(text, dayfirst=False)
        except (ValueError, TypeError, OverflowError) as e:
            raise ValueError(f"unparseable date: {value!r}") from e
    if pd.isna(ts):
        raise ValueError(f"unparseable date: {value!r}")
    return ts.strftime(DATE_FORMAT)


def _parse_int(value: str) -> int | None:
    # ASCII digits only: int() also takes "1_0", "+5" and non-Latin digits
    if INTEGER_SHAPE.fullmatch(value) is None:
        return None
    return int(value)


def _check_required(raw: RawRow, schema: FieldSchema) -> ValidationError | None:
    missing = [name for name in schema.required_names if not raw.get(name).strip()]
    if missing:
        return ValidationError(
            row=raw.row_number,
            message=MISSING_REQUIRED_MESSAGE,
            error_type=ErrorType.MISSING_REQUIRED_FIELDS,
        )
    return None


def _integer_ok(spec: FieldSpec, value: str) -> bool:
    number = _parse_int(value)
    if number is None:
        return False
    if spec.min_value is not None and number < spec.min_value:
        return False
    if spec.max_value is not None and number > spec.max_value:
        return False
    return True


def _check_floor(raw: RawRow, schema: FieldSchema) -> ValidationError | None:
    spec = schema.get("floor")
    if spec is not None and not _integer_ok(spec, raw.get("floor").strip()):
        return ValidationError(
            row=raw.row_number,
            message=INVALID_FLOOR_MESSAGE,
            error_type=ErrorType.INVALID_FLOOR,
        )
    return None


def _check_status(raw: RawRow, schema: FieldSchema) -> ValidationError | None:
    spec = schema.get("status")
    value = raw.get("status").strip().lower()
    if spec is None or not value:
        return None
    if value not in (spec.choices or ()):
        return ValidationError(
            row=raw.row_number,
            message=INVALID_STATUS_MESSAGE,
            error_type=ErrorType.INVALID_STATUS,
        )
    return None


def _check_dates(raw: RawRow, schema: FieldSchema) -> ValidationError | None:
    for name in schema.date_names:
        value = raw.get(name)
        if not value.strip():
            continue
        try:
            normalize_date(value)
        except ValueError:
            return ValidationError(
                row=raw.row_number,
                message=f"Invalid date in {name} (expected YYYY-MM-DD)",
                error_type=ErrorType.INVALID_DATE,
            )
    return None


RULES: tuple[RowCheck, ...] = (
    _check_required,
    _check_floor,
    _check_status,
    _check_dates,
)


def _convert(spec: FieldSpec, value: str) -> Any:
    if not value:
        return value
    if spec.kind is ValueKind.INTEGER:
        return int(value)
    if spec.kind is ValueKind.ENUM:
        return value.lower()
    if spec.kind is ValueKind.DATE:
        return normalize_date(value)
    return value


def validate_row(raw: RawRow, schema: FieldSchema = CUSTOMER_SCHEMA) -> ParsedCustomer | ValidationError:
    """Validate one row: a ParsedCustomer when every rule passes, else the first error."""
    for rule in RULES:
        error = rule(raw, schema)
        if error is not None:
            return error

    values: dict[str, Any] = {}
    for column, value in raw.values.items():
        spec = schema.get(column)
        if spec is None:
            continue  # unknown header column
        values[column] = _convert(spec, value.strip())
    return ParsedCustomer(row_number=raw.row_number, values=values)


def validate(
    rows: Iterable[RawRow], schema: FieldSchema = CUSTOMER_SCHEMA
) -> tuple[tuple[ParsedCustomer, ...], tuple[ValidationError, ...]]:
    """Validate rows without shared state; returns (records, errors) in row order."""
    records: list[ParsedCustomer] = []
    errors: list[ValidationError] = []
    for raw in rows:
        outcome = validate_row(raw, schema)
        if isinstance(outcome, ValidationError):
            errors.append(outcome)
        else:
            records.append(outcome)
    return tuple(records), tuple(errors)
