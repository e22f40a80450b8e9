from __future__ import annotations

from dataclasses import dataclass

"""Row-level validation error for the customer CSV import."""

__all__ = [
    "ValidationError",
    "ErrorType",
]


class ErrorType:
    """UPPER_SNAKE error classifications shared by row errors and the error log."""
    EMPTY_FILE = "EMPTY_FILE"
    STRUCTURAL_ROW_ERROR = "STRUCTURAL_ROW_ERROR"
    MISSING_REQUIRED_FIELDS = "MISSING_REQUIRED_FIELDS"
    INVALID_FLOOR = "INVALID_FLOOR"
    INVALID_STATUS = "INVALID_STATUS"
    INVALID_DATE = "INVALID_DATE"
    READ_ERROR = "READ_ERROR"
    SUBMISSION_ERROR = "SUBMISSION_ERROR"


@dataclass(frozen=True)
class ValidationError:
    """(row, message) pair describing why a row was excluded.

    Attributes:
        row: 1-based line number counted against the original file, header included
        message: Human-readable reason shown to the user
        error_type: Classification in UPPER_SNAKE_CASE (see ErrorType)
    """
    row: int
    message: str
    error_type: str = ErrorType.STRUCTURAL_ROW_ERROR

    def __str__(self) -> str:
        return f"Row {self.row}: {self.message}"
