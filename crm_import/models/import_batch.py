from __future__ import annotations

import uuid
from dataclasses import dataclass, field

from .row_data import ParsedCustomer
from .validation_error import ValidationError

"""ImportBatch domain model.

An ImportBatch is the in-memory result of one import attempt: every valid
record plus every row error, in file order. It is created fresh per file
selection and replaced wholesale on re-selection.
"""

__all__ = [
    "ImportBatch",
]


@dataclass(frozen=True)
class ImportBatch:
    """Result of parsing and validating one uploaded file.

    Submission is all-or-nothing: a batch with any error is not submittable,
    even when some rows parsed successfully.
    """
    records: tuple[ParsedCustomer, ...] = ()
    errors: tuple[ValidationError, ...] = ()
    columns: tuple[str, ...] = ()  # header as declared in the file
    ignored_columns: tuple[str, ...] = ()  # header names outside the schema
    source_name: str = "<memory>"
    # idempotency key, reused when the same batch is resubmitted
    batch_id: str = field(default_factory=lambda: uuid.uuid4().hex, compare=False)

    @property
    def is_clean(self) -> bool:
        return not self.errors

    @property
    def is_submittable(self) -> bool:
        return self.is_clean and bool(self.records)

    @property
    def total_rows(self) -> int:
        """Data lines seen (valid records + rejected rows)."""
        return len(self.records) + len(self.errors)

    def error_messages(self) -> list[str]:
        return [str(e) for e in self.errors]
