from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

"""Processing result models for the customer CSV import.

ImportStatus tracks one CLI run through its lifecycle and ImportResult
aggregates the numbers rendered on the SUMMARY line.
"""


class ImportStatus(Enum):
    """Outcome of one import run.

    - VALIDATED: file clean, nothing submitted (validate only or no records)
    - BLOCKED: validation errors present, not submittable
    - IMPORTED: batch accepted by the bulk-create collaborator
    - FAILED: read or submission failure
    """
    VALIDATED = "validated"
    BLOCKED = "blocked"
    IMPORTED = "imported"
    FAILED = "failed"


@dataclass(frozen=True)
class ImportResult:
    """Aggregated results of one run (one uploaded file)."""
    file_name: str
    status: ImportStatus
    total_rows: int  # data lines seen
    valid_rows: int
    error_rows: int
    submitted_rows: int
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    error: str | None = None  # read / submission failure summary

    @property
    def throughput_rows_per_sec(self) -> float:
        if self.elapsed_seconds <= 0:
            return 0.0
        return self.total_rows / self.elapsed_seconds
