from __future__ import annotations

import logging
from pathlib import Path

from ..models.field_schema import CUSTOMER_SCHEMA, FieldSchema
from ..models.import_batch import ImportBatch
from ..parsing.reader import FileReadError, read_text
from .pipeline import build_batch
from .submitter import BatchSubmitter, BulkCustomerClient, SubmissionOutcome, SubmissionRefusedError

"""Import session: the lifecycle of one user's import attempt.

- selecting a file replaces the current batch wholesale
- a read error clears the batch and is kept as last_error
- submission is refused while any validation error exists
- a successful submission discards the batch, a failed one keeps it for retry
- close() discards all state
"""

__all__ = [
    "ImportSession",
]

logger = logging.getLogger(__name__)


class ImportSession:
    """Owns the single in-memory ImportBatch of one import attempt."""

    def __init__(self, client: BulkCustomerClient, schema: FieldSchema = CUSTOMER_SCHEMA) -> None:
        self.schema = schema
        self.submitter = BatchSubmitter(client)
        self.batch: ImportBatch | None = None
        self.last_error: str | None = None
        self.last_outcome: SubmissionOutcome | None = None

    def load_content(self, content: str, source_name: str = "<memory>") -> ImportBatch:
        self.batch = build_batch(content, source_name=source_name, schema=self.schema)
        self.last_error = None
        self.last_outcome = None
        return self.batch

    def select_file(self, path: Path) -> ImportBatch | None:
        """Read and validate a file; None when it could not be read."""
        try:
            content = read_text(path)
        except FileReadError as e:
            logger.error("read: %s", e)
            self.batch = None
            self.last_error = str(e)
            self.last_outcome = None
            return None
        return self.load_content(content, source_name=path.name)

    @property
    def can_submit(self) -> bool:
        return (
            self.batch is not None
            and self.batch.is_submittable
            and not self.submitter.in_flight
        )

    def submit(self) -> SubmissionOutcome:
        """Submit the current batch.

        Raises:
            SubmissionRefusedError: no batch selected or the batch is not clean
        """
        if self.batch is None:
            raise SubmissionRefusedError("no file selected")
        outcome = self.submitter.submit(self.batch)
        self.last_outcome = outcome
        if outcome.success:
            logger.info(outcome.message)
            self.batch = None
            self.last_error = None
        else:
            logger.error("submission: %s", outcome.message)
            self.last_error = outcome.message
        return outcome

    def close(self) -> None:
        self.batch = None
        self.last_error = None
        self.last_outcome = None
