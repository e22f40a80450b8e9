from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Protocol

from psycopg2 import errors as pg_errors

from ..db.batch_insert import BatchInsertError, BatchMetrics, batch_insert, quote_identifier
from ..models.config_models import DEFAULT_PAGE_SIZE, DEFAULT_STATUS, DEFAULT_TABLE
from ..models.field_schema import CUSTOMER_SCHEMA, FieldSchema
from ..models.import_batch import ImportBatch
from ..models.row_data import ParsedCustomer

"""Batch submitter.

Hands a clean ImportBatch to the bulk-create collaborator as a single call and
reports one aggregate outcome. The collaborator is atomic from the pipeline's
point of view: either every record is created or none is.

Each batch carries one idempotency key, reused when the same batch is retried
after a failure, so a collaborator that records keys can drop duplicates.
"""

__all__ = [
    "SubmissionRefusedError",
    "SubmissionResponse",
    "SubmissionOutcome",
    "BulkCustomerClient",
    "PostgresCustomerClient",
    "DryRunCustomerClient",
    "BatchSubmitter",
]

logger = logging.getLogger(__name__)

DEFAULT_FAILURE_MESSAGE = "Failed to import customers"


class SubmissionRefusedError(Exception):
    """Raised when a batch is not eligible for submission (nothing was sent)."""


@dataclass(frozen=True)
class SubmissionResponse:
    """What the bulk-create collaborator reports back."""
    success: bool
    message: str | None = None
    created: int = 0


@dataclass(frozen=True)
class SubmissionOutcome:
    success: bool
    message: str
    created: int
    idempotency_key: str


class BulkCustomerClient(Protocol):
    def bulk_create(self, records: Sequence[ParsedCustomer], idempotency_key: str) -> SubmissionResponse:
        ...


class DryRunCustomerClient:
    """Accepts every record without touching a database (mock mode)."""

    def bulk_create(self, records: Sequence[ParsedCustomer], idempotency_key: str) -> SubmissionResponse:
        logger.debug("dry-run bulk_create key=%s rows=%d", idempotency_key, len(records))
        return SubmissionResponse(success=True, created=len(records))


class PostgresCustomerClient:
    """Bulk-create customers with one INSERT transaction per batch.

    Empty optional cells are stored as NULL and an empty status falls back to
    default_status. With idempotency_table set, the batch key is inserted in
    the same transaction first; a key that already exists means the batch was
    committed earlier and nothing is inserted again. The table needs
    (idempotency_key text primary key, row_count integer).
    """

    def __init__(
        self,
        cursor: Any,
        table: str = DEFAULT_TABLE,
        *,
        default_status: str = DEFAULT_STATUS,
        page_size: int = DEFAULT_PAGE_SIZE,
        idempotency_table: str | None = None,
        schema: FieldSchema = CUSTOMER_SCHEMA,
    ) -> None:
        self.cursor = cursor
        self.table = table
        self.default_status = default_status
        self.page_size = page_size
        self.idempotency_table = idempotency_table
        self.schema = schema
        self.last_metrics: BatchMetrics | None = None

    def insert_columns(self, records: Sequence[ParsedCustomer]) -> list[str]:
        """Schema-ordered columns present in the batch; status is always included."""
        present = {name for r in records for name in r.values}
        present.add("status")
        return [name for name in self.schema.names if name in present]

    def to_row(self, record: ParsedCustomer, columns: Sequence[str]) -> list[Any]:
        row: list[Any] = []
        for col in columns:
            value = record.values.get(col)
            if value == "":
                value = None
            if col == "status" and value is None:
                value = self.default_status
            row.append(value)
        return row

    def _rollback(self) -> None:
        try:
            self.cursor.execute("ROLLBACK")
        except Exception as e:  # pragma: no cover
            logger.warning("rollback failed: %s", e)

    def _claim_key(self, idempotency_key: str, row_count: int) -> bool:
        """Insert the batch key; False when it was already recorded."""
        sql = (
            f"INSERT INTO {quote_identifier(self.idempotency_table)} "
            "(idempotency_key, row_count) VALUES (%s, %s)"
        )
        try:
            self.cursor.execute(sql, (idempotency_key, row_count))
        except pg_errors.UniqueViolation:
            return False
        return True

    def _record_metrics(self, metrics: BatchMetrics) -> None:
        self.last_metrics = metrics

    def bulk_create(self, records: Sequence[ParsedCustomer], idempotency_key: str) -> SubmissionResponse:
        if self.idempotency_table and not self._claim_key(idempotency_key, len(records)):
            self._rollback()
            logger.info("batch %s already imported, skipping insert", idempotency_key)
            return SubmissionResponse(success=True, message="batch already imported", created=0)

        columns = self.insert_columns(records)
        rows = [self.to_row(r, columns) for r in records]
        try:
            result = batch_insert(
                self.cursor,
                table=self.table,
                columns=columns,
                rows=rows,
                page_size=self.page_size,
                metrics_callback=self._record_metrics,
            )
        except BatchInsertError as e:
            self._rollback()
            return SubmissionResponse(success=False, message=str(e))

        try:
            self.cursor.execute("COMMIT")
        except Exception as e:
            self._rollback()
            return SubmissionResponse(success=False, message=f"commit failed: {e}")
        return SubmissionResponse(success=True, created=result.inserted_rows)


class BatchSubmitter:
    """All-or-nothing gate in front of a BulkCustomerClient."""

    def __init__(self, client: BulkCustomerClient) -> None:
        self.client = client
        self._in_flight = False

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    @staticmethod
    def check_submittable(batch: ImportBatch) -> None:
        if batch.errors:
            raise SubmissionRefusedError(
                f"batch has {len(batch.errors)} validation error(s); fix the file and re-upload"
            )
        if not batch.records:
            raise SubmissionRefusedError("batch has no records to import")

    def submit(self, batch: ImportBatch) -> SubmissionOutcome:
        """Submit every record of a clean batch in one collaborator call.

        Raises:
            SubmissionRefusedError: batch has errors, no records, or a
                submission is already in flight
        """
        if self._in_flight:
            raise SubmissionRefusedError("a submission is already in progress")
        self.check_submittable(batch)

        key = batch.batch_id
        self._in_flight = True
        try:
            response = self.client.bulk_create(list(batch.records), key)
        except Exception as e:
            logger.error("bulk create raised: %s", e)
            response = SubmissionResponse(success=False, message=str(e))
        finally:
            self._in_flight = False

        if response.success:
            created = response.created
            message = response.message or f"{created} customers imported"
            return SubmissionOutcome(success=True, message=message, created=created, idempotency_key=key)
        return SubmissionOutcome(
            success=False,
            message=response.message or DEFAULT_FAILURE_MESSAGE,
            created=0,
            idempotency_key=key,
        )
