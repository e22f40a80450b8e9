from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

from ..logging.error_log import ErrorLogBuffer, ErrorRecord
from ..models.field_schema import CUSTOMER_SCHEMA, FieldSchema
from ..models.import_batch import ImportBatch
from ..models.processing_result import ImportResult, ImportStatus
from ..models.validation_error import ErrorType
from ..parsing.reader import FileReadError, read_text
from .pipeline import build_batch
from .progress import ProgressTracker
from .submitter import BatchSubmitter, BulkCustomerClient, SubmissionOutcome, SubmissionRefusedError

"""Service orchestration for one import run.

read -> parse/validate (with progress) -> optional submit -> error log flush.
Row errors, read failures and submission failures all end up in the error
log; only the result object is returned to the caller.
"""

__all__ = [
    "ImportRun",
    "is_ready_to_submit",
    "run_import",
    "submit_validated",
    "validate_file",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImportRun:
    result: ImportResult
    batch: ImportBatch | None = None
    outcome: SubmissionOutcome | None = None
    error_log_path: Path | None = None


def _finish(
    file_name: str,
    status: ImportStatus,
    start_time: datetime,
    batch: ImportBatch | None,
    submitted: int = 0,
    error: str | None = None,
) -> ImportResult:
    end_time = datetime.now(UTC)
    return ImportResult(
        file_name=file_name,
        status=status,
        total_rows=batch.total_rows if batch else 0,
        valid_rows=len(batch.records) if batch else 0,
        error_rows=len(batch.errors) if batch else 0,
        submitted_rows=submitted,
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
        error=error,
    )


def _flush(error_log: ErrorLogBuffer) -> Path | None:
    try:
        return error_log.flush()
    except OSError as e:
        # the run result stands even when the log cannot be written
        logger.warning("error log flush failed: %s", e)
        return None


def validate_file(
    path: Path,
    *,
    schema: FieldSchema = CUSTOMER_SCHEMA,
    error_log: ErrorLogBuffer | None = None,
) -> ImportRun:
    """Read and validate one CSV file without submitting anything.

    The returned status is FAILED (unreadable), BLOCKED (row errors) or
    VALIDATED. Row and read errors are flushed to the error log.
    """
    start_time = datetime.now(UTC)
    error_log = error_log if error_log is not None else ErrorLogBuffer()
    file_name = path.name

    try:
        content = read_text(path)
    except FileReadError as e:
        logger.error("read: %s", e)
        error_log.append(ErrorRecord.create(file=file_name, row=-1, error_type=ErrorType.READ_ERROR, message=str(e)))
        result = _finish(file_name, ImportStatus.FAILED, start_time, None, error=str(e))
        return ImportRun(result=result, error_log_path=_flush(error_log))

    expected_rows = max(content.count("\n"), 1)
    with ProgressTracker(expected_rows, description=f"Validating {file_name}") as progress:
        batch = build_batch(content, source_name=file_name, schema=schema, on_row=lambda _: progress.advance())
        progress.set_postfix(valid=len(batch.records), errors=len(batch.errors))

    logger.info(f"file={file_name} rows={batch.total_rows} valid={len(batch.records)} errors={len(batch.errors)}")

    if batch.errors:
        error_log.extend_from_validation(file_name, batch.errors)
        result = _finish(file_name, ImportStatus.BLOCKED, start_time, batch)
        return ImportRun(result=result, batch=batch, error_log_path=_flush(error_log))

    if not batch.records:
        logger.warning(f"file={file_name} has no records, nothing to import")
    result = _finish(file_name, ImportStatus.VALIDATED, start_time, batch)
    return ImportRun(result=result, batch=batch, error_log_path=_flush(error_log))


def is_ready_to_submit(run: ImportRun) -> bool:
    return run.result.status is ImportStatus.VALIDATED and run.batch is not None and run.batch.is_submittable


def submit_validated(
    run: ImportRun,
    client: BulkCustomerClient,
    *,
    error_log: ErrorLogBuffer | None = None,
) -> ImportRun:
    """Submit the batch of a validated run through client.

    Raises:
        SubmissionRefusedError: the run has no clean, non-empty batch
    """
    if run.batch is None or run.result.status is not ImportStatus.VALIDATED:
        raise SubmissionRefusedError(f"file={run.result.file_name} was not validated")
    error_log = error_log if error_log is not None else ErrorLogBuffer()
    batch = run.batch
    file_name = run.result.file_name
    start_time = run.result.start_time

    outcome = BatchSubmitter(client).submit(batch)
    if outcome.success:
        logger.info(outcome.message)
        result = _finish(file_name, ImportStatus.IMPORTED, start_time, batch, submitted=outcome.created)
    else:
        logger.error(f"submission: {outcome.message}")
        error_log.append(
            ErrorRecord.create(file=file_name, row=-1, error_type=ErrorType.SUBMISSION_ERROR, message=outcome.message)
        )
        result = _finish(file_name, ImportStatus.FAILED, start_time, batch, error=outcome.message)
    return ImportRun(
        result=result,
        batch=batch,
        outcome=outcome,
        error_log_path=_flush(error_log) or run.error_log_path,
    )


def run_import(
    path: Path,
    client: BulkCustomerClient | None = None,
    *,
    schema: FieldSchema = CUSTOMER_SCHEMA,
    error_log: ErrorLogBuffer | None = None,
) -> ImportRun:
    """Validate one CSV file and, when a client is given, submit it.

    Args:
        path: Uploaded CSV file
        client: Bulk-create collaborator. None = validate only
        schema: Field schema
        error_log: Buffer for JSON Lines error records (new one when None)

    Returns:
        ImportRun with the result, the batch and the submission outcome
    """
    error_log = error_log if error_log is not None else ErrorLogBuffer()
    run = validate_file(path, schema=schema, error_log=error_log)
    if client is None or not is_ready_to_submit(run):
        return run
    return submit_validated(run, client, error_log=error_log)
