from __future__ import annotations

import json
from pathlib import Path

import pytest

from crm_import.logging.error_log import ErrorLogBuffer
from crm_import.logging.init import setup_logging
from crm_import.models.processing_result import ImportStatus
from crm_import.services.orchestrator import is_ready_to_submit, run_import, submit_validated, validate_file
from crm_import.services.submitter import DryRunCustomerClient, SubmissionRefusedError, SubmissionResponse


class RejectingClient:
    def bulk_create(self, records, idempotency_key):
        return SubmissionResponse(success=False, message="phone 9998887776 already exists")


def _log_rows(path: Path) -> list[dict]:
    return [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]


def test_validate_only_clean_file(write_csv, clean_csv: str):
    run = run_import(write_csv("customers.csv", clean_csv))
    assert run.result.status is ImportStatus.VALIDATED
    assert run.result.total_rows == 3
    assert run.result.valid_rows == 3
    assert run.result.submitted_rows == 0
    assert run.outcome is None
    assert run.error_log_path is None


def test_errors_block_submission_and_are_logged(write_csv, scenario_csv: str):
    run = run_import(write_csv("scenario.csv", scenario_csv), DryRunCustomerClient())
    assert run.result.status is ImportStatus.BLOCKED
    assert run.result.valid_rows == 1
    assert run.result.error_rows == 2
    assert run.outcome is None
    rows = _log_rows(run.error_log_path)
    assert [(r["file"], r["row"], r["error_type"]) for r in rows] == [
        ("scenario.csv", 3, "MISSING_REQUIRED_FIELDS"),
        ("scenario.csv", 4, "INVALID_FLOOR"),
    ]


def test_clean_file_imported(write_csv, clean_csv: str):
    run = run_import(write_csv("customers.csv", clean_csv), DryRunCustomerClient())
    assert run.result.status is ImportStatus.IMPORTED
    assert run.result.submitted_rows == 3
    assert run.outcome.message == "3 customers imported"
    assert run.error_log_path is None


def test_submission_failure_logged_as_file_level_error(write_csv, clean_csv: str):
    run = run_import(write_csv("customers.csv", clean_csv), RejectingClient())
    assert run.result.status is ImportStatus.FAILED
    assert run.result.error == "phone 9998887776 already exists"
    (rec,) = _log_rows(run.error_log_path)
    assert rec["row"] == -1
    assert rec["error_type"] == "SUBMISSION_ERROR"
    assert rec["message"] == "phone 9998887776 already exists"


def test_read_error(temp_workdir: Path):
    (temp_workdir / "data" / "latin1.csv").write_bytes(b"name,phone,floor\nJos\xe9,1,2\n")
    run = run_import(temp_workdir / "data" / "latin1.csv")
    assert run.result.status is ImportStatus.FAILED
    assert run.batch is None
    (rec,) = _log_rows(run.error_log_path)
    assert rec["error_type"] == "READ_ERROR"
    assert rec["row"] == -1


def test_header_only_file_has_nothing_to_import(write_csv):
    run = run_import(write_csv("empty.csv", "name,phone,floor\n"), DryRunCustomerClient())
    assert run.result.status is ImportStatus.VALIDATED
    assert run.outcome is None


def test_empty_file_blocked(write_csv):
    run = run_import(write_csv("blank.csv", "\n\n"), DryRunCustomerClient())
    assert run.result.status is ImportStatus.BLOCKED
    assert _log_rows(run.error_log_path)[0]["error_type"] == "EMPTY_FILE"


def test_custom_error_log_buffer(write_csv, scenario_csv: str, tmp_path: Path):
    buf = ErrorLogBuffer(logs_dir=tmp_path / "custom")
    run = run_import(write_csv("scenario.csv", scenario_csv), error_log=buf)
    assert run.error_log_path.parent == tmp_path / "custom"


def test_header_only_file_warns_when_validating(write_csv, capsys):
    setup_logging()
    run = run_import(write_csv("empty.csv", "name,phone,floor\n"))
    assert run.result.status is ImportStatus.VALIDATED
    assert "WARN file=empty.csv has no records, nothing to import" in capsys.readouterr().out


def test_validate_then_submit(write_csv, clean_csv: str):
    buf = ErrorLogBuffer()
    validated = validate_file(write_csv("customers.csv", clean_csv), error_log=buf)
    assert validated.result.status is ImportStatus.VALIDATED
    assert is_ready_to_submit(validated)

    run = submit_validated(validated, RejectingClient(), error_log=buf)
    assert run.result.status is ImportStatus.FAILED
    assert run.result.start_time == validated.result.start_time
    assert run.error_log_path is not None


def test_submit_validated_refuses_blocked_run(write_csv, scenario_csv: str):
    blocked = validate_file(write_csv("scenario.csv", scenario_csv))
    assert not is_ready_to_submit(blocked)
    with pytest.raises(SubmissionRefusedError):
        submit_validated(blocked, DryRunCustomerClient())
