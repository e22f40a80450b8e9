from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

import psycopg2
from dotenv import load_dotenv

from crm_import.config.loader import ConfigError, load_config
from crm_import.db.connection import db_cursor
from crm_import.logging.error_log import ErrorLogBuffer
from crm_import.logging.init import log_summary, setup_logging
from crm_import.models.config_models import ImportConfig
from crm_import.models.processing_result import ImportStatus
from crm_import.parsing.template import write_template
from crm_import.services.orchestrator import (
    ImportRun,
    is_ready_to_submit,
    run_import,
    submit_validated,
    validate_file,
)
from crm_import.services.preview import render_preview
from crm_import.services.submitter import DryRunCustomerClient, PostgresCustomerClient
from crm_import.services.summary import render_summary_line

"""CLI entrypoint.

    crm-import template [--output-dir DIR]
    crm-import validate FILE [--preview N]
    crm-import import FILE [--preview N]

Exit codes: 0 success, 1 fatal (config / read / database / submission),
2 validation errors (nothing submitted).
"""

EXIT_SUCCESS = 0
EXIT_FATAL = 1
EXIT_VALIDATION_ERRORS = 2


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env using python-dotenv.

    override=True lets .env win over the inherited environment so the
    PostgreSQL parameters in .env take priority.
    """
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="crm-import", description="Customer CSV importer")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--config", type=Path, default=None, help="Config YAML (default: config/import.yml if present)")
    sub = p.add_subparsers(dest="command", required=True)

    t = sub.add_parser("template", help="Write the header-only import template")
    t.add_argument("--output-dir", type=Path, default=Path("."), help="Directory for the template file")

    for name, help_text in (
        ("validate", "Parse and validate a CSV file without importing"),
        ("import", "Validate a CSV file and bulk-create its customers"),
    ):
        c = sub.add_parser(name, help=help_text)
        c.add_argument("file", type=Path, help="CSV file to import")
        c.add_argument("--preview", type=int, default=5, help="Valid rows to preview (0 disables)")
    return p.parse_args(argv)


def _report(run: ImportRun, preview: int, logger: logging.Logger) -> int:
    batch = run.batch
    if batch is not None:
        for err in batch.errors:
            logger.error(f"row={err.row} {err.message}")
        if batch.errors:
            logger.error(f"{len(batch.errors)} validation error(s); import disabled until the file is fixed")
        if preview > 0 and batch.records:
            logger.info(f"preview of {min(preview, len(batch.records))}/{len(batch.records)} valid record(s):")
            print(render_preview(batch, limit=preview))
    if run.error_log_path is not None:
        logger.info(f"error log: {run.error_log_path}")

    log_summary(render_summary_line(run.result)[len("SUMMARY "):])

    status = run.result.status
    if status is ImportStatus.BLOCKED:
        return EXIT_VALIDATION_ERRORS
    if status is ImportStatus.FAILED:
        return EXIT_FATAL
    return EXIT_SUCCESS


def _run_import_command(args: argparse.Namespace, cfg: ImportConfig, logger: logging.Logger) -> int:
    error_log = ErrorLogBuffer()
    # DISABLE_DB_CONNECT=1 switches to a dry run without any database
    mock = os.getenv("DISABLE_DB_CONNECT") == "1"
    if mock:
        logger.info("mode=mock (DISABLE_DB_CONNECT=1)")

    # the database is only touched for a clean batch with records
    run = validate_file(args.file, error_log=error_log)
    if not is_ready_to_submit(run):
        return _report(run, args.preview, logger)

    if mock:
        run = submit_validated(run, DryRunCustomerClient(), error_log=error_log)
        return _report(run, args.preview, logger)

    try:
        with db_cursor(cfg.database) as cur:
            logger.info("mode=live")
            client = PostgresCustomerClient(
                cur,
                cfg.table,
                default_status=cfg.default_status,
                page_size=cfg.page_size,
                idempotency_table=cfg.idempotency_table,
            )
            run = submit_validated(run, client, error_log=error_log)
    except (psycopg2.Error, OSError) as e:
        logger.error(f"database: {e}")
        return EXIT_FATAL
    return _report(run, args.preview, logger)


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # None only: an explicit [] must not pick up pytest's own argv
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)

    if args.debug:
        for h in logger.handlers:
            h.setLevel("DEBUG")
        logger.setLevel("DEBUG")
        logger.debug("debug mode enabled")

    _load_env_file(Path(".env"), override=True)

    try:
        cfg = load_config(args.config, required=args.config is not None)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.command == "template":
        path = write_template(args.output_dir, cfg.template_filename)
        logger.info(f"template written: {path}")
        return EXIT_SUCCESS

    if not args.file.exists():
        logger.error(f"file not found: {args.file}")
        return EXIT_FATAL

    if args.command == "validate":
        return _report(run_import(args.file), args.preview, logger)
    return _run_import_command(args, cfg, logger)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
