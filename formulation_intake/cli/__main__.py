from __future__ import annotations

import argparse
import sys
from pathlib import Path

import psycopg2
from dotenv import load_dotenv

from formulation_intake.config.loader import DEFAULT_CONFIG_PATH, ConfigError, load_config
from formulation_intake.db.connection import db_cursor
from formulation_intake.db.ingredient_store import StoreError, StoreMetrics, store_ingredients
from formulation_intake.excel.reader import read_workbook_file
from formulation_intake.ingestion.errors import IngestionError, MissingRequiredColumn
from formulation_intake.ingestion.headers import resolve_headers
from formulation_intake.logging.error_log import ErrorLogBuffer
from formulation_intake.logging.init import log_summary, set_debug, setup_logging
from formulation_intake.models.config_models import IntakeConfig
from formulation_intake.models.upload_file import UploadStatus
from formulation_intake.services.orchestrator import (
    ProcessingError,
    process_all,
    review_file,
    scan_upload_files,
)
from formulation_intake.services.summary import render_summary_line

"""CLI entrypoint.

    formulation-intake [FILES...] [--config PATH] [--debug] [--inspect-data]
                       [--formulation-id ID]

Without FILES every workbook in the configured source_directory is reviewed.
With --formulation-id exactly one file is reviewed and, when accepted, its
ingredients are stored for that formulation.
"""

EXIT_SUCCESS_ALL = 0
EXIT_FATAL = 1
EXIT_REJECTED = 2

SUMMARY_PREFIX = "SUMMARY "


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env (override=True so .env wins over inherited DB variables)."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="formulation-intake", description="Review cosmetic formulation ingredient workbooks"
    )
    p.add_argument("files", nargs="*", type=Path, help="Workbooks to review (default: source_directory)")
    p.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="YAML config path")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument(
        "--inspect-data", action="store_true", help="Print resolved headers & first rows then exit"
    )
    p.add_argument(
        "--formulation-id", help="Store the ingredients of a single accepted file for this formulation"
    )
    return p.parse_args(argv)


def _inspect_data(paths: list[Path]) -> int:
    if not paths:
        print("inspect: no workbooks")
        return EXIT_SUCCESS_ALL
    for f in paths:
        print(f"FILE: {f.name}")
        try:
            table = read_workbook_file(f)
        except IngestionError as e:
            print(f"  read_error: {e}")
            continue
        print(f"  headers={list(table.headers)} rows={len(table.rows)}")
        try:
            mapping = resolve_headers(table.headers)
        except MissingRequiredColumn as e:
            print(f"  mapping_error: {e}")
        else:
            print(f"  mapping={mapping.as_dict()}")
        print("    sample_rows=", [dict(r) for r in table.rows[:3]])
    return EXIT_SUCCESS_ALL


def _target_files(args: argparse.Namespace) -> list[Path] | None:
    if args.files:
        return list(args.files)
    return None


def _store_single(path: Path, formulation_id: str, cfg: IntakeConfig) -> int:
    logger = setup_logging()
    error_log = ErrorLogBuffer()
    upload = review_file(path, cfg, error_log)
    error_log.flush()
    if upload.status is not UploadStatus.ACCEPTED or upload.result is None:
        logger.error(f"rejected: {path.name}: {upload.error}")
        return EXIT_REJECTED
    for warning in upload.result.messages:
        logger.warning(warning)
    def _log_metrics(m: StoreMetrics) -> None:
        logger.debug(f"insert batch_size={m.batch_size} elapsed_sec={m.elapsed_seconds:.3f}")

    try:
        with db_cursor(cfg.database) as cur:
            stored = store_ingredients(
                cur, formulation_id, upload.result.records, metrics_callback=_log_metrics
            )
    except (StoreError, psycopg2.Error) as e:
        logger.error(f"store: {e}")
        return EXIT_FATAL
    log_summary(
        f"formulation={formulation_id} file={path.name} records={stored.inserted_rows} "
        f"warnings={upload.diagnostic_count}"
    )
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # None のときのみ sys.argv を読む (テストから main([]) を呼ぶため)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"), override=True)

    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.debug:
        set_debug(logger)
        logger.debug("debug mode enabled")

    if args.inspect_data:
        paths = _target_files(args)
        if paths is None:
            try:
                paths = scan_upload_files(Path(cfg.source_directory), cfg.upload.allowed_extensions)
            except ProcessingError as e:
                logger.error(f"inspect: {e}")
                return EXIT_FATAL
        return _inspect_data(paths)

    if args.formulation_id:
        if len(args.files) != 1:
            logger.error("--formulation-id requires exactly one file")
            return EXIT_FATAL
        return _store_single(args.files[0], args.formulation_id, cfg)

    paths = _target_files(args)
    if paths is None:
        logger.info(f"Reviewing files from: {cfg.source_directory}")
    try:
        result = process_all(cfg, paths=paths)
    except ProcessingError as e:
        logger.error(f"processing: {e}")
        return EXIT_FATAL

    summary_line = render_summary_line(result)
    log_summary(summary_line[len(SUMMARY_PREFIX):])

    if result.rejected_files > 0:
        return EXIT_REJECTED
    return EXIT_SUCCESS_ALL


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
