from __future__ import annotations

import argparse
import os
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import psycopg2
from dotenv import load_dotenv

from roster_import.config.loader import DEFAULT_CONFIG_PATH, ConfigError, load_config
from roster_import.db.classes import ClassFetchError, fetch_classes
from roster_import.logging.init import log_summary, setup_logging
from roster_import.models.class_entity import ClassEntity, ImportScope
from roster_import.models.config_models import ImportConfig
from roster_import.models.import_result import ImportResult, ImportStatus
from roster_import.services.orchestrator import run_import
from roster_import.services.summary import render_error_preview, render_summary_line
from roster_import.services.template import write_template

"""CLI entrypoint.

    python -m roster_import.cli students.xlsx [--class "Class 3"] [--dry-run]
    python -m roster_import.cli --template students_template.csv

Exit codes: 0 all rows imported, 2 partial (rows skipped or a later batch
failed), 1 nothing imported / fatal.
"""

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1


def _resolve_dsn(cfg: ImportConfig) -> str:
    """Connection string resolution order.

    1. DATABASE_URL / PGDSN (after .env is loaded with override)
    2. individual PGHOST / PGPORT / PGUSER / PGPASSWORD / PGDATABASE
    3. the config file's database section for whatever is still missing
    """
    db_cfg = cfg.database
    dsn = os.getenv("DATABASE_URL") or os.getenv("PGDSN") or db_cfg.dsn
    if dsn:
        return dsn
    host = os.getenv("PGHOST", db_cfg.host or "localhost")
    port = os.getenv("PGPORT", str(db_cfg.port) if db_cfg.port else "5432")
    user = os.getenv("PGUSER", db_cfg.user or "postgres")
    password = os.getenv("PGPASSWORD", db_cfg.password or "")
    database = os.getenv("PGDATABASE", db_cfg.database or "postgres")
    dsn = f"host={host} port={port} user={user} dbname={database}"
    if password:
        dsn += f" password={password}"
    return dsn


@contextmanager
def _db_connection(cfg: ImportConfig) -> Iterator[Any]:  # pragma: no cover (thin wrapper)
    """psycopg2 connection + cursor.

    autocommit is on; the orchestrator opens and commits one transaction per
    upsert batch with explicit BEGIN / COMMIT.
    """
    conn = psycopg2.connect(_resolve_dsn(cfg))
    try:
        conn.autocommit = True
        with conn.cursor() as cur:
            yield cur
    finally:
        conn.close()


def _load_env_file(path: Path, override: bool = True) -> None:
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Bulk import a student roster (CSV / XLS / XLSX)")
    p.add_argument("file", nargs="?", type=Path, help="roster file to import")
    p.add_argument(
        "--class",
        dest="class_name",
        default=None,
        help='import onto one class only (rows of other classes are skipped); default "all"',
    )
    p.add_argument("--config", type=Path, default=None, help="config YAML (default config/import.yml)")
    p.add_argument("--dry-run", action="store_true", help="parse and validate only, write nothing")
    p.add_argument("--template", type=Path, default=None, help="write the import template CSV and exit")
    p.add_argument("--user", default="system", help="user id recorded in the audit trail")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    return p.parse_args(argv)


def _load_cfg(path: Path | None) -> ImportConfig:
    if path is not None:
        return load_config(path)
    if DEFAULT_CONFIG_PATH.exists():
        return load_config(DEFAULT_CONFIG_PATH)
    return ImportConfig()


def _offline_classes(cfg: ImportConfig) -> tuple[ClassEntity, ...]:
    return tuple(ClassEntity(id=c.id, name=c.name, sort_order=c.sort_order) for c in cfg.classes)


def _exit_code(result: ImportResult) -> int:
    if result.status is ImportStatus.SUCCESS:
        return EXIT_SUCCESS_ALL
    if result.status is ImportStatus.PARTIAL:
        return EXIT_PARTIAL_FAILURE
    return EXIT_FATAL


def _report(result: ImportResult) -> None:
    logger = setup_logging()
    if result.status is ImportStatus.FAILED:
        logger.error(result.message)
    else:
        logger.info(result.message)
    preview = render_error_preview(result)
    if preview and result.status is not ImportStatus.FAILED:
        logger.warning(f"{len(result.errors)} error(s): {preview}")
    log_summary(render_summary_line(result)[len("SUMMARY "):])


def main(argv: list[str] | None = None) -> int:
    # None only: an empty list from tests must not pick up pytest's own argv
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    logger = setup_logging(debug=args.debug)
    if args.debug:
        logger.debug("debug mode enabled")

    _load_env_file(Path(".env"), override=True)
    try:
        cfg = _load_cfg(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.template is None and args.file is None:
        logger.error("nothing to do: pass a roster file or --template PATH")
        return EXIT_FATAL

    data: bytes | None = None
    if args.template is None:
        if not args.file.is_file():
            logger.error(f"file not found: {args.file}")
            return EXIT_FATAL
        data = args.file.read_bytes()

    scope = ImportScope.for_class(args.class_name)
    offline = args.dry_run or os.getenv("DISABLE_DB_CONNECT") == "1"

    if offline:
        classes = _offline_classes(cfg)
        if not classes:
            logger.error("dry run needs a 'classes' list in the config file")
            return EXIT_FATAL
        if args.template is not None:
            write_template(args.template, classes)
            logger.info(f"template written to {args.template}")
            return EXIT_SUCCESS_ALL
        logger.info(f"mode=dry-run file={args.file.name} scope={scope.class_name or 'all'}")
        result = run_import(args.file.name, data, classes, scope, cursor=None, config=cfg, user_id=args.user)
        _report(result)
        return _exit_code(result)

    try:
        with _db_connection(cfg) as cur:
            classes = fetch_classes(cur, cfg.classes_table)
            if args.template is not None:
                write_template(args.template, classes)
                logger.info(f"template written to {args.template}")
                return EXIT_SUCCESS_ALL
            logger.info(f"mode=live file={args.file.name} scope={scope.class_name or 'all'}")
            result = run_import(args.file.name, data, classes, scope, cursor=cur, config=cfg, user_id=args.user)
    except ClassFetchError as e:
        logger.error(f"classes: {e}")
        return EXIT_FATAL
    except psycopg2.Error as e:
        logger.error(f"database connection failed: {e}")
        return EXIT_FATAL

    _report(result)
    return _exit_code(result)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
