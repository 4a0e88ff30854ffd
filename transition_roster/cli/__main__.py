from __future__ import annotations

import argparse
import os
import sys
from datetime import date
from pathlib import Path

from dotenv import load_dotenv

from transition_roster.config.loader import DEFAULT_CONFIG_PATH, ConfigError, load_config
from transition_roster.logging.error_log import ErrorLogBuffer
from transition_roster.logging.init import log_summary, set_debug, setup_logging
from transition_roster.models.config_models import RosterConfig
from transition_roster.services.mailer import LogMailer, Mailer, SmtpMailer
from transition_roster.services.orchestrator import ProcessingError, merge_students, process_all, run_lock
from transition_roster.services.reminder import run_daily
from transition_roster.services.summary import render_reminder_line, render_summary_line
from transition_roster.utils.dates import today_in

"""CLI entrypoint.

    python -m transition_roster.cli [sync|remind] [--config PATH] [--debug]

``sync`` rebuilds the roster sheet, ``remind`` sends the ten-day reminder.
Exit codes: 0 success, 2 partial (skipped students or error rows), 1 fatal.
"""

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env using python-dotenv; its values win over the process env."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_date(text: str) -> date:
    try:
        return date.fromisoformat(text)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD, got {text!r}") from e


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="AEP transition roster merge and reminders")
    p.add_argument("command", nargs="?", choices=("sync", "remind"), default="sync")
    p.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="YAML config path")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--inspect-data", action="store_true", help="Print source headers & first rows then exit")
    p.add_argument("--today", type=_parse_date, help="Override today's date (YYYY-MM-DD)")
    p.add_argument("--dry-run", action="store_true", help="remind: print the e-mail instead of sending")
    p.add_argument("--test-recipient", action="append", default=None, help="remind: send only to this address")
    p.add_argument("--keep-reenrolled", action="store_true",
                   help="sync: keep withdrawn students that have active schedule rows")
    return p.parse_args(argv)


def _inspect_data(cfg: RosterConfig) -> int:
    from transition_roster.sources.loader import SourceLoader

    loader = SourceLoader(cfg)
    for name, source in cfg.sources.items():
        print(f"SOURCE: {name} sheet='{source.sheet}' workbook={cfg.workbook_for(source)}")
        sheet = loader.read_sheet(source)
        if sheet is None:
            print("  missing")
            continue
        print(f"  cols={sheet.columns}")
        safe_rows = []
        for r in sheet.rows[:3]:
            safe_rows.append({k: (v.isoformat() if hasattr(v, "isoformat") else v) for k, v in r.items()})
        print("  sample_rows=", safe_rows)
    return EXIT_SUCCESS_ALL


def _mailer(cfg: RosterConfig, dry_run: bool) -> Mailer:
    if dry_run or cfg.smtp is None:
        return LogMailer()
    return SmtpMailer(
        cfg.smtp,
        user=os.getenv("ROSTER_SMTP_USER"),
        password=os.getenv("ROSTER_SMTP_PASSWORD"),
    )


def _sync(cfg: RosterConfig, args: argparse.Namespace, logger) -> int:
    errors = ErrorLogBuffer()
    try:
        with run_lock(Path(cfg.output.workbook)):
            result = process_all(
                cfg, today=args.today, errors=errors, keep_reenrolled=args.keep_reenrolled
            )
    except ProcessingError as e:
        logger.error(f"processing: {e}")
        errors.flush()
        return EXIT_FATAL
    log_path = errors.flush()
    if log_path is not None:
        logger.info(f"error log: {log_path}")

    # log_summary adds the "SUMMARY " prefix
    log_summary(render_summary_line(result)[len("SUMMARY "):])
    return EXIT_PARTIAL_FAILURE if result.has_failures else EXIT_SUCCESS_ALL


def _remind(cfg: RosterConfig, args: argparse.Namespace, logger) -> int:
    today = args.today or today_in(cfg.timezone)
    if args.test_recipient:
        logger.debug(f"test recipients: {', '.join(args.test_recipient)}")
    result = run_daily(
        cfg,
        today,
        _mailer(cfg, args.dry_run),
        lambda: merge_students(cfg),
        test_recipients=args.test_recipient,
    )
    log_summary(render_reminder_line(result)[len("SUMMARY "):])
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # None only: an explicit [] from tests must not fall back to sys.argv
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"), override=True)

    if args.debug:
        set_debug(logger)

    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.inspect_data:
        return _inspect_data(cfg)

    if args.command == "remind":
        return _remind(cfg, args, logger)
    logger.info(f"Processing roster from: {cfg.workbook}")
    return _sync(cfg, args, logger)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
