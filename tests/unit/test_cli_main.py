from __future__ import annotations
from pathlib import Path
from unittest.mock import patch

from transition_roster.cli import main as cli_main
from transition_roster.logging.init import reset_logging

CONFIG = ["--config", "config/roster.yml"]


def test_cli_sync_success(write_config, roster_workbook: Path, capsys):
    reset_logging()
    code = cli_main(["sync", *CONFIG, "--today", "2025-08-25"])
    out = capsys.readouterr().out
    assert code == 0
    assert "SUMMARY students=3 active=2 rows=2 skipped=0 errors=0" in out


def test_cli_default_command_is_sync(write_config, roster_workbook: Path, capsys):
    reset_logging()
    assert cli_main(CONFIG) == 0
    assert "SUMMARY students=3" in capsys.readouterr().out


def test_cli_missing_config(temp_workdir: Path, capsys):
    reset_logging()
    code = cli_main(["--config", "config/nope.yml"])
    out = capsys.readouterr().out
    assert code == 1
    assert "ERROR config: config file not found" in out


def test_cli_missing_source_is_fatal(write_config, temp_workdir: Path, capsys):
    reset_logging()
    # no workbook at all
    code = cli_main(CONFIG)
    out = capsys.readouterr().out
    assert code == 1
    assert "ERROR processing: missing required source(s)" in out


def test_cli_partial_failure_exit_code(write_config, roster_workbook: Path, capsys):
    reset_logging()
    with patch("transition_roster.services.row_builder.exit_date_for", side_effect=RuntimeError("boom")):
        code = cli_main(CONFIG)
    out = capsys.readouterr().out
    assert code == 2
    assert "errors=2" in out
    assert "INFO error log: logs" in out


def test_cli_lock_held_is_fatal(write_config, roster_workbook: Path, capsys):
    reset_logging()
    lock = roster_workbook.with_name(roster_workbook.name + ".lock")
    lock.write_text("123", encoding="utf-8")
    code = cli_main(CONFIG)
    assert code == 1
    assert "another run is in progress" in capsys.readouterr().out


def test_cli_debug_mode(write_config, roster_workbook: Path, capsys):
    reset_logging()
    cli_main([*CONFIG, "--debug"])
    assert "DEBUG debug mode enabled" in capsys.readouterr().out


def test_cli_inspect_data(write_config, roster_workbook: Path, capsys):
    reset_logging()
    code = cli_main([*CONFIG, "--inspect-data"])
    out = capsys.readouterr().out
    assert code == 0
    assert "SOURCE: schedules sheet='Schedules'" in out
    assert "cols=['STUDENT ID', 'Per Beg', 'Course Title'" in out
    assert "sample_rows=" in out


def test_cli_remind_dry_run(write_config, roster_workbook: Path, capsys):
    reset_logging()
    code = cli_main(["remind", *CONFIG, "--today", "2025-08-25", "--dry-run"])
    out = capsys.readouterr().out
    assert code == 0
    assert "INFO === DRY RUN EMAIL ===" in out
    assert "Zamora, Ana (111111), Grade: 9" in out
    assert "SUMMARY reminder sent=true students=2" in out


def test_cli_remind_test_recipient(write_config, roster_workbook: Path, capsys):
    reset_logging()
    cli_main(["remind", *CONFIG, "--today", "2025-08-25", "--dry-run", "--test-recipient", "me@test.org"])
    assert "INFO To: me@test.org" in capsys.readouterr().out


def test_cli_remind_weekend(write_config, roster_workbook: Path, capsys):
    reset_logging()
    code = cli_main(["remind", *CONFIG, "--today", "2025-08-23"])
    out = capsys.readouterr().out
    assert code == 0
    assert "SUMMARY reminder sent=false students=0 reason=Weekend" in out


def test_cli_env_file_loaded(write_config, roster_workbook: Path, temp_workdir: Path, monkeypatch):
    reset_logging()
    monkeypatch.setenv("ROSTER_SMTP_USER", "from-process-env")
    (temp_workdir / ".env").write_text("ROSTER_SMTP_USER=aep-bot\n", encoding="utf-8")
    text = write_config.read_text(encoding="utf-8") + "smtp:\n  host: smtp.school.org\n"
    write_config.write_text(text, encoding="utf-8")
    with patch("transition_roster.cli.__main__.SmtpMailer") as mailer_cls:
        cli_main(["remind", *CONFIG, "--today", "2025-08-25"])
    # .env wins over the process environment
    assert mailer_cls.call_args.kwargs["user"] == "aep-bot"
