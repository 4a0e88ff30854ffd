from __future__ import annotations
import pytest
from pathlib import Path
from transition_roster.config.loader import ConfigError, load_config


def test_load_config_success(write_config: Path):
    cfg = load_config(write_config)
    assert cfg.workbook == "./data/roster.xlsx"
    assert cfg.timezone == "America/Chicago"
    assert cfg.output.sheet == "TENTATIVE-Version2"
    # output workbook defaults to the source workbook
    assert cfg.output.workbook == "./data/roster.xlsx"
    assert cfg.holidays == ("2025-09-01",)
    assert cfg.teacher_emails["smith@school.org"] == "Smith"
    assert cfg.reminder.recipients == ("counselor@school.org",)
    assert cfg.reminder.milestone_workdays == 10
    assert cfg.smtp is None


def test_default_sources(write_config: Path):
    cfg = load_config(write_config)
    assert cfg.sources["registrations"].sheet == "Registrations SY 24.25"
    assert cfg.sources["contact"].key_column == "Student ID"
    assert cfg.sources["schedules"].multiple is True
    assert cfg.sources["form_responses"].key_column == "Student"
    assert "placement_backup" not in cfg.sources


def test_source_overrides(write_config: Path):
    text = write_config.read_text(encoding="utf-8") + (
        "sources:\n"
        "  registrations:\n    sheet: Registrations SY 25.26\n    header_row: 2\n"
        "  placement_backup:\n    sheet: Placement\n    workbook: ./data/backup.xlsx\n"
    )
    write_config.write_text(text, encoding="utf-8")
    cfg = load_config(write_config)
    assert cfg.sources["registrations"].sheet == "Registrations SY 25.26"
    assert cfg.sources["registrations"].header_row == 2
    backup = cfg.sources["placement_backup"]
    assert cfg.workbook_for(backup) == "./data/backup.xlsx"


def test_placement_backup_needs_sheet(write_config: Path):
    text = write_config.read_text(encoding="utf-8") + "sources:\n  placement_backup:\n    key_column: ID\n"
    write_config.write_text(text, encoding="utf-8")
    with pytest.raises(ConfigError, match="needs a sheet name"):
        load_config(write_config)


def test_holidays_file_merged(write_config: Path, temp_workdir: Path):
    (temp_workdir / "config" / "holidays.txt").write_text(
        "# district calendar\n11/27/2025\n2025-11-28\n\n", encoding="utf-8"
    )
    text = write_config.read_text(encoding="utf-8") + "holidays_file: config/holidays.txt\n"
    write_config.write_text(text, encoding="utf-8")
    cfg = load_config(write_config)
    assert cfg.holidays == ("2025-09-01", "2025-11-27", "2025-11-28")


def test_smtp_section(write_config: Path):
    text = write_config.read_text(encoding="utf-8") + "smtp:\n  host: smtp.school.org\n  sender: aep@school.org\n"
    write_config.write_text(text, encoding="utf-8")
    cfg = load_config(write_config)
    assert cfg.smtp.host == "smtp.school.org"
    assert cfg.smtp.port == 587


def test_load_config_missing_file(temp_workdir: Path):
    missing = temp_workdir / "config" / "not_exists.yml"
    with pytest.raises(ConfigError, match="config file not found"):
        load_config(missing)


def test_load_config_missing_required(write_config: Path):
    text = write_config.read_text(encoding="utf-8").replace("output:\n  sheet: TENTATIVE-Version2\n", "")
    write_config.write_text(text, encoding="utf-8")
    with pytest.raises(ConfigError) as e:
        load_config(write_config)
    assert "config validation failed" in str(e.value) and "required property" in str(e.value)


def test_load_config_extra_field(write_config: Path):
    text = write_config.read_text(encoding="utf-8") + "\nextra_field: not_allowed\n"
    write_config.write_text(text, encoding="utf-8")
    with pytest.raises(ConfigError, match="config validation failed"):
        load_config(write_config)


def test_load_config_unknown_source(write_config: Path):
    text = write_config.read_text(encoding="utf-8") + "sources:\n  grades:\n    sheet: Grades\n"
    write_config.write_text(text, encoding="utf-8")
    with pytest.raises(ConfigError, match="config validation failed"):
        load_config(write_config)


def test_load_config_invalid_yaml(write_config: Path):
    write_config.write_text("workbook: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="invalid yaml"):
        load_config(write_config)
