from __future__ import annotations

import json
from datetime import date
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from transition_roster.models.config_models import (
    SOURCE_NAMES,
    OutputConfig,
    ReminderConfig,
    RosterConfig,
    SmtpConfig,
    SourceConfig,
)
from transition_roster.utils.dates import normalize_holidays

"""Config loader.

Responsibilities:
- Load the YAML config (default ``config/roster.yml``)
- Validate it against ``config_schema.json`` shipped next to this module
- Apply defaults: timezone America/Chicago, the district sheet names for
  every source, reminder wording and schedule
- Normalize holidays (inline list and/or ``holidays_file``) to YYYY-MM-DD
"""

__all__ = [
    "ConfigError",
    "DEFAULT_CONFIG_PATH",
    "DEFAULT_SOURCES",
    "load_config",
]

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")
DEFAULT_CONFIG_PATH = Path("config/roster.yml")

# name -> (sheet, key column, multiple rows per student)
DEFAULT_SOURCES: dict[str, tuple[str, str, bool]] = {
    "tentative": ("TENTATIVE", "STUDENT ID", False),
    "registrations": ("Registrations SY 24.25", "STUDENT ID", False),
    "contact": ("ContactInfo", "Student ID", False),
    "schedules": ("Schedules", "STUDENT ID", True),
    "form_responses": ("Form Responses 1", "Student", True),
    "attendance": ("Alt HS Attendance & Enrollment Count", "STUDENT ID", False),
    "entry_withdrawal": ("Entry_Withdrawal", "STUDENT ID", False),
    "withdrawn": ("Withdrawn", "STUDENT ID", False),
    "wd_other": ("WD Other", "STUDENT ID", False),  # xlsx titles cannot contain "/"
}


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: the schema file is missing or invalid, or the config
            fails validation
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")
    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def _holiday_strings(data: dict[str, Any]) -> None:
    # YAML reads unquoted 2025-09-01 as a date
    raw = data.get("holidays")
    if isinstance(raw, list):
        data["holidays"] = [v.isoformat() if isinstance(v, date) else v for v in raw]


def _read_holidays_file(path: Path) -> list[str]:
    if not path.exists():
        raise ConfigError(f"holidays file not found: {path}")
    lines = path.read_text(encoding="utf-8").splitlines()
    return [ln.strip() for ln in lines if ln.strip() and not ln.strip().startswith("#")]


def _sources(raw: dict[str, Any]) -> dict[str, SourceConfig]:
    out: dict[str, SourceConfig] = {}
    for name in SOURCE_NAMES:
        override = raw.get(name)
        default = DEFAULT_SOURCES.get(name)
        if default is None and override is None:
            continue  # optional source not configured
        sheet, key, multiple = default or (None, "STUDENT ID", False)
        override = override or {}
        sheet = override.get("sheet", sheet)
        if sheet is None:
            raise ConfigError(f"source '{name}' needs a sheet name")
        out[name] = SourceConfig(
            name=name,
            sheet=sheet,
            key_column=override.get("key_column", key),
            multiple=override.get("multiple", multiple),
            header_row=override.get("header_row", 1),
            workbook=override.get("workbook"),
        )
    return out


def load_config(path: Path = DEFAULT_CONFIG_PATH) -> RosterConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError("config validation failed: top level must be a mapping")

    _holiday_strings(data)
    _validate_config_schema(data)

    holidays = list(data.get("holidays", []))
    if "holidays_file" in data:
        holidays.extend(_read_holidays_file(Path(data["holidays_file"])))

    out_raw = data["output"]
    rem_raw = data.get("reminder", {})
    reminder = ReminderConfig(
        recipients=tuple(rem_raw.get("recipients", ())),
        **{k: rem_raw[k] for k in ("subject", "form_url", "milestone_workdays", "due_workdays") if k in rem_raw},
    )
    smtp_raw = data.get("smtp")
    smtp = SmtpConfig(**smtp_raw) if smtp_raw else None

    return RosterConfig(
        workbook=data["workbook"],
        sources=_sources(data.get("sources", {})),
        output=OutputConfig(
            workbook=out_raw.get("workbook", data["workbook"]),
            sheet=out_raw["sheet"],
        ),
        timezone=data.get("timezone", "America/Chicago"),
        holidays=tuple(sorted(normalize_holidays(holidays))),
        case_manager_course=data.get("case_manager_course", "Case Manag HS"),
        teacher_emails=dict(data.get("teacher_emails", {})),
        reminder=reminder,
        smtp=smtp,
    )
