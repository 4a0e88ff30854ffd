from __future__ import annotations

from dataclasses import dataclass, field

"""Config dataclasses for the transition roster.

Built by ``transition_roster.config.loader.load_config`` from the YAML file.
SMTP credentials never live here; they are read from the environment.
"""

__all__ = [
    "SourceConfig",
    "OutputConfig",
    "ReminderConfig",
    "SmtpConfig",
    "RosterConfig",
    "SOURCE_NAMES",
    "REQUIRED_SOURCES",
]

# Order matters for inspect output only.
SOURCE_NAMES: tuple[str, ...] = (
    "tentative",
    "registrations",
    "contact",
    "schedules",
    "form_responses",
    "attendance",
    "entry_withdrawal",
    "withdrawn",
    "wd_other",
    "placement_backup",
)

# A run aborts when one of these sheets is missing.
REQUIRED_SOURCES: frozenset[str] = frozenset({
    "tentative",
    "registrations",
    "contact",
    "schedules",
    "form_responses",
    "attendance",
    "entry_withdrawal",
    "withdrawn",
    "wd_other",
})


@dataclass(frozen=True)
class SourceConfig:
    """One source sheet.

    ``multiple`` keeps every row per student; otherwise a repeated key keeps
    the last row seen and logs a warning.
    """
    name: str
    sheet: str
    key_column: str
    multiple: bool = False
    header_row: int = 1  # 1-based
    workbook: str | None = None  # overrides RosterConfig.workbook


@dataclass(frozen=True)
class OutputConfig:
    workbook: str
    sheet: str


@dataclass(frozen=True)
class ReminderConfig:
    recipients: tuple[str, ...] = ()
    subject: str = "Transition Reminder: Today's List of Students with 10 Days at NAHS"
    form_url: str = "https://forms.gle/1NirWqZkvcABGgYc9"
    milestone_workdays: int = 10
    due_workdays: int = 2


@dataclass(frozen=True)
class SmtpConfig:
    host: str
    port: int = 587
    sender: str | None = None
    use_tls: bool = True


@dataclass(frozen=True)
class RosterConfig:
    """Root configuration object."""
    workbook: str
    sources: dict[str, SourceConfig]
    output: OutputConfig
    timezone: str = "America/Chicago"
    holidays: tuple[str, ...] = ()  # YYYY-MM-DD
    case_manager_course: str = "Case Manag HS"
    teacher_emails: dict[str, str] = field(default_factory=dict)
    reminder: ReminderConfig = field(default_factory=ReminderConfig)
    smtp: SmtpConfig | None = None

    def workbook_for(self, source: SourceConfig) -> str:
        return source.workbook or self.workbook
