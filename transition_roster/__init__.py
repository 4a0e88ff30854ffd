"""AEP transition roster: merge student sources into one roster sheet."""

__version__ = "0.1.0"
