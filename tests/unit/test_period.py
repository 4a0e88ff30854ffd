from __future__ import annotations

from transition_roster.models.period import REGULAR_PERIODS, Period, parse_period


def test_parse_period_numeric_values():
    assert parse_period(1) is Period.FIRST
    assert parse_period(8.0) is Period.EIGHTH
    assert parse_period("3rd") is Period.THIRD
    assert parse_period(9) is Period.SPECIAL_EDUCATION
    assert parse_period("Special Ed") is Period.SPECIAL_EDUCATION


def test_parse_period_blank_is_none():
    assert parse_period(None) is None
    assert parse_period("") is None
    assert parse_period(float("nan")) is None


def test_parse_period_unknown_warns(labeled_logs):
    assert parse_period(12) is None
    assert parse_period("lunch") is None
    out = labeled_logs.getvalue()
    assert "WARN unrecognized period value: 12" in out
    assert "WARN unrecognized period value: 'lunch'" in out


def test_legacy_prefixes():
    assert Period.FIRST.legacy_prefix == "1st Period - "
    assert Period.SPECIAL_EDUCATION.legacy_prefix == "Special Education - "
    assert len(REGULAR_PERIODS) == 8
    assert Period.SPECIAL_EDUCATION not in REGULAR_PERIODS
