"""Tests for summary formatting helpers."""

from datetime import datetime, timedelta, timezone

from repomgr.theme import GREEN, MUTED, RED, YELLOW, age_text, format_age

NOW = datetime(2026, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


def test_format_age_units():
    assert format_age(NOW - timedelta(minutes=5), NOW) == "5m"
    assert format_age(NOW - timedelta(hours=3, minutes=10), NOW) == "3h"
    assert format_age(NOW - timedelta(days=12), NOW) == "12d"
    assert format_age(NOW - timedelta(days=800), NOW) == "2y"


def test_format_age_unknown_and_future():
    assert format_age(None, NOW) == "—"
    assert format_age(NOW + timedelta(minutes=1), NOW) == "now"


def test_age_text_colors():
    assert GREEN in str(age_text(NOW - timedelta(days=2), NOW).style)
    assert YELLOW in str(age_text(NOW - timedelta(days=90), NOW).style)
    assert RED in str(age_text(NOW - timedelta(days=400), NOW).style)
    assert MUTED in str(age_text(None, NOW).style)
