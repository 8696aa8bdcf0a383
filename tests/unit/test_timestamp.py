"""Unit tests for timestamp helpers."""

from datetime import date, datetime, timedelta

import pytest

from rentdocs.utils.timestamp import _format_relative_time, format_timestamp, today

REFERENCE = datetime(2026, 10, 18, 12, 0, 0)


@pytest.mark.unit
@pytest.mark.parametrize(
    "offset, expected",
    [
        (timedelta(seconds=30), "30s ago"),
        (timedelta(minutes=15, seconds=5), "15m ago"),
        (timedelta(hours=2), "2h ago"),
        (timedelta(days=5, hours=3), "5d ago"),
        (timedelta(hours=-2), "2h from now"),
    ],
)
def test_relative_time(offset, expected):
    assert _format_relative_time(REFERENCE - offset, reference=REFERENCE) == expected


@pytest.mark.unit
def test_absolute_and_unparseable():
    assert format_timestamp("2026-10-18T18:45:40.572549") == "2026-10-18 18:45:40"
    assert format_timestamp("yesterday") == "yesterday"


@pytest.mark.unit
def test_today_is_iso_date():
    assert today(date(2026, 1, 2)) == "2026-01-02"
