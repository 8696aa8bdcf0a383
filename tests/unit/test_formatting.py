"""Unit tests for value formatting helpers."""

from datetime import date

import pytest

from rentdocs.utils.formatting import (
    currency,
    long_date,
    money,
    phone_number,
    sanitize_record_code,
    short_date,
    website_with_protocol,
)


@pytest.mark.unit
@pytest.mark.parametrize(
    "raw, expected",
    [
        ("5551234567", "(555) 123-4567"),
        ("555.123.4567", "(555) 123-4567"),
        ("+44 20 7946 0958", "+44 20 7946 0958"),
        (None, ""),
    ],
)
def test_phone_number(raw, expected):
    assert phone_number(raw) == expected


@pytest.mark.unit
def test_money_and_currency():
    assert money(1250.5) == "1250.50"
    assert money(None) == "0.00"
    assert currency(1250.5) == "1,250.50"


@pytest.mark.unit
def test_dates():
    assert long_date(date(2026, 1, 5)) == "January 5, 2026"
    assert long_date("2026-10-18T09:30:00Z") == "October 18, 2026"
    assert short_date(date(2026, 1, 5)) == "01/05/2026"
    assert long_date(None) == ""
    assert short_date("not a date") == ""


@pytest.mark.unit
def test_website_with_protocol():
    assert website_with_protocol("harbor.example") == "http://harbor.example"
    assert website_with_protocol("https://harbor.example") == "https://harbor.example"
    assert website_with_protocol("") == ""


@pytest.mark.unit
def test_sanitize_record_code():
    assert sanitize_record_code("RES 0042/B") == "RES0042B"
    assert sanitize_record_code("INV-2026-07") == "INV-2026-07"
    assert sanitize_record_code(None) == ""
