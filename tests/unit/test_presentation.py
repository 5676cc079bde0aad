"""Unit tests for status badges and display formatting"""

import pytest
from datetime import date, datetime, timezone
from decimal import Decimal
from agrocredit.domain.presentation import format_currency, format_date, status_variant


@pytest.mark.parametrize(
    "status, variant",
    [
        ("approved", "default"),
        ("paid", "default"),
        ("pending", "secondary"),
        ("rejected", "destructive"),
        ("overdue", "destructive"),
        ("unknown", "outline"),
        ("", "outline"),
        (None, "outline"),
    ],
)
def test_status_variant(status, variant):
    assert status_variant(status) == variant


def test_status_variant_case_insensitive():
    assert status_variant("APPROVED") == status_variant("approved") == "default"
    assert status_variant("Overdue") == "destructive"


def test_format_currency():
    assert format_currency(Decimal("10000")) == "Ksh 10,000.00"
    assert format_currency(1234567.891) == "Ksh 1,234,567.89"
    assert format_currency("-50", symbol="KES") == "-KES 50.00"


def test_format_date():
    assert format_date(date(2024, 1, 5)) == "5 Jan 2024"
    assert format_date(datetime(2024, 3, 31, 23, 0, tzinfo=timezone.utc)) == "31 Mar 2024"
    assert format_date("2024-02-14T08:00:00+00:00") == "14 Feb 2024"


def test_format_date_accepts_zulu_suffix():
    assert format_date("2024-02-14T23:30:00Z") == "14 Feb 2024"
    assert format_date("2024-01-15T00:00:00.000Z") == "15 Jan 2024"
