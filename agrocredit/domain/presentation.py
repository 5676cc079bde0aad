"""Display helpers for the API boundary: status badges, currency and dates"""

from datetime import date, datetime

from agrocredit.config import settings
from agrocredit.domain.pricing import Number, to_money
from agrocredit.utils.date_utils import ensure_utc

_VARIANTS = {
    "approved": "default",
    "paid": "default",
    "pending": "secondary",
    "rejected": "destructive",
    "overdue": "destructive",
}


def status_variant(status: str | None) -> str:
    """Badge variant for an order or payment status; unknown values map to outline"""
    if not status:
        return "outline"
    return _VARIANTS.get(str(status).strip().lower(), "outline")


def format_currency(amount: Number, symbol: str | None = None) -> str:
    """Ksh 10,000.00"""
    value = to_money(amount)
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol or settings.currency_symbol} {abs(value):,.2f}"


def format_date(value: date | datetime | str) -> str:
    """15 Jan 2024"""
    if isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        value = datetime.fromisoformat(text)
    if isinstance(value, datetime):
        value = ensure_utc(value)
    return f"{value.day} {value:%b %Y}"
