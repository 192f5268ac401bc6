# src/models/currency.py

"""Currency code lookup and display formatting helpers."""

import math
from datetime import date

from src.models.errors import InvalidAmount

CURRENCY_NAMES: dict[str, str] = {
    "USD": "US Dollar",
    "EUR": "Euro",
    "GBP": "British Pound",
    "JPY": "Japanese Yen",
    "CAD": "Canadian Dollar",
    "AUD": "Australian Dollar",
    "CHF": "Swiss Franc",
    "CNY": "Chinese Yuan",
    "INR": "Indian Rupee",
    "BRL": "Brazilian Real",
    "NZD": "New Zealand Dollar",
    "ZAR": "South African Rand",
    "RUB": "Russian Ruble",
    "KRW": "South Korean Won",
    "SGD": "Singapore Dollar",
    "HKD": "Hong Kong Dollar",
    "MXN": "Mexican Peso",
    "SEK": "Swedish Krona",
    "NOK": "Norwegian Krone",
    "DKK": "Danish Krone",
}

# Result-field sentinels shown instead of a number
INVALID_AMOUNT_TEXT = "Invalid amount"
RATE_UNAVAILABLE_TEXT = "Rate not available"
FETCH_FAILED_TEXT = "Error fetching rates"


def normalize_code(code: str) -> str:
    """Upper-case and strip a currency code."""
    return code.strip().upper()


def currency_name(code: str) -> str:
    """Return the display name for *code*, falling back to the code."""
    return CURRENCY_NAMES.get(code, code)


def parse_amount(raw: str | float | int | None) -> float:
    """Parse user input into a finite, strictly positive float.

    Raises:
        InvalidAmount: for empty, non-numeric, NaN/inf or ``<= 0`` input.
    """
    if raw is None or isinstance(raw, bool):
        raise InvalidAmount(f"Not a number: {raw!r}")
    if isinstance(raw, str):
        raw = raw.strip().replace(",", "")
    try:
        value = float(raw)
    except (TypeError, ValueError):
        raise InvalidAmount(f"Not a number: {raw!r}") from None
    if not math.isfinite(value) or value <= 0:
        raise InvalidAmount(f"Amount must be positive: {raw!r}")
    return value


def format_amount(value: float) -> str:
    """Converted amounts are shown with 4 decimals."""
    return f"{value:.4f}"


def format_rate(value: float) -> str:
    """Rates are shown with 6 decimals."""
    return f"{value:.6f}"


def format_day(day: date) -> str:
    """Format a calendar date the way the rate API expects (YYYY-MM-DD)."""
    return day.strftime("%Y-%m-%d")
