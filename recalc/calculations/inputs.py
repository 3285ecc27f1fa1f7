"""
Input Normalization

Lenient numeric coercion shared by every calculator. Form posts arrive as
numbers, numeric strings or empty strings; absent or non-numeric values
count as zero rather than raising.
"""

import math
from dataclasses import fields
from datetime import date, datetime
from typing import Any, Optional

from dateutil import parser as date_parser


def to_float(value: Any, default: float = 0.0) -> float:
    """
    Coerce a form value to float.

    Args:
        value: Number, numeric string ("6.5", "1,200", "5%"), None or ""
        default: Value used when the input is empty or not numeric

    Returns:
        Finite float
    """
    if value is None:
        return default

    if isinstance(value, str):
        cleaned = value.strip().replace(",", "").rstrip("%").strip()
        if not cleaned:
            return default
        try:
            number = float(cleaned)
        except ValueError:
            return default
    else:
        try:
            number = float(value)
        except (TypeError, ValueError):
            return default

    if math.isnan(number) or math.isinf(number):
        return default
    return number


def to_int(value: Any, default: int = 0) -> int:
    """Coerce a form value to int (truncating toward zero)."""
    return int(to_float(value, float(default)))


def to_optional_float(value: Any) -> Optional[float]:
    """Coerce a value, keeping None for empty input ("derive it for me")."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    number = to_float(value, default=math.nan)
    return None if math.isnan(number) else number


def pct(value: Any) -> float:
    """Convert a whole-number percent (6 = 6%) to a fraction."""
    return to_float(value) / 100


def parse_rate(value: Any) -> float:
    """
    Normalize a rate that may be a whole percent or a fraction.

    Values above 1 are read as whole percents (5 -> 0.05), values at or
    below 1 as fractions already (0.05 -> 0.05). Negative or non-numeric
    values become 0.
    """
    number = to_float(value, default=math.nan)
    if math.isnan(number) or number < 0:
        return 0.0
    return number / 100 if number > 1 else number


def to_date(value: Any) -> date:
    """Parse an ISO date string or pass a date through; None means today."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return date.today()
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date_parser.isoparse(str(value)).date()


def month_index(when: Any, start: Any, horizon_months: int) -> int:
    """
    Month offset of a date relative to a start date.

    Only calendar year and month count; the result is clamped into
    [0, horizon_months - 1].
    """
    d = to_date(when)
    s = to_date(start)
    idx = (d.year - s.year) * 12 + (d.month - s.month)
    return max(0, min(horizon_months - 1, idx))


def coerce_numeric_fields(record: Any) -> None:
    """
    Apply the lenient numeric policy to every numeric field of a dataclass.

    float/int fields are coerced with to_float/to_int, Optional[float]
    fields keep None for empty input.
    """
    for f in fields(record):
        value = getattr(record, f.name)
        if f.type is float:
            setattr(record, f.name, to_float(value))
        elif f.type is int:
            setattr(record, f.name, to_int(value))
        elif f.type == Optional[float]:
            setattr(record, f.name, to_optional_float(value))
        elif f.type == Optional[int]:
            number = to_optional_float(value)
            setattr(record, f.name, None if number is None else int(number))


def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Divide, returning default when the denominator is zero."""
    if denominator == 0:
        return default
    return numerator / denominator

