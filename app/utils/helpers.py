"""
Helper utilities
"""

import secrets
import string
from decimal import Decimal, ROUND_HALF_UP
from datetime import datetime, timedelta, timezone
from typing import Union

Number = Union[Decimal, float, int, str]

CENT = Decimal("0.01")

def utcnow() -> datetime:
    """Naive UTC timestamp; every stored datetime uses this convention"""
    return datetime.utcnow()

def to_decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # str() keeps floats like 0.1 from dragging binary noise into money math
    return Decimal(str(value))

def round_money(value: Number) -> Decimal:
    """
    Round an amount to cents, half-up

    Args:
        value: Amount in major currency units

    Returns:
        Amount quantized to two decimal places
    """
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)

def to_minor_units(value: Number) -> int:
    """Convert major units to integer minor units (cents/paise)"""
    return int((round_money(value) * 100).to_integral_value(rounding=ROUND_HALF_UP))

def from_minor_units(value: int) -> Decimal:
    """Convert integer minor units to a two-decimal amount"""
    return round_money(Decimal(value) / 100)

def generate_code(prefix: str = "", length: int = 6) -> str:
    """Generate an uppercase alphanumeric code with a random suffix"""
    characters = string.ascii_uppercase + string.digits
    suffix = ''.join(secrets.choice(characters) for _ in range(length))
    return f"{prefix}{suffix}"

def start_of_month(moment: datetime) -> datetime:
    return moment.replace(day=1, hour=0, minute=0, second=0, microsecond=0)

def start_of_previous_month(moment: datetime) -> datetime:
    first = start_of_month(moment)
    return start_of_month(first - timedelta(days=1))

def to_naive_utc(moment: datetime) -> datetime:
    """Convert an aware datetime to naive UTC; naive values are assumed UTC already"""
    if moment.tzinfo is None:
        return moment
    return moment.astimezone(timezone.utc).replace(tzinfo=None)
