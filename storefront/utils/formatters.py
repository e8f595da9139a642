"""Display formatting for BRL amounts, dates and Brazilian form fields."""
import re
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Optional, Union

from storefront.services.money import round_money

_NON_DIGITS = re.compile(r"\D")


def _digits(value: Optional[str]) -> str:
    return _NON_DIGITS.sub("", value or "")


def format_currency(value: Any) -> str:
    """
    Format a value as Brazilian Real.

    Args:
        value: Decimal, int or float amount

    Returns:
        "R$ 1234,50"; non numeric input gives "R$ 0,00"
    """
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        return "R$ 0,00"
    try:
        amount = round_money(value)
    except InvalidOperation:
        return "R$ 0,00"
    if not amount.is_finite():
        return "R$ 0,00"
    return f"R$ {amount:.2f}".replace(".", ",")


def _to_datetime(value: Union[int, float, date, datetime]) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    # Millisecond timestamps, as stored by the legacy frontend
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc)


def format_date(value: Union[int, float, date, datetime, None]) -> str:
    """dd/mm/yyyy, or "-" when empty."""
    if not value:
        return "-"
    return _to_datetime(value).strftime("%d/%m/%Y")


def format_datetime(value: Union[int, float, date, datetime, None]) -> str:
    """dd/mm/yyyy, HH:MM:SS, or "-" when empty."""
    if not value:
        return "-"
    return _to_datetime(value).strftime("%d/%m/%Y, %H:%M:%S")


def format_cep(value: Optional[str]) -> str:
    """00000-000"""
    numbers = _digits(value)
    if len(numbers) > 5:
        return f"{numbers[:5]}-{numbers[5:8]}"
    return numbers


def format_phone(value: Optional[str]) -> str:
    """(00) 00000-0000"""
    numbers = _digits(value)
    if len(numbers) <= 2:
        return numbers
    if len(numbers) <= 7:
        return f"({numbers[:2]}) {numbers[2:]}"
    return f"({numbers[:2]}) {numbers[2:7]}-{numbers[7:11]}"


def format_card_number(value: Optional[str]) -> str:
    """0000 0000 0000 0000"""
    numbers = _digits(value)
    return " ".join(numbers[i:i + 4] for i in range(0, len(numbers), 4))


def format_card_expiry(value: Optional[str]) -> str:
    """MM/AA"""
    numbers = _digits(value)
    if len(numbers) > 2:
        return f"{numbers[:2]}/{numbers[2:4]}"
    return numbers


def truncate_text(text: Optional[str], max_length: int) -> str:
    if not text:
        return ""
    if len(text) <= max_length:
        return text
    return f"{text[:max_length]}..."


def calculate_discount(original_price: Any, promo_price: Any) -> int:
    """Whole-number discount percentage; 0 when there is no real discount."""
    if not original_price or not promo_price:
        return 0
    original = Decimal(str(original_price))
    promo = Decimal(str(promo_price))
    if promo >= original:
        return 0
    percent = (1 - promo / original) * 100
    return int(percent.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def generate_order_number(order_id: str) -> str:
    """Short order number shown to the shopper: first 8 chars, upper-cased."""
    return order_id[:8].upper()
