# Utilities Module
from .formatters import (
    calculate_discount,
    format_card_expiry,
    format_card_number,
    format_cep,
    format_currency,
    format_date,
    format_datetime,
    format_phone,
    generate_order_number,
    truncate_text,
)

__all__ = [
    "calculate_discount",
    "format_card_expiry",
    "format_card_number",
    "format_cep",
    "format_currency",
    "format_date",
    "format_datetime",
    "format_phone",
    "generate_order_number",
    "truncate_text",
]
