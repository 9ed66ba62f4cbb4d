"""
Formatting utilities for receipts and cart panels.
Numbers use Indian digit grouping (12,34,567.89).
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Union, Optional

Number = Union[int, float, Decimal, str, None]


def _group_indian(integer_part: str) -> str:
    """Group digits as thousands, then lakhs and crores (pairs)."""
    if len(integer_part) <= 3:
        return integer_part
    head, tail = integer_part[:-3], integer_part[-3:]
    pairs = []
    while len(head) > 2:
        pairs.insert(0, head[-2:])
        head = head[:-2]
    if head:
        pairs.insert(0, head)
    return ','.join(pairs + [tail])


def _to_decimal(value: Number) -> Optional[Decimal]:
    if value is None or value == "":
        return None
    try:
        if isinstance(value, str):
            value = value.replace(",", "")
        return Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        return None


def num_in(value: Number, decimals: Optional[int] = None) -> str:
    """
    Format a number with Indian grouping.

    Without `decimals`, trailing zeros are dropped.

    Examples:
        num_in(1500) -> "1,500"
        num_in(123456.5) -> "1,23,456.5"
        num_in(Decimal('18.00')) -> "18"
        num_in(None) -> "-"
    """
    num = _to_decimal(value)
    if num is None:
        return "-"

    if decimals is not None:
        num = num.quantize(Decimal(10) ** -decimals, rounding=ROUND_HALF_UP)
    elif num == 0:
        return "0"

    num_str = format(num, 'f')
    if '.' in num_str:
        integer_part, decimal_part = num_str.split('.')
        if decimals is None:
            decimal_part = decimal_part.rstrip('0')
    else:
        integer_part, decimal_part = num_str, ""

    sign_str = ''
    if integer_part.startswith('-'):
        sign_str = '-'
        integer_part = integer_part[1:]

    integer_formatted = _group_indian(integer_part)
    if decimal_part:
        return f"{sign_str}{integer_formatted}.{decimal_part}"
    return f"{sign_str}{integer_formatted}"


def money_in(value: Number, symbol: str = '₹') -> str:
    """
    Format a money amount with exactly two decimals and a currency symbol.

    Examples:
        money_in(236) -> "₹236.00"
        money_in(-0.4) -> "-₹0.40"
        money_in(125000.5) -> "₹1,25,000.50"
    """
    formatted = num_in(value, decimals=2)
    if formatted == "-":
        return formatted
    if formatted.startswith('-'):
        if formatted.strip('-0.,') == '':
            return f"{symbol}{formatted[1:]}"
        return f"-{symbol}{formatted[1:]}"
    return f"{symbol}{formatted}"
