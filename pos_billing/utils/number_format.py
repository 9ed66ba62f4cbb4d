"""Parsing of operator-typed numbers (discounts, quantities)."""
import re
from decimal import Decimal, InvalidOperation

# 1,23,456.75 / 123456.75 / 10 / -5
NUMBER_PATTERN = re.compile(r"^-?(?:\d{1,3}(?:,\d{2,3})*|\d+)(?:\.\d+)?$")


def parse_decimal(value) -> Decimal:
    """
    Parse a number typed by the operator into Decimal.

    Commas are accepted as digit grouping (Indian or western). Numeric
    values (int, float, Decimal) pass through.

    Raises:
        ValueError: if the value is empty or not a number.
    """
    if value is None or isinstance(value, bool):
        raise ValueError('Invalid number')

    if isinstance(value, (int, float, Decimal)):
        try:
            result = Decimal(str(value))
        except InvalidOperation:
            raise ValueError('Invalid number')
        if not result.is_finite():
            raise ValueError('Invalid number')
        return result

    cleaned = str(value).strip()
    if not cleaned or not NUMBER_PATTERN.match(cleaned):
        raise ValueError('Invalid number')

    try:
        return Decimal(cleaned.replace(',', ''))
    except (InvalidOperation, ValueError):
        raise ValueError('Invalid number')


def parse_quantity(value) -> int:
    """
    Parse a whole-unit quantity.

    Raises:
        ValueError: if the value is not a whole number.
    """
    number = parse_decimal(value)
    if number != number.to_integral_value():
        raise ValueError('Quantity must be a whole number')
    return int(number)
