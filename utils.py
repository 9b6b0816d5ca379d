# utils.py
from decimal import Decimal
from typing import Union

Number = Union[int, Decimal]


def cents_to_dollars(cents: Number) -> Decimal:
  return Decimal(cents).scaleb(-2)


def dollars_to_cents(amount: Decimal) -> int:
  return int((amount * 100).to_integral_value())


def format_currency(cents: Number) -> str:
  """Render a minor-unit amount the way the dashboard shows it: $1,234.56"""
  value = cents_to_dollars(cents or 0)
  sign = "-" if value < 0 else ""
  return f"{sign}${abs(value):,.2f}"
