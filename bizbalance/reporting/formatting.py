"""Currency formatting for display."""

from decimal import Decimal

from bizbalance.validation import round_cents


def format_currency(value: Decimal, symbol: str = "$") -> str:
    """
    Format an amount with two decimals and thousands separators.

    format_currency(Decimal("-1234.5")) -> "-$1,234.50"
    """
    rounded = round_cents(Decimal(value))
    sign = "-" if rounded < 0 else ""
    return f"{sign}{symbol}{rounded.copy_abs():,.2f}"


def amount_text(amount: Decimal) -> str:
    """
    Text for an amount input box.

    Zero shows as an empty box, like a fresh form field. Plain notation
    only, so "1e2" typed by the user comes back as "100".
    """
    return "" if amount == 0 else format(amount, "f")
