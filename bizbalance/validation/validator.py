"""
Input Boundary Normalization

DESIGN DECISION: Every value that enters the state passes through here
first, whether it was typed by the user or read back from storage.

- Amounts: anything that is not a finite number becomes zero
- Text: None becomes the empty string
- Choices: unknown values fall back to a default member

The aggregation engine can then assume well-formed numbers and never
has to guard against NaN, None or stray strings itself.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from enum import Enum
from typing import Any, TypeVar

ZERO = Decimal("0")

# Largest magnitude accepted for a single amount (one quadrillion)
MAX_AMOUNT = Decimal("1e15")

E = TypeVar("E", bound=Enum)

# Characters a user might paste along with a number
_AMOUNT_NOISE = ("$", ",", "_", " ")

_CENTS = Decimal("0.01")

# Totals of bounded amounts stay far below this
_ROUNDING_LIMIT = Decimal("1e36")
_ROUNDING_PRECISION = 40


def parse_amount(value: Any) -> Decimal:
    """
    Convert raw input into a finite Decimal amount.

    Accepts ints, floats, Decimals and numeric strings such as
    "1,250.50" or "$ -30". Returns ZERO for None, booleans, empty or
    non-numeric strings, NaN, infinities and anything larger in
    magnitude than MAX_AMOUNT.

    Floats go through str() so 0.1 is stored as Decimal("0.1"),
    not its binary expansion.
    """
    if value is None or isinstance(value, bool):
        return ZERO

    if isinstance(value, Decimal):
        candidate = value
    elif isinstance(value, (int, float)):
        try:
            candidate = Decimal(str(value))
        except InvalidOperation:
            return ZERO
    elif isinstance(value, str):
        text = value.strip()
        for noise in _AMOUNT_NOISE:
            text = text.replace(noise, "")
        if not text:
            return ZERO
        try:
            candidate = Decimal(text)
        except InvalidOperation:
            return ZERO
    else:
        return ZERO

    if not candidate.is_finite():
        return ZERO

    # copy_abs: abs() would round under the context and can overflow
    if candidate.copy_abs() > MAX_AMOUNT:
        return ZERO

    # -0 would render as "-0.00"
    if candidate.is_zero():
        return ZERO
    return candidate


def round_cents(value: Decimal) -> Decimal:
    """
    Round an amount or total to cents, half up.

    Rounds under a wider context than the default 28 digits, so any
    total of accepted amounts rounds cleanly. Non-finite values and
    values too large to round (only reachable by bypassing
    parse_amount) become ZERO.
    """
    if not value.is_finite() or value.copy_abs() >= _ROUNDING_LIMIT:
        return ZERO
    with localcontext() as ctx:
        ctx.prec = _ROUNDING_PRECISION
        return value.quantize(_CENTS, rounding=ROUND_HALF_UP)


def parse_text(value: Any) -> str:
    """Convert raw input into a label string."""
    if value is None:
        return ""
    return str(value)


def coerce_choice(value: Any, choices: type[E], default: E) -> E:
    """
    Map raw input onto a member of an Enum.

    Accepts a member, its value, or its name (case-insensitive).
    Anything else returns `default`.
    """
    if isinstance(value, choices):
        return value

    try:
        return choices(value)
    except (ValueError, TypeError):
        pass

    if isinstance(value, str):
        wanted = value.strip().lower()
        for member in choices:
            if wanted in (member.name.lower(), str(member.value).lower()):
                return member

    return default
