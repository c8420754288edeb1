"""Input boundary validation package."""

from bizbalance.validation.validator import (
    MAX_AMOUNT,
    ZERO,
    coerce_choice,
    parse_amount,
    parse_text,
    round_cents,
)

__all__ = [
    "MAX_AMOUNT",
    "ZERO",
    "coerce_choice",
    "parse_amount",
    "parse_text",
    "round_cents",
]
