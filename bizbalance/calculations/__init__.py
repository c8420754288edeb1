"""Aggregation engine package."""

from bizbalance.calculations.engine import (
    OTHER_BANK,
    STANDARD_FORMULA,
    STRICT_FORMULA,
    calculate,
    format_bank_breakdown,
    group_by_bank_name,
    sum_amounts,
)

__all__ = [
    "OTHER_BANK",
    "STANDARD_FORMULA",
    "STRICT_FORMULA",
    "calculate",
    "format_bank_breakdown",
    "group_by_bank_name",
    "sum_amounts",
]
