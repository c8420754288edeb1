"""
Aggregation Engine

DESIGN DECISION: Calculation is a PURE function of BusinessData.
No caching, no incremental updates: the summary is recomputed from
scratch on every state change. The collections are small, so
recomputing is cheaper than keeping a cache consistent.

The engine never raises over well-typed input and never mutates it.
Sanitizing raw input is the job of the validation layer, but sums
still route every amount through parse_amount so a stray value
contributes zero instead of poisoning a total.
"""

from decimal import Decimal
from typing import Iterable, Mapping

from bizbalance.models.finance import (
    BankAccount,
    BusinessData,
    CalculationResult,
    FinancialRecord,
)
from bizbalance.validation import ZERO, parse_amount, round_cents

# Bucket for accounts with no bank name
OTHER_BANK = "Other"

STANDARD_FORMULA = "(AR - AP) + (B - C)"
STRICT_FORMULA = "(AR - AP) - (B - C)"


def sum_amounts(records: Iterable[FinancialRecord]) -> Decimal:
    """
    Total of the `amount` field.

    A record without a usable amount contributes zero.
    Empty input returns zero.
    """
    total = ZERO
    for record in records:
        total += parse_amount(getattr(record, "amount", None))
    return total


def group_by_bank_name(accounts: Iterable[BankAccount]) -> dict[str, Decimal]:
    """
    Sum account amounts per bank name.

    Names are matched exactly (case-sensitive, no trimming).
    An empty or missing name is grouped under OTHER_BANK.
    """
    breakdown: dict[str, Decimal] = {}
    for account in accounts:
        name = getattr(account, "bank_name", None) or OTHER_BANK
        amount = parse_amount(getattr(account, "amount", None))
        breakdown[name] = breakdown.get(name, ZERO) + amount
    return breakdown


def calculate(
    data: BusinessData,
    use_strict_formula: bool = False,
) -> CalculationResult:
    """
    Compute the dashboard summary.

    Standard mode (default): bne = (AR - AP) + (B - C),
        i.e. (AR + B) - (AP + C), the total equity view.
    Strict mode:             bne = (AR - AP) - (B - C).

    Both formulas are kept; which one is "right" is the user's call.
    """
    total_ar = sum_amounts(data.accounts_receivable)
    total_ap = sum_amounts(data.accounts_payable)
    total_credit = sum_amounts(data.credit_cards)
    total_bank = sum_amounts(data.bank_accounts)

    net_receivables = total_ar - total_ap
    net_bank = total_bank - total_credit

    if use_strict_formula:
        bne = net_receivables - net_bank
        formula = STRICT_FORMULA
    else:
        bne = net_receivables + net_bank
        formula = STANDARD_FORMULA

    return CalculationResult(
        total_ar=total_ar,
        total_ap=total_ap,
        total_credit=total_credit,
        total_bank=total_bank,
        bank_breakdown=group_by_bank_name(data.bank_accounts),
        net_receivables=net_receivables,
        net_bank=net_bank,
        bne=bne,
        bne_formula=formula,
        strict_formula=use_strict_formula,
    )


def format_bank_breakdown(breakdown: Mapping[str, Decimal]) -> str:
    """
    Render a breakdown as "Name: $1234.50" pairs joined by ", ".

    Two decimals, no thousands separator. Used in the AI prompt.
    """
    return ", ".join(
        f"{name}: ${round_cents(amount)}"
        for name, amount in breakdown.items()
    )
