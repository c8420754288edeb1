"""Tests for currency formatting and chart data."""

from decimal import Decimal

import plotly.graph_objects as go
import pytest

from bizbalance.calculations import calculate
from bizbalance.models.finance import BankAccount, BusinessData, FinancialRecord
from bizbalance.reporting import (
    ASSETS_COLOR,
    LIABILITIES_COLOR,
    NET_COLOR,
    amount_text,
    build_chart_data,
    build_distribution_figure,
    format_currency,
)


@pytest.fixture
def result():
    data = BusinessData(
        accounts_receivable=(FinancialRecord(id="1", amount=100),),
        accounts_payable=(FinancialRecord(id="1", amount=30),),
        credit_cards=(FinancialRecord(id="1", amount=20),),
        bank_accounts=(BankAccount(id="1", bank_name="A", amount=350),),
    )
    return calculate(data)


class TestFormatCurrency:

    @pytest.mark.parametrize("value,expected", [
        (Decimal("0"), "$0.00"),
        (Decimal("1234.5"), "$1,234.50"),
        (Decimal("-1234.5"), "-$1,234.50"),
        (Decimal("0.005"), "$0.01"),
        (Decimal("-0.004"), "$0.00"),
        (Decimal("1000000"), "$1,000,000.00"),
    ])
    def test_formats(self, value, expected):
        assert format_currency(value) == expected

    def test_large_value_keeps_every_digit(self):
        assert format_currency(Decimal("-1e30")) == "-$1,000,000,000,000,000,000,000,000,000,000.00"

    def test_unroundable_value_shows_zero(self):
        assert format_currency(Decimal("1e1000000")) == "$0.00"

    def test_cards_render_with_huge_input(self):
        """A huge typed amount is dropped at the boundary, so display works."""
        data = BusinessData(bank_accounts=(BankAccount(id="1", amount="1e1000000"),))
        result = calculate(data)
        assert format_currency(result.bne) == "$0.00"
        assert format_currency(result.total_bank) == "$0.00"

    def test_custom_symbol(self):
        assert format_currency(Decimal("5"), symbol="€") == "€5.00"


class TestAmountText:

    def test_zero_is_blank(self):
        assert amount_text(Decimal("0")) == ""

    @pytest.mark.parametrize("value,expected", [
        (Decimal("1E+2"), "100"),
        (Decimal("1250.50"), "1250.50"),
        (Decimal("-30"), "-30"),
        (Decimal("1e-9"), "0.000000001"),
    ])
    def test_plain_notation(self, value, expected):
        """Exponent forms typed by the user are shown spelled out."""
        assert amount_text(value) == expected

    def test_typed_exponent_round_trip(self):
        record = BankAccount(id="1", amount="1e2")
        assert amount_text(record.amount) == "100"


class TestChartData:

    def test_three_bars_in_order(self, result):
        bars = build_chart_data(result)

        assert [bar.name for bar in bars] == ["Assets", "Liabilities", "Net (BNE)"]
        assert [bar.value for bar in bars] == [Decimal("450"), Decimal("50"), Decimal("400")]
        assert [bar.fill for bar in bars] == [ASSETS_COLOR, LIABILITIES_COLOR, NET_COLOR]

    def test_net_bar_follows_formula_mode(self):
        data = BusinessData(bank_accounts=(BankAccount(id="1", amount=10),))
        bars = build_chart_data(calculate(data, use_strict_formula=True))
        assert bars[2].value == Decimal("-10")

    def test_figure(self, result):
        fig = build_distribution_figure(result)

        assert isinstance(fig, go.Figure)
        bar = fig.data[0]
        assert list(bar.x) == ["Assets", "Liabilities", "Net (BNE)"]
        assert list(bar.y) == [450.0, 50.0, 400.0]
        assert list(bar.text) == ["$450.00", "$50.00", "$400.00"]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
