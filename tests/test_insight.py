"""
Tests for the AI insight agent.

The Gemini model is replaced by small fakes exposing
generate_content_async; no network calls are made.
"""

import asyncio

import pytest

from bizbalance.agents import (
    INSIGHT_EMPTY_MESSAGE,
    INSIGHT_FAILURE_MESSAGE,
    InsightAgent,
    MissingCredentialError,
    build_insight_prompt,
)
from bizbalance.calculations import calculate, format_bank_breakdown
from bizbalance.config import GeminiSettings
from bizbalance.models.finance import BankAccount, BusinessData, FinancialRecord


class FakeResponse:
    def __init__(self, text):
        self.text = text


class FakeModel:
    """Records prompts and answers with a fixed text."""

    def __init__(self, text="Liquidity is healthy."):
        self._text = text
        self.prompts = []

    async def generate_content_async(self, prompt):
        self.prompts.append(prompt)
        return FakeResponse(self._text)


class FailingModel:
    async def generate_content_async(self, prompt):
        raise ConnectionError("network down")


@pytest.fixture
def result():
    data = BusinessData(
        accounts_receivable=(FinancialRecord(id="1", amount=50), FinancialRecord(id="2", amount=50)),
        accounts_payable=(FinancialRecord(id="1", amount=30),),
        bank_accounts=(
            BankAccount(id="1", bank_name="Bank A", amount=100),
            BankAccount(id="2", bank_name="Bank A", amount=50),
            BankAccount(id="3", bank_name="Bank B", amount="1200.5"),
        ),
    )
    return calculate(data)


class TestBuildInsightPrompt:

    def test_contains_all_figures(self, result):
        prompt = build_insight_prompt(result, format_bank_breakdown(result.bank_breakdown))

        assert "$100.00" in prompt      # AR
        assert "$30.00" in prompt       # AP
        assert "$1,350.50" in prompt    # B
        assert "$0.00" in prompt        # C
        assert "$70.00" in prompt       # AR - AP
        assert "$1,420.50" in prompt    # BNE
        assert "Bank A: $150.00, Bank B: $1200.50" in prompt
        assert result.bne_formula in prompt

    def test_is_deterministic(self, result):
        details = format_bank_breakdown(result.bank_breakdown)
        assert build_insight_prompt(result, details) == build_insight_prompt(result, details)

    def test_mentions_mode(self, result):
        strict = result.model_copy(update={"strict_formula": True})
        assert "strict formula" in build_insight_prompt(strict, "")
        assert "standard formula" in build_insight_prompt(result, "")

    def test_no_bank_accounts(self):
        prompt = build_insight_prompt(calculate(BusinessData()), "")
        assert "no bank accounts" in prompt


class TestInsightAgent:

    def test_missing_key_refuses_to_build(self):
        """Without a key no model is configured and nothing is sent."""
        with pytest.raises(MissingCredentialError):
            InsightAgent(settings=GeminiSettings(api_key=None))

    def test_blank_key_counts_as_missing(self):
        with pytest.raises(MissingCredentialError):
            InsightAgent(settings=GeminiSettings(api_key="   "))

    def test_success(self, result):
        model = FakeModel("  Strong cash position.  ")
        agent = InsightAgent(model=model)

        response = asyncio.run(agent.generate_insight(result, "Bank A: $150.00"))

        assert response.succeeded is True
        assert response.text == "Strong cash position."
        assert response.error is None
        assert len(model.prompts) == 1
        assert "Bank A: $150.00" in model.prompts[0]

    def test_failure_becomes_apology(self, result):
        agent = InsightAgent(model=FailingModel())

        response = asyncio.run(agent.generate_insight(result, ""))

        assert response.succeeded is False
        assert response.text == INSIGHT_FAILURE_MESSAGE
        assert "network down" in response.error

    @pytest.mark.parametrize("text", ["", "   ", None])
    def test_empty_response(self, result, text):
        agent = InsightAgent(model=FakeModel(text))

        response = asyncio.run(agent.generate_insight(result, ""))

        assert response.succeeded is False
        assert response.text == INSIGHT_EMPTY_MESSAGE

    def test_one_request_per_call(self, result):
        """No retries, even after a failure."""
        calls = []

        class CountingFailingModel:
            async def generate_content_async(self, prompt):
                calls.append(prompt)
                raise TimeoutError("slow")

        agent = InsightAgent(model=CountingFailingModel())
        asyncio.run(agent.generate_insight(result, ""))

        assert len(calls) == 1


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
