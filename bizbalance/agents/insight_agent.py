"""
AI Insight Agent for BizBalance

DESIGN DECISION: The LLM is a NARRATOR, not a CALCULATOR.
Every number in the prompt comes from the aggregation engine. The model
is asked to comment on those numbers, never to compute new ones.

CRITICAL BOUNDARIES:
- ONE request per user action, no retries, no streaming
- A failed request becomes a short apologetic insight text,
  never an exception in the caller
- Without an API key the agent cannot be constructed at all, so a
  doomed network call is never attempted
"""

from decimal import Decimal
from typing import Any, Optional

import google.generativeai as genai
import structlog
from pydantic import BaseModel, Field

from bizbalance.config import GeminiSettings, get_settings
from bizbalance.models.finance import CalculationResult

INSIGHT_FAILURE_MESSAGE = (
    "Sorry, I couldn't generate an insight right now. "
    "Please check your connection and try again."
)
INSIGHT_EMPTY_MESSAGE = "No insight was returned for these figures."


class MissingCredentialError(Exception):
    """No Gemini API key is configured."""
    pass


class InsightResponse(BaseModel):
    """
    Outcome of one insight request.

    `text` is always displayable: on failure it holds the
    apologetic message, and `error` holds the cause.
    """

    text: str = Field(
        description="Insight text to show the user"
    )
    succeeded: bool = Field(
        description="Whether the model produced the text"
    )
    error: Optional[str] = Field(
        default=None,
        description="Failure cause, for logging only"
    )


def _money(value: Decimal) -> str:
    return f"${value:,.2f}"


def build_insight_prompt(result: CalculationResult, bank_details: str) -> str:
    """
    Build the prompt for one insight request.

    Deterministic: same figures, same prompt.
    """
    mode = "strict" if result.strict_formula else "standard"
    return f"""You are a financial analyst advising the owner of a small business.

Current position:
- Accounts Receivable (AR): {_money(result.total_ar)}
- Accounts Payable (AP): {_money(result.total_ap)}
- Bank balances (B): {_money(result.total_bank)}
- Credit card balances (C): {_money(result.total_credit)}
- Bank breakdown: {bank_details or "no bank accounts"}

Derived figures:
- Net Receivables (AR - AP): {_money(result.net_receivables)}
- Net Cash (B - C): {_money(result.net_bank)}
- Business Net Exact (BNE), {mode} formula {result.bne_formula}: {_money(result.bne)}

Write a short analysis (at most 4 sentences) of the business's liquidity
and solvency based ONLY on these figures. Point out the single most
important risk or strength and suggest one concrete next step.
Do not invent figures that are not listed above. Plain text, no markdown."""


class InsightAgent:
    """
    Generates a narrative insight from a CalculationResult.

    RESPONSIBILITIES:
    - Build the prompt from computed figures
    - Issue exactly one model request
    - Turn any failure into displayable text

    BOUNDARIES:
    - NEVER sees raw records, only the computed summary
    - NEVER retries
    """

    def __init__(
        self,
        settings: Optional[GeminiSettings] = None,
        model: Optional[Any] = None,
    ):
        """
        Args:
            settings: Gemini configuration (defaults to environment)
            model: Pre-built model exposing generate_content_async.
                   If None, a Gemini model is configured from settings.

        Raises:
            MissingCredentialError: If no model is given and no API key
                is configured
        """
        self._settings = settings or get_settings().gemini
        self._logger = structlog.get_logger(__name__)

        if model is not None:
            self._model = model
        else:
            if not self._settings.is_configured:
                raise MissingCredentialError(
                    "GEMINI_API_KEY is not set; AI insights are unavailable."
                )
            self._configure_genai()

    def _configure_genai(self):
        """Configure Google Generative AI."""
        genai.configure(api_key=self._settings.api_key)
        self._model = genai.GenerativeModel(
            model_name=self._settings.model_name,
            generation_config={
                "temperature": self._settings.temperature,
                "max_output_tokens": self._settings.max_tokens,
            }
        )

    async def generate_insight(
        self,
        result: CalculationResult,
        bank_details: str,
    ) -> InsightResponse:
        """
        Request a narrative insight for the given figures.

        Never raises; failures come back as an InsightResponse with
        succeeded=False and the apologetic message as text.
        """
        prompt = build_insight_prompt(result, bank_details)

        try:
            response = await self._model.generate_content_async(prompt)
            text = (response.text or "").strip()
        except Exception as e:
            self._logger.warning(
                "insight_request_failed",
                model=self._settings.model_name,
                error=str(e),
            )
            return InsightResponse(
                text=INSIGHT_FAILURE_MESSAGE,
                succeeded=False,
                error=str(e) or type(e).__name__,
            )

        if not text:
            return InsightResponse(
                text=INSIGHT_EMPTY_MESSAGE,
                succeeded=False,
                error="empty response",
            )

        return InsightResponse(text=text, succeeded=True)
