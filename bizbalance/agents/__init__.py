"""AI Agents package."""

from bizbalance.agents.insight_agent import (
    INSIGHT_EMPTY_MESSAGE,
    INSIGHT_FAILURE_MESSAGE,
    InsightAgent,
    InsightResponse,
    MissingCredentialError,
    build_insight_prompt,
)

__all__ = [
    "INSIGHT_EMPTY_MESSAGE",
    "INSIGHT_FAILURE_MESSAGE",
    "InsightAgent",
    "InsightResponse",
    "MissingCredentialError",
    "build_insight_prompt",
]
