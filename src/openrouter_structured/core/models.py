"""Model identifiers, capabilities and cost estimation for OpenRouter models.

Costs are approximate USD prices per one million tokens and exist for
estimation only; search-enabled models carry an additional per-request search
charge that is not tracked here.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from openrouter_structured.core.types import Citation

if TYPE_CHECKING:
    from openrouter_structured.core.types import ChatResponse


class Models:
    """OpenRouter model identifiers (``provider/model``)."""

    GEMINI_FLASH = "google/gemini-2.0-flash-001"
    PERPLEXITY_SONAR = "perplexity/sonar-pro"
    GPT_4O = "openai/gpt-4o"
    CLAUDE_SONNET = "anthropic/claude-sonnet-4"
    PERPLEXITY_DEEP_RESEARCH = "perplexity/sonar-deep-research"
    O3_MINI = "openai/o3-mini"
    GEMINI_25_FLASH = "google/gemini-2.5-flash"
    CLAUDE_OPUS = "anthropic/claude-opus-4"
    EMBEDDING = "openai/text-embedding-3-small"

    @classmethod
    def all(cls) -> dict[str, str]:
        return {
            name: value
            for name, value in vars(cls).items()
            if name.isupper() and isinstance(value, str)
        }


@dataclass(frozen=True, slots=True)
class ModelCost:
    """Per-million-token prices."""

    input: float
    output: float


DEFAULT_MODEL_COST = ModelCost(input=1.0, output=1.0)

MODEL_COSTS: dict[str, ModelCost] = {
    Models.GEMINI_FLASH: ModelCost(0.075, 0.30),
    Models.PERPLEXITY_SONAR: ModelCost(3.0, 15.0),
    Models.GPT_4O: ModelCost(2.5, 10.0),
    Models.CLAUDE_SONNET: ModelCost(3.0, 15.0),
    Models.PERPLEXITY_DEEP_RESEARCH: ModelCost(2.0, 8.0),
    Models.O3_MINI: ModelCost(1.10, 4.40),
    Models.GEMINI_25_FLASH: ModelCost(0.30, 2.50),
    Models.CLAUDE_OPUS: ModelCost(15.0, 75.0),
    Models.EMBEDDING: ModelCost(0.02, 0.0),
}

REASONING_MODELS = frozenset(
    {
        Models.O3_MINI,
        Models.GEMINI_25_FLASH,
        Models.CLAUDE_OPUS,
        Models.PERPLEXITY_DEEP_RESEARCH,
    }
)

WEB_SEARCH_MODELS = frozenset(
    {
        Models.PERPLEXITY_SONAR,
        Models.PERPLEXITY_DEEP_RESEARCH,
    }
)

# Perplexity models reject response_format.
JSON_MODE_MODELS = frozenset(
    {
        Models.GEMINI_FLASH,
        Models.GPT_4O,
        Models.CLAUDE_SONNET,
        Models.CLAUDE_OPUS,
        Models.O3_MINI,
        Models.GEMINI_25_FLASH,
    }
)


def estimate_cost(model: str, prompt_tokens: int, completion_tokens: int) -> float:
    """Estimate USD cost of one call; unknown models use a 1.0/1.0 fallback."""
    costs = MODEL_COSTS.get(model, DEFAULT_MODEL_COST)
    input_cost = (prompt_tokens / 1_000_000) * costs.input
    output_cost = (completion_tokens / 1_000_000) * costs.output
    return input_cost + output_cost


def supports_reasoning(model: str) -> bool:
    return model in REASONING_MODELS


def has_web_search(model: str) -> bool:
    return model in WEB_SEARCH_MODELS


def supports_json_mode(model: str) -> bool:
    return model in JSON_MODE_MODELS


def extract_citations(response: ChatResponse) -> list[Citation]:
    """Normalize citations from a chat response.

    Structured ``search_results`` win over the legacy URL-only ``citations``
    list. Models without web search return an empty list.
    """
    if response.search_results:
        return [
            Citation(url=sr.url, title=sr.title, date=sr.date, snippet=sr.snippet)
            for sr in response.search_results
        ]
    if response.citations:
        return [Citation(url=url) for url in response.citations]
    return []
