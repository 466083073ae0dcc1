"""
AI insight service — recommendations, industry trends, and best-in-class
examples from Claude.

Same shape as the other Claude-backed services: build a prompt, make one
blocking Messages API call, parse the text. Routers run these methods in
a thread pool via asyncio.to_thread() so the event loop isn't blocked.

Parsing is forgiving. The model is asked for JSON but may
wrap it in prose or code fences, so each parser tries, in order:
1. The whole response as JSON
2. The first JSON object/array embedded in the text
3. A fallback that preserves the raw text

No retries: a failed call surfaces as InsightsUnavailableError.
"""

import json
import logging
import re
from dataclasses import dataclass, field

import anthropic

from app.config import settings
from app.services.prompts import (
    BEST_IN_CLASS_SYSTEM_PROMPT,
    RECOMMENDATIONS_SYSTEM_PROMPT,
    TRENDS_SYSTEM_PROMPT,
    build_best_in_class_prompt,
    build_industry_trends_prompt,
    build_recommendations_prompt,
    find_lowest_scoring_areas,
)
from app.services.questionnaires import QUESTION_BANKS

logger = logging.getLogger(__name__)

# Title of the single item returned when the model ignored the JSON format
FALLBACK_TITLE = "AI Analysis Complete"


class InsightsUnavailableError(Exception):
    """The LLM could not be reached or isn't configured."""


@dataclass
class RecommendationsResult:
    recommendations: list = field(default_factory=list)
    input_tokens: int = 0
    output_tokens: int = 0
    model: str = ""


class InsightsService:
    """Wraps the Anthropic client for the three insight features.

    Usage:
        service = InsightsService()
        result = service.generate_recommendations("c_level", "Developing", {1: 2, ...})
        trends = service.industry_trends("Automotive")
        example = service.best_in_class_example("Our company has a roadmap.")

    Raises InsightsUnavailableError at construction when no API key is set.
    """

    def __init__(self, api_key: str | None = None, model: str | None = None):
        key = settings.ANTHROPIC_API_KEY if api_key is None else api_key
        if not key:
            raise InsightsUnavailableError("Anthropic API key not set.")
        self.client = anthropic.Anthropic(api_key=key)
        self.model = model or settings.LLM_MODEL

    def generate_recommendations(
        self,
        assessment_type: str,
        readiness_level: str,
        answers: dict[int, int],
    ) -> RecommendationsResult:
        """Ask for recommendations targeting the three lowest-scoring answers."""
        questions = QUESTION_BANKS.get(assessment_type, ())
        lowest = find_lowest_scoring_areas(answers, questions)
        prompt = build_recommendations_prompt(assessment_type, readiness_level, lowest)

        message = self._complete(
            RECOMMENDATIONS_SYSTEM_PROMPT, prompt, max_tokens=1500,
            failure="Failed to generate AI recommendations.",
        )
        content = message.content[0].text.strip()

        return RecommendationsResult(
            recommendations=parse_recommendations(content),
            input_tokens=message.usage.input_tokens,
            output_tokens=message.usage.output_tokens,
            model=self.model,
        )

    def industry_trends(self, industry: str) -> list[dict]:
        message = self._complete(
            TRENDS_SYSTEM_PROMPT, build_industry_trends_prompt(industry),
            max_tokens=700, failure="Failed to generate AI trends.",
        )
        return parse_trends(message.content[0].text.strip())

    def best_in_class_example(self, question: str) -> str:
        message = self._complete(
            BEST_IN_CLASS_SYSTEM_PROMPT, build_best_in_class_prompt(question),
            max_tokens=200, failure="Failed to generate best-in-class example.",
        )
        return message.content[0].text.strip()

    def _complete(self, system: str, prompt: str, max_tokens: int, failure: str):
        try:
            return self.client.messages.create(
                model=self.model,
                max_tokens=max_tokens,
                system=system,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.APIError as e:
            logger.error(f"Claude API error: {e}")
            raise InsightsUnavailableError(failure) from e


# ----------------------------------------------------------------------
# RESPONSE PARSING
# ----------------------------------------------------------------------

def _extract_json(content: str, pattern: str):
    """Parse the first regex match as JSON, or return None."""
    match = re.search(pattern, content, re.DOTALL)
    if not match:
        return None
    try:
        return json.loads(match.group(0))
    except ValueError:
        return None


def _fallback_recommendation(content: str) -> dict:
    return {
        "title": FALLBACK_TITLE,
        "description": content,
        "priority": "High",
        "timeline": "Immediate",
        "impact": "Customized recommendations based on your assessment",
    }


def parse_recommendations(content: str) -> list[dict]:
    """Pull the `recommendations` list out of a model response."""
    try:
        data = json.loads(content)
    except ValueError:
        data = _extract_json(content, r"\{.*\}")
        if isinstance(data, dict) and isinstance(data.get("recommendations"), list):
            return data["recommendations"]
        logger.warning("Recommendations response was not JSON, keeping raw text")
        return [_fallback_recommendation(content)]

    if isinstance(data, dict) and isinstance(data.get("recommendations"), list):
        return data["recommendations"]
    return []


def parse_trends(content: str) -> list[dict]:
    """Pull a list of {trend, implication} objects out of a model response."""

    def _valid(data) -> bool:
        return (
            isinstance(data, list)
            and bool(data)
            and isinstance(data[0], dict)
            and bool(data[0].get("trend"))
            and bool(data[0].get("implication"))
        )

    def _clean(data: list) -> list[dict]:
        return [
            {
                "trend": str(item.get("trend") or ""),
                "implication": str(item.get("implication") or ""),
            }
            for item in data
            if isinstance(item, dict)
        ]

    try:
        data = json.loads(content)
    except ValueError:
        data = None
    if _valid(data):
        return _clean(data)

    extracted = _extract_json(content, r"\[.*\]")
    if _valid(extracted):
        return _clean(extracted)

    logger.warning("Trends response was not a JSON array, keeping raw text")
    return [{"trend": content, "implication": ""}]


def unwrap_recommendations(items: list) -> list:
    """Recover real recommendations from a stored fallback item.

    When parsing fell back, the whole response sits in the description of
    a single "AI Analysis Complete" item. If that text embeds a JSON
    payload with a recommendations list, return that list instead.
    """
    if not items:
        return []

    if len(items) == 1 and isinstance(items[0], dict):
        item = items[0]
        description = item.get("description")
        if (
            item.get("title") == FALLBACK_TITLE
            and isinstance(description, str)
            and "recommendations" in description
        ):
            data = _extract_json(description, r"\{.*\}")
            if isinstance(data, dict) and isinstance(data.get("recommendations"), list):
                return data["recommendations"]

    return items
