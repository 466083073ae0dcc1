"""
Unit tests for the Claude-backed insight service.

Prompt building and response parsing run against a MagicMock client.
The last group drives the real Anthropic SDK over httpx.MockTransport,
so request arguments are checked by the SDK itself. No network calls.
"""

import json
from types import SimpleNamespace
from unittest.mock import MagicMock

import anthropic
import httpx
import pytest

from app.services.insights import (
    FALLBACK_TITLE,
    InsightsService,
    InsightsUnavailableError,
    parse_recommendations,
    parse_trends,
    unwrap_recommendations,
)
from app.services.prompts import (
    build_best_in_class_prompt,
    build_industry_trends_prompt,
    build_recommendations_prompt,
    find_lowest_scoring_areas,
)
from app.services.questionnaires import get_questions


def _message(text, input_tokens=100, output_tokens=200):
    return SimpleNamespace(
        content=[SimpleNamespace(text=text)],
        usage=SimpleNamespace(input_tokens=input_tokens, output_tokens=output_tokens),
    )


@pytest.fixture
def service():
    svc = InsightsService(api_key="test-key", model="claude-test")
    svc.client = MagicMock()
    return svc


# ----------------------------------------------------------------------
# Prompts
# ----------------------------------------------------------------------

def test_lowest_scoring_areas_picks_three_lowest_in_question_order():
    questions = get_questions("shopfloor")
    answers = {1: 5, 2: 1, 3: 4, 4: 1, 5: 2, 6: 3, 7: 5, 8: 1, 9: 4, 10: 5, 11: 5, 12: 5}

    areas = find_lowest_scoring_areas(answers, questions)

    assert [a["score"] for a in areas] == [1, 1, 1]
    assert [a["category"] for a in areas] == ["Automation", "Data Visibility", "Mobile Technology"]


def test_lowest_scoring_areas_unknown_question():
    areas = find_lowest_scoring_areas({99: 1}, get_questions("c_level"))
    assert areas == [{"question": "Question 99", "category": "Unknown", "score": 1}]


def test_recommendations_prompt_mentions_context():
    prompt = build_recommendations_prompt(
        "c_level", "Developing",
        [{"question": "We have a roadmap.", "category": "Strategy", "score": 1}],
    )

    assert "Assessment Type: C-Level Management" in prompt
    assert "Current Readiness Level: Developing" in prompt
    assert "1. We have a roadmap. (Category: Strategy) - Score: 1/5" in prompt
    assert '"recommendations"' in prompt


def test_trend_and_best_in_class_prompts():
    assert "top 5 trends in the Aerospace industry" in build_industry_trends_prompt("Aerospace")
    assert "Question: Do you pilot first?" in build_best_in_class_prompt("Do you pilot first?")


# ----------------------------------------------------------------------
# Parsing
# ----------------------------------------------------------------------

def test_parse_recommendations_plain_json():
    content = json.dumps({"recommendations": [{"title": "A"}, {"title": "B"}]})
    assert parse_recommendations(content) == [{"title": "A"}, {"title": "B"}]


def test_parse_recommendations_json_without_list():
    assert parse_recommendations(json.dumps({"advice": "none"})) == []


def test_parse_recommendations_embedded_in_prose():
    content = 'Here you go:\n```json\n{"recommendations": [{"title": "Pilot"}]}\n```'
    assert parse_recommendations(content) == [{"title": "Pilot"}]


def test_parse_recommendations_fallback_keeps_text():
    result = parse_recommendations("Focus on training first.")

    assert len(result) == 1
    assert result[0]["title"] == FALLBACK_TITLE
    assert result[0]["description"] == "Focus on training first."
    assert result[0]["priority"] == "High"


def test_parse_trends_plain_and_embedded():
    data = [{"trend": "AI", "implication": "Smarter lines"}]

    assert parse_trends(json.dumps(data)) == data
    assert parse_trends("Sure!\n" + json.dumps(data) + "\nHope this helps") == data


def test_parse_trends_normalizes_items():
    content = json.dumps([
        {"trend": "AI", "implication": "Smarter lines"},
        "stray string",
        {"trend": "Robotics", "implication": None},
    ])

    assert parse_trends(content) == [
        {"trend": "AI", "implication": "Smarter lines"},
        {"trend": "Robotics", "implication": ""},
    ]


def test_parse_trends_fallback_keeps_text():
    assert parse_trends("No idea") == [{"trend": "No idea", "implication": ""}]


def test_unwrap_recommendations_recovers_embedded_payload():
    stored = [{
        "title": FALLBACK_TITLE,
        "description": 'Prefix {"recommendations": [{"title": "Real"}]} suffix',
    }]
    assert unwrap_recommendations(stored) == [{"title": "Real"}]


def test_unwrap_recommendations_leaves_normal_items():
    items = [{"title": "Keep"}]
    assert unwrap_recommendations(items) == items
    assert unwrap_recommendations([]) == []


# ----------------------------------------------------------------------
# Service
# ----------------------------------------------------------------------

def test_missing_api_key_raises():
    with pytest.raises(InsightsUnavailableError, match="Anthropic API key not set."):
        InsightsService(api_key="")


def test_generate_recommendations(service):
    service.client.messages.create.return_value = _message(
        json.dumps({"recommendations": [{"title": "Upskill Operators"}]})
    )
    answers = {i: 3 for i in range(1, 13)}
    answers[5] = 1

    result = service.generate_recommendations("shopfloor", "Developing", answers)

    assert result.recommendations == [{"title": "Upskill Operators"}]
    assert result.input_tokens == 100
    assert result.output_tokens == 200
    assert result.model == "claude-test"

    kwargs = service.client.messages.create.call_args.kwargs
    assert kwargs["model"] == "claude-test"
    assert "How mature is your predictive maintenance program?" in kwargs["messages"][0]["content"]


def test_industry_trends(service):
    service.client.messages.create.return_value = _message(
        '[{"trend": "Edge computing", "implication": "Faster decisions"}]'
    )
    assert service.industry_trends("Food") == [
        {"trend": "Edge computing", "implication": "Faster decisions"}
    ]


def test_best_in_class_example_strips_text(service):
    service.client.messages.create.return_value = _message("  Leaders review KPIs weekly.  \n")
    assert service.best_in_class_example("Do you track KPIs?") == "Leaders review KPIs weekly."


def test_api_error_becomes_unavailable(service):
    request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
    service.client.messages.create.side_effect = anthropic.APIConnectionError(request=request)

    with pytest.raises(InsightsUnavailableError, match="Failed to generate AI trends."):
        service.industry_trends("Food")


# ----------------------------------------------------------------------
# Real SDK client over a mocked transport
# ----------------------------------------------------------------------

def _sdk_service(handler):
    """InsightsService whose real Anthropic client talks to `handler`."""
    svc = InsightsService(api_key="test-key", model="claude-test")
    svc.client = anthropic.Anthropic(
        api_key="test-key",
        max_retries=0,
        http_client=httpx.Client(transport=httpx.MockTransport(handler)),
    )
    return svc


def _message_json(text):
    return {
        "id": "msg_test",
        "type": "message",
        "role": "assistant",
        "model": "claude-test",
        "content": [{"type": "text", "text": text}],
        "stop_reason": "end_turn",
        "stop_sequence": None,
        "usage": {"input_tokens": 11, "output_tokens": 22},
    }


def test_sdk_request_is_accepted_and_parsed():
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(json.loads(request.content))
        return httpx.Response(
            200, json=_message_json('[{"trend": "Cobots", "implication": "Safer lines"}]')
        )

    trends = _sdk_service(handler).industry_trends("Automotive")

    assert trends == [{"trend": "Cobots", "implication": "Safer lines"}]
    body = requests[0]
    assert body["model"] == "claude-test"
    assert body["max_tokens"] == 700
    assert "temperature" not in body
    assert body["messages"][0]["role"] == "user"
    assert "Automotive" in body["messages"][0]["content"]


def test_sdk_recommendations_report_usage():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200, json=_message_json(json.dumps({"recommendations": [{"title": "Pilot"}]}))
        )

    result = _sdk_service(handler).generate_recommendations(
        "c_level", "Beginner", {i: 2 for i in range(1, 13)}
    )

    assert result.recommendations == [{"title": "Pilot"}]
    assert (result.input_tokens, result.output_tokens) == (11, 22)


@pytest.mark.parametrize(
    "call, message",
    [
        (lambda svc: svc.industry_trends("Food"), "Failed to generate AI trends."),
        (lambda svc: svc.best_in_class_example("Q?"), "Failed to generate best-in-class example."),
        (
            lambda svc: svc.generate_recommendations("shopfloor", "Leader", {1: 5}),
            "Failed to generate AI recommendations.",
        ),
    ],
)
def test_sdk_server_error_becomes_unavailable(call, message):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            500, json={"type": "error", "error": {"type": "api_error", "message": "boom"}}
        )

    with pytest.raises(InsightsUnavailableError, match=message):
        call(_sdk_service(handler))
