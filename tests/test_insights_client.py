"""Unit tests for the insights client fallbacks."""
import json

import httpx
import pytest

from domain.models import InsightRequest
from integrations.openai.insights_client import (
    CONNECTIVITY_RESPONSE,
    DEFAULT_INSIGHT,
    DEFAULT_SUGGESTION,
    ERROR_STATUS_RESPONSE,
    MISSING_KEY_RESPONSE,
    InsightsClient,
    build_prompt,
    parse_insight_text,
)


@pytest.fixture
def insight_request():
    return InsightRequest(
        today_reservations=12,
        upcoming_week_reservations=58,
        avg_party_size=3.4,
        cancellation_rate_pct=7.5,
        avg_wait_time=14.0,
    )


def completion(content):
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def client_for(handler, api_key="sk-test"):
    return InsightsClient(api_key=api_key, transport=httpx.MockTransport(handler))


@pytest.mark.unit
class TestGenerateInsights:

    def test_missing_key_skips_request(self, insight_request):
        def handler(request):
            raise AssertionError("no request expected without a key")

        assert client_for(handler, api_key="  ").generate_insights(insight_request) == MISSING_KEY_RESPONSE

    def test_json_answer(self, insight_request):
        seen = {}

        def handler(request):
            seen["auth"] = request.headers["Authorization"]
            seen["body"] = json.loads(request.content)
            answer = json.dumps({"insight": "Busy week ahead.", "suggestion": "Add a host shift."})
            return httpx.Response(200, json=completion(answer))

        result = client_for(handler).generate_insights(insight_request)

        assert result.insight == "Busy week ahead."
        assert result.suggestion == "Add a host shift."
        assert seen["auth"] == "Bearer sk-test"
        assert "Today=12" in seen["body"]["messages"][1]["content"]

    def test_error_status(self, insight_request):
        def handler(request):
            return httpx.Response(500, json={"error": {"message": "boom"}})

        assert client_for(handler).generate_insights(insight_request) == ERROR_STATUS_RESPONSE

    def test_rate_limited(self, insight_request):
        def handler(request):
            return httpx.Response(429)

        assert client_for(handler).generate_insights(insight_request) == ERROR_STATUS_RESPONSE

    def test_network_failure(self, insight_request):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        assert client_for(handler).generate_insights(insight_request) == CONNECTIVITY_RESPONSE

    def test_timeout(self, insight_request):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        assert client_for(handler).generate_insights(insight_request) == CONNECTIVITY_RESPONSE

    def test_plain_text_answer_split_by_lines(self, insight_request):
        def handler(request):
            return httpx.Response(200, json=completion("Fridays are strong.\n\nOpen more 8pm slots.\nPromote them."))

        result = client_for(handler).generate_insights(insight_request)

        assert result.insight == "Fridays are strong."
        assert result.suggestion == "Open more 8pm slots. Promote them."

    def test_body_not_json(self, insight_request):
        def handler(request):
            return httpx.Response(200, text="<html>gateway</html>")

        result = client_for(handler).generate_insights(insight_request)

        assert result == CONNECTIVITY_RESPONSE


@pytest.mark.unit
class TestParsing:

    def test_json_missing_key_uses_default(self):
        result = parse_insight_text('{"insight": "Only half"}')
        assert result.insight == "Only half"
        assert result.suggestion == DEFAULT_SUGGESTION

    def test_single_line(self):
        result = parse_insight_text("Just one thought")
        assert result.insight == "Just one thought"
        assert result.suggestion == DEFAULT_SUGGESTION

    def test_empty(self):
        result = parse_insight_text("")
        assert (result.insight, result.suggestion) == (DEFAULT_INSIGHT, DEFAULT_SUGGESTION)

    def test_prompt_without_wait_time(self, insight_request):
        prompt = build_prompt(insight_request.model_copy(update={"avg_wait_time": None}))
        assert "AvgWaitTime=0min" in prompt
        assert "CancellationRate=7.5%" in prompt
