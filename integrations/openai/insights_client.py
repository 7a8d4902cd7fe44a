"""
OpenAI chat-completions client for dashboard commentary.

Every outcome resolves to an insight/suggestion pair: a missing key, an
error status, an unreadable answer or a network failure each map to a
fixed fallback. Nothing is retried and nothing is raised to the caller.
"""

import json
import logging
from typing import Any, Dict, Optional

import httpx

from core.config import settings
from domain.models import InsightRequest, InsightResponse


logger = logging.getLogger(__name__)


DEFAULT_INSIGHT = "No new insights at the moment."
DEFAULT_SUGGESTION = "Continue monitoring your metrics."

MISSING_KEY_RESPONSE = InsightResponse(
    insight="AI insights are unavailable: missing OPENAI_API_KEY.",
    suggestion="Please configure your OpenAI API key to enable AI insights.",
)
ERROR_STATUS_RESPONSE = InsightResponse(
    insight="AI insights could not be generated right now.",
    suggestion="Please try again later.",
)
CONNECTIVITY_RESPONSE = InsightResponse(
    insight="AI insights could not be generated right now.",
    suggestion="Please check your connection and try again.",
)

SYSTEM_PROMPT = (
    "You generate concise, practical restaurant management insights. "
    "Always respond with valid JSON."
)


def build_prompt(request: InsightRequest) -> str:
    """User prompt embedding the KPIs."""
    avg_wait = request.avg_wait_time or 0
    return (
        "You are a restaurant operations assistant. Given the KPIs, provide:\n"
        "1. A brief insight (1-2 sentences) about the current performance\n"
        "2. A practical suggestion (1-2 sentences) for improvement\n\n"
        f"KPIs: Today={request.today_reservations}, "
        f"Week={request.upcoming_week_reservations}, "
        f"AvgParty={request.avg_party_size}, "
        f"CancellationRate={request.cancellation_rate_pct}%, "
        f"AvgWaitTime={avg_wait}min.\n\n"
        'Format your response as JSON: {"insight": "...", "suggestion": "..."}'
    )


def parse_insight_text(text: str) -> InsightResponse:
    """
    Turn the model's answer into a pair.

    JSON answers are read by key. Anything else is split into lines: the
    first non-blank line is the insight, the rest joined is the suggestion.
    """
    text = (text or "").strip()
    try:
        parsed = json.loads(text)
    except ValueError:
        parsed = None

    if isinstance(parsed, dict):
        return InsightResponse(
            insight=str(parsed.get("insight") or DEFAULT_INSIGHT),
            suggestion=str(parsed.get("suggestion") or DEFAULT_SUGGESTION),
        )

    lines = [line.strip() for line in text.splitlines() if line.strip()]
    return InsightResponse(
        insight=lines[0] if lines else DEFAULT_INSIGHT,
        suggestion=" ".join(lines[1:]) or DEFAULT_SUGGESTION,
    )


class InsightsClient:
    """Text-generation collaborator for the dashboard."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        """
        Args:
            api_key: Defaults to settings.openai_api_key; blank disables calls
            model: Chat model name
            base_url: API root, without the /chat/completions path
            timeout: Bounded wait in seconds for the whole request
            transport: Optional httpx transport (tests pass a MockTransport)
        """
        self.api_key = settings.openai_api_key if api_key is None else api_key.strip()
        self.model = model or settings.openai_model
        self.base_url = (base_url or settings.openai_base_url).rstrip("/")
        self.timeout = timeout or settings.insights_timeout_seconds
        self._transport = transport

    def _payload(self, request: InsightRequest) -> Dict[str, Any]:
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": build_prompt(request)},
            ],
            "temperature": settings.openai_temperature,
            "max_tokens": settings.openai_max_tokens,
        }

    def generate_insights(self, request: InsightRequest) -> InsightResponse:
        """Ask for an insight/suggestion pair; never raises."""
        if not self.api_key:
            logger.info("Insights requested without an OpenAI key; returning fallback")
            return MISSING_KEY_RESPONSE

        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }
        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                response = client.post(
                    f"{self.base_url}/chat/completions",
                    json=self._payload(request),
                    headers=headers,
                )
        except httpx.HTTPError as e:
            logger.warning(f"Insights request failed: {e.__class__.__name__}")
            return CONNECTIVITY_RESPONSE

        if not response.is_success:
            logger.warning(f"Insights request returned status {response.status_code}")
            return ERROR_STATUS_RESPONSE

        try:
            data = response.json()
        except ValueError:
            logger.warning("Insights reply was not JSON")
            return CONNECTIVITY_RESPONSE
        return parse_insight_text(self._message_content(data))

    @staticmethod
    def _message_content(data: Any) -> str:
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            return ""
        return content if isinstance(content, str) else ""
