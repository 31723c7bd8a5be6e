"""
Tests for the generative-language client.
"""

import json

import httpx
import pytest

from syncora.exceptions import ServiceError
from syncora.services.gemini_service import (
    CHAT_ERROR_REPLY,
    SUMMARY_FALLBACK,
    GeminiService,
    heuristic_priority,
)


def reply(text: str | None) -> httpx.Response:
    if text is None:
        return httpx.Response(200, json={"candidates": []})
    return httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": text}]}}]})


def service_returning(text: str | None, requests: list | None = None) -> GeminiService:
    def handler(request: httpx.Request) -> httpx.Response:
        if requests is not None:
            requests.append(request)
        return reply(text)

    return GeminiService(api_key="test-key", base_url="https://ai.test/v1beta", transport=httpx.MockTransport(handler))


def failing_service(status_code: int = 500) -> GeminiService:
    return GeminiService(
        api_key="test-key",
        base_url="https://ai.test/v1beta",
        transport=httpx.MockTransport(lambda request: httpx.Response(status_code, json={"error": "boom"})),
    )


class TestSummarize:
    async def test_summary_text(self):
        requests = []
        service = service_returning("Budget meeting tomorrow.", requests)

        assert await service.summarize_email("Long email") == "Budget meeting tomorrow."
        request = requests[0]
        assert request.headers["x-goog-api-key"] == "test-key"
        assert request.url.path.endswith(":generateContent")
        assert "Long email" in json.loads(request.content)["contents"][0]["parts"][0]["text"]

    async def test_empty_answer_falls_back(self):
        assert await service_returning(None).summarize_email("x") == SUMMARY_FALLBACK

    async def test_upstream_failure_raises(self):
        with pytest.raises(ServiceError):
            await failing_service().summarize_email("x")

    async def test_missing_api_key(self):
        with pytest.raises(ServiceError) as exc_info:
            await GeminiService(api_key="").summarize_email("x")

        assert exc_info.value.status_code == 503


class TestMeetingExtraction:
    async def test_meeting_details(self):
        details = {"date": "Friday", "time": "10 AM", "location": "Zoom", "attendees": ["Sam"]}

        assert await service_returning(json.dumps(details)).extract_meeting_details("x") == details

    async def test_no_meeting(self):
        assert await service_returning("{}").extract_meeting_details("x") is None

    async def test_invalid_json(self):
        assert await service_returning("not json").extract_meeting_details("x") is None

    async def test_upstream_failure(self):
        assert await failing_service().extract_meeting_details("x") is None


class TestPriority:
    @pytest.mark.parametrize("answer,expected", [("high", "high"), ("Medium\n", "medium"), ('"low".', "low")])
    async def test_model_answer(self, answer, expected):
        assert await service_returning(answer).analyze_email_priority("Hello", "World") == expected

    async def test_unexpected_answer_uses_heuristic(self):
        service = service_returning("it depends")

        assert await service.analyze_email_priority("URGENT: server down", "") == "high"

    async def test_upstream_failure_is_low(self):
        assert await failing_service().analyze_email_priority("URGENT", "asap") == "low"

    @pytest.mark.parametrize(
        "subject,snippet,expected",
        [
            ("Urgent request", "", "high"),
            ("Hello", "please reply asap", "high"),
            ("Team meeting", "", "medium"),
            ("Let's schedule", "", "medium"),
            ("Newsletter", "weekly digest", "low"),
        ],
    )
    def test_heuristic(self, subject, snippet, expected):
        assert heuristic_priority(subject, snippet) == expected


class TestChat:
    async def test_chat_includes_context(self):
        requests = []
        service = service_returning("You have 2 urgent emails.", requests)

        answer = await service.chat("What is urgent?", {"highPriorityEmails": 2})

        assert answer == "You have 2 urgent emails."
        prompt = json.loads(requests[0].content)["contents"][0]["parts"][0]["text"]
        assert '"highPriorityEmails": 2' in prompt
        assert "What is urgent?" in prompt

    async def test_upstream_failure_apologizes(self):
        assert await failing_service().chat("hi") == CHAT_ERROR_REPLY
