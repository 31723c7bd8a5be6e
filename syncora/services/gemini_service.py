"""
Gemini Service

Thin client for the generative-language REST API (``generateContent``).
Used for email summaries, priority classification, meeting and task
extraction, and the dashboard assistant. Apart from ``summarize_email``,
every call degrades to a safe default when the API is unavailable.
"""

import json
import logging
from typing import Any

import httpx

from syncora.config import settings
from syncora.exceptions import ServiceError

logger = logging.getLogger(__name__)

PRIORITIES = ("high", "medium", "low")

SUMMARY_FALLBACK = "Could not generate summary"
CHAT_FALLBACK = "I'm sorry, I couldn't process that request."
CHAT_ERROR_REPLY = "I'm experiencing technical difficulties. Please try again."

MEETING_PROMPT = """You are an expert at extracting meeting information from emails.
Extract meeting details and return JSON with these fields:
- date (string, e.g., "January 15, 2025")
- time (string, e.g., "2:00 PM - 3:00 PM")
- location (string, physical location or meeting link)
- attendees (array of strings, participant names)
Return null for any field not found. If no meeting is detected, return an empty object."""

PRIORITY_PROMPT = """You are an email priority analyzer. Analyze the email and classify its priority as "high", "medium", or "low" based on urgency, importance, and action requirements.

High priority: Urgent deadlines, critical issues, action required, executive requests
Medium priority: Meetings, scheduled events, routine follow-ups, information requests
Low priority: Newsletters, notifications, non-urgent updates

Return only one word: high, medium, or low."""


def heuristic_priority(subject: str, snippet: str) -> str:
    """Keyword fallback used when the model answers with something unexpected."""
    text = f"{subject} {snippet}".lower()
    if "urgent" in text or "asap" in text or "critical" in text:
        return "high"
    if "meeting" in text or "schedule" in text:
        return "medium"
    return "low"


class GeminiService:
    """Client for the generative-language API."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float | None = None,
    ):
        self.api_key = api_key if api_key is not None else settings.gemini_api_key
        self.base_url = (base_url or settings.gemini_base_url).rstrip("/")
        self._transport = transport
        self._timeout = timeout or settings.gemini_timeout_seconds

    async def summarize_email(self, content: str) -> str:
        prompt = (
            "Analyze this email and provide a concise summary with key points. "
            "Also extract any meeting details (date, time, location, attendees) if present:\n\n"
            f"{content}"
        )
        text = await self._generate(settings.gemini_fast_model, prompt)
        return text or SUMMARY_FALLBACK

    async def extract_meeting_details(self, content: str) -> dict[str, Any] | None:
        try:
            raw = await self._generate(
                settings.gemini_pro_model,
                content,
                system_instruction=MEETING_PROMPT,
                response_mime_type="application/json",
            )
            if not raw:
                return None
            data = json.loads(raw)
        except (ServiceError, json.JSONDecodeError) as e:
            logger.error(f"Failed to extract meeting details: {e}")
            return None

        if isinstance(data, dict) and data:
            return data
        return None

    async def analyze_email_priority(self, subject: str, snippet: str) -> str:
        try:
            raw = await self._generate(
                settings.gemini_fast_model,
                f"Subject: {subject}\nPreview: {snippet}",
                system_instruction=PRIORITY_PROMPT,
            )
        except ServiceError as e:
            logger.error(f"Priority analysis error: {e}")
            return "low"

        priority = (raw or "").strip().strip('".').lower()
        if priority in PRIORITIES:
            return priority
        return heuristic_priority(subject, snippet)

    async def chat(self, message: str, context: dict[str, Any] | None = None) -> str:
        prompt = message
        if context:
            prompt = (
                f"Context: {json.dumps(context)}\n\n"
                f"User question: {message}\n\n"
                "Provide a helpful response based on the context."
            )

        try:
            text = await self._generate(settings.gemini_fast_model, prompt)
        except ServiceError as e:
            logger.error(f"AI chat error: {e}")
            return CHAT_ERROR_REPLY
        return text or CHAT_FALLBACK

    async def _generate(
        self,
        model: str,
        contents: str,
        system_instruction: str | None = None,
        response_mime_type: str | None = None,
    ) -> str | None:
        """Call ``models/{model}:generateContent`` and return the first candidate's text."""
        if not self.api_key:
            raise ServiceError("Generative-language API key is not configured", service="gemini", status_code=503)

        payload: dict[str, Any] = {"contents": [{"role": "user", "parts": [{"text": contents}]}]}
        if system_instruction:
            payload["systemInstruction"] = {"parts": [{"text": system_instruction}]}

        generation_config: dict[str, Any] = {}
        if response_mime_type:
            generation_config["responseMimeType"] = response_mime_type
        if generation_config:
            payload["generationConfig"] = generation_config

        url = f"{self.base_url}/models/{model}:generateContent"
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self._timeout) as client:
                response = await client.post(url, json=payload, headers={"x-goog-api-key": self.api_key})
                response.raise_for_status()
                body = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise ServiceError(f"Generative-language request failed: {e}", service="gemini") from e

        return self._extract_text(body)

    @staticmethod
    def _extract_text(body: dict) -> str | None:
        candidates = body.get("candidates") or []
        if not candidates:
            return None
        parts = (candidates[0].get("content") or {}).get("parts") or []
        texts = [part.get("text") for part in parts if part.get("text")]
        return "".join(texts) if texts else None


def get_gemini_service() -> GeminiService:
    """FastAPI dependency for GeminiService."""
    return GeminiService()
