from typing import List, Optional
import logging

import httpx
from fastapi import status

from ..core.exceptions import UpstreamUnavailableError
from ..schemas.chat import ChatMessage, ChatResponse

logger = logging.getLogger(__name__)

MAX_HISTORY = 10
MAX_MESSAGE_CHARS = 2000

SYSTEM_PROMPT = (
    "You are Sehat Saathi, a concise bilingual (English/Hindi) health assistant.\n"
    "Guidelines:\n"
    "- Provide general, educational health info only.\n"
    "- Always include a brief disclaimer that this is not a medical diagnosis.\n"
    "- If language='hi', respond fully in Hindi (Devanagari).\n"
    "- If potentially emergency (e.g., chest pain, stroke signs, severe bleeding), "
    "clearly advise seeking emergency services (108 in India).\n"
    "- Keep answers under 180 words.\n"
    "- Avoid prescribing specific dosages beyond common OTC guidance disclaimers.\n"
    "- If user asks about booking an appointment, remind they can use the in-app "
    "appointment booking feature."
)

FALLBACK_REPLY = "Sorry, I could not generate a response."

SAFETY_SETTINGS = [
    {"category": category, "threshold": "BLOCK_NONE"}
    for category in (
        "HARM_CATEGORY_DANGEROUS_CONTENT",
        "HARM_CATEGORY_HATE_SPEECH",
        "HARM_CATEGORY_HARASSMENT",
        "HARM_CATEGORY_SEXUAL_CONTENT",
    )
]


class AIChatService:
    """Forwards a short conversation to a Gemini-style generateContent endpoint."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        api_key: Optional[str],
        model: str,
        api_url: str,
    ):
        self.client = client
        self.api_key = api_key
        self.model = model
        self.api_url = api_url.rstrip("/")

    def build_payload(self, messages: List[ChatMessage], language: str) -> dict:
        recent = messages[-MAX_HISTORY:]
        contents = [{"role": "user", "parts": [{"text": f"{SYSTEM_PROMPT}\nlanguage={language}"}]}]
        for message in recent:
            contents.append({
                "role": "user" if message.role == "user" else "model",
                "parts": [{"text": message.content[:MAX_MESSAGE_CHARS]}],
            })
        return {
            "contents": contents,
            "generationConfig": {
                "temperature": 0.7,
                "topK": 40,
                "topP": 0.9,
                "maxOutputTokens": 512,
            },
            "safetySettings": SAFETY_SETTINGS,
        }

    async def reply(self, messages: List[ChatMessage], language: str = "en") -> ChatResponse:
        if not self.api_key:
            raise UpstreamUnavailableError(
                "AI temporarily unavailable (missing API key)",
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            )

        url = f"{self.api_url}/{self.model}:generateContent"
        try:
            response = await self.client.post(
                url,
                params={"key": self.api_key},
                json=self.build_payload(messages, language),
            )
        except httpx.HTTPError as exc:
            logger.error(f"AI upstream request failed: {exc.__class__.__name__}")
            raise UpstreamUnavailableError("AI request failed") from exc

        if response.status_code != 200:
            logger.error(f"AI upstream returned {response.status_code}")
            raise UpstreamUnavailableError("AI upstream error")

        try:
            data = response.json()
        except ValueError as exc:
            raise UpstreamUnavailableError("AI upstream returned an unreadable response") from exc
        candidates = data.get("candidates") or [{}]
        parts = (candidates[0].get("content") or {}).get("parts") or []
        text = "\n".join(part.get("text", "") for part in parts).strip()

        return ChatResponse(reply=text or FALLBACK_REPLY, model=self.model)
