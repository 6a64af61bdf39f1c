from typing import List, Literal

from .common import CamelModel


class ChatMessage(CamelModel):
    role: str
    content: str


class ChatRequest(CamelModel):
    messages: List[ChatMessage] = []
    language: Literal["en", "hi"] = "en"


class ChatResponse(CamelModel):
    reply: str
    model: str
