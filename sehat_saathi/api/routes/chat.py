from fastapi import APIRouter, Depends

from ...api.deps import get_chat_service, require_auth
from ...core.security import Identity
from ...services.chat_service import AIChatService
from ...schemas.chat import ChatRequest, ChatResponse

router = APIRouter(prefix="/chat", tags=["Assistant"])


@router.post("/ai", response_model=ChatResponse)
async def chat_with_assistant(
    chat_data: ChatRequest,
    identity: Identity = Depends(require_auth),
    chat_service: AIChatService = Depends(get_chat_service),
):
    """Relay a conversation to the AI assistant; authenticated to prevent abuse."""
    return await chat_service.reply(chat_data.messages, chat_data.language)
