"""Assistant API Routes"""

import logging

from fastapi import APIRouter, Depends

from accident_analytics.api.dependencies import get_assistant
from accident_analytics.core.assistant import ForensicAssistant
from accident_analytics.infrastructure.analysis import ChatTurn
from accident_analytics.models import ChatRequest, ChatResponse

router = APIRouter(prefix="/api/v1/assistant", tags=["assistant"])
logger = logging.getLogger(__name__)


@router.post(
    "/chat",
    response_model=ChatResponse,
    summary="Forensic Assistant Chat",
    description="""
Send the conversation history and the next message; returns the assistant's
reply in the user's language. Collaborator failures produce a fixed apology
instead of an error.
    """,
    responses={
        200: {"description": "Reply returned"},
        503: {"description": "Analysis provider is not configured"}
    }
)
async def chat(
    request: ChatRequest,
    assistant: ForensicAssistant = Depends(get_assistant)
) -> ChatResponse:
    history = [ChatTurn(role=turn.role, text=turn.text) for turn in request.history]
    reply = await assistant.reply(request.message, history)
    return ChatResponse(reply=reply)
