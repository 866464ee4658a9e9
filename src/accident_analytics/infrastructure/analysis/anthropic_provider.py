"""Anthropic Analysis Provider

Claude collaborator using the anthropic SDK. Images and PDFs are sent as
content blocks; media types the Messages API cannot take are described in
the prompt instead. The report schema travels in the prompt text.
"""

import base64
import json
import logging
import os
from typing import Any, Dict, List

import anthropic

from accident_analytics.core.errors import AnalysisError
from accident_analytics.infrastructure.analysis.prompts import (
    CHAT_INSTRUCTION,
    SYSTEM_INSTRUCTION,
    build_directive,
    report_schema,
)
from accident_analytics.infrastructure.analysis.provider import AnalysisProvider, ChatTurn, ProviderResponse
from accident_analytics.models.evidence import AnalysisRequest, EvidencePart

logger = logging.getLogger(__name__)

IMAGE_TYPES = {"image/jpeg", "image/png", "image/gif", "image/webp"}


def _content_block(part: EvidencePart) -> Dict[str, Any]:
    data = base64.standard_b64encode(part.data).decode("ascii")
    if part.mime_type in IMAGE_TYPES:
        return {"type": "image", "source": {"type": "base64", "media_type": part.mime_type, "data": data}}
    if part.mime_type == "application/pdf":
        return {"type": "document", "source": {"type": "base64", "media_type": part.mime_type, "data": data}}
    return {
        "type": "text",
        "text": f"[Evidence {part.digest[:12]} of type {part.mime_type} ({len(part.data)} bytes) "
                f"cannot be attached directly; treat it as unavailable.]",
    }


class AnthropicAnalysisProvider(AnalysisProvider):
    """Claude generative analysis collaborator"""

    name = "anthropic"

    def __init__(self, api_key: str = None, model: str = "claude-sonnet-4-5", max_tokens: int = 16384):
        api_key = api_key or os.getenv("ANTHROPIC_API_KEY")
        if not api_key:
            raise ValueError("ANTHROPIC_API_KEY environment variable or api_key parameter is required")

        self.client = anthropic.AsyncAnthropic(api_key=api_key)
        self.model = model
        self.max_tokens = max_tokens

        logger.info(f"Anthropic analysis provider initialized - model: {self.model}")

    async def generate(self, request: AnalysisRequest) -> ProviderResponse:
        schema = json.dumps(report_schema(request.jurisdiction), indent=1)
        blocks = [_content_block(part) for part in request.parts]
        blocks.append({
            "type": "text",
            "text": f"{build_directive(request)}\n\nRespond with a single JSON object matching this schema:\n{schema}",
        })

        try:
            message = await self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                system=SYSTEM_INSTRUCTION,
                messages=[{"role": "user", "content": blocks}],
            )
        except anthropic.APIError as e:
            logger.error(f"Anthropic analysis call failed: {e}")
            raise AnalysisError(f"Anthropic API error: {e}") from e

        text = "".join(block.text for block in message.content if block.type == "text")
        if not text:
            raise AnalysisError("Anthropic returned no response text")

        return ProviderResponse(text=text, model=self.model)

    async def chat(self, history: List[ChatTurn], message: str) -> str:
        messages = [
            {"role": "assistant" if turn.role == "model" else "user", "content": turn.text}
            for turn in history
        ]
        # The Messages API requires the conversation to open with a user turn
        while messages and messages[0]["role"] == "assistant":
            messages.pop(0)
        messages.append({"role": "user", "content": message})

        try:
            reply = await self.client.messages.create(
                model=self.model,
                max_tokens=1024,
                system=CHAT_INSTRUCTION,
                messages=messages,
            )
        except anthropic.APIError as e:
            logger.error(f"Anthropic chat call failed: {e}")
            raise AnalysisError(f"Anthropic API error: {e}") from e

        text = "".join(block.text for block in reply.content if block.type == "text")
        if not text:
            raise AnalysisError("Anthropic returned an empty chat reply")
        return text
