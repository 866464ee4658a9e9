"""Gemini Analysis Provider

Google Gemini collaborator using the google-genai SDK with structured JSON
output.
"""

import logging
import os
from typing import List

from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from accident_analytics.core.errors import AnalysisError
from accident_analytics.infrastructure.analysis.prompts import (
    CHAT_INSTRUCTION,
    SYSTEM_INSTRUCTION,
    build_directive,
    report_schema,
)
from accident_analytics.infrastructure.analysis.provider import AnalysisProvider, ChatTurn, ProviderResponse
from accident_analytics.models.evidence import AnalysisRequest

logger = logging.getLogger(__name__)


class GeminiAnalysisProvider(AnalysisProvider):
    """Gemini generative analysis collaborator"""

    name = "gemini"

    def __init__(
        self,
        api_key: str = None,
        model: str = "gemini-3-pro-preview",
        max_output_tokens: int = 65536,
        thinking_budget: int = 32768
    ):
        api_key = api_key or os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY")
        if not api_key:
            raise ValueError("GEMINI_API_KEY environment variable or api_key parameter is required")

        self.client = genai.Client(api_key=api_key)
        self.model = model
        self.max_output_tokens = max_output_tokens
        self.thinking_budget = thinking_budget

        logger.info(f"Gemini analysis provider initialized - model: {self.model}")

    async def generate(self, request: AnalysisRequest) -> ProviderResponse:
        contents = [
            types.Part.from_bytes(data=part.data, mime_type=part.mime_type)
            for part in request.parts
        ]
        contents.append(types.Part.from_text(text=build_directive(request)))

        config = types.GenerateContentConfig(
            response_mime_type="application/json",
            response_schema=report_schema(request.jurisdiction),
            max_output_tokens=self.max_output_tokens,
            thinking_config=types.ThinkingConfig(thinking_budget=self.thinking_budget),
            system_instruction=SYSTEM_INSTRUCTION,
        )

        try:
            response = await self.client.aio.models.generate_content(
                model=self.model,
                contents=contents,
                config=config,
            )
        except genai_errors.APIError as e:
            logger.error(f"Gemini analysis call failed (code: {e.code}): {e}")
            raise AnalysisError(f"Gemini API error {e.code}: {e.message}") from e

        text = response.text
        if not text:
            raise AnalysisError("Gemini returned no response text")

        return ProviderResponse(text=text, model=self.model)

    async def chat(self, history: List[ChatTurn], message: str) -> str:
        session = self.client.aio.chats.create(
            model=self.model,
            config=types.GenerateContentConfig(system_instruction=CHAT_INSTRUCTION),
            history=[
                types.Content(role=turn.role, parts=[types.Part.from_text(text=turn.text)])
                for turn in history
            ],
        )

        try:
            result = await session.send_message(message)
        except genai_errors.APIError as e:
            logger.error(f"Gemini chat call failed (code: {e.code}): {e}")
            raise AnalysisError(f"Gemini API error {e.code}: {e.message}") from e

        if not result.text:
            raise AnalysisError("Gemini returned an empty chat reply")
        return result.text
