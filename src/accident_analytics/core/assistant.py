"""
Forensic Assistant

Conversational helper for investigators. Replies in the user's language; any
collaborator failure becomes a fixed apology rather than an error.
"""

import logging
from typing import List, Optional

from accident_analytics.core.errors import AnalysisError
from accident_analytics.infrastructure.analysis.provider import AnalysisProvider, ChatTurn

logger = logging.getLogger(__name__)

GREETING = (
    "Hello! I am your Forensic AI Assistant. I can help you understand reports, "
    "explain physics concepts, or clarify legal statutes. How can I help today?"
)
FALLBACK_REPLY = "I encountered an error accessing the forensic database. Please try again."


class ForensicAssistant:
    def __init__(self, provider: AnalysisProvider):
        self.provider = provider

    async def reply(self, message: str, history: Optional[List[ChatTurn]] = None) -> str:
        try:
            return await self.provider.chat(history or [], message)
        except AnalysisError as e:
            logger.error(f"Assistant reply failed: {e}")
            return FALLBACK_REPLY
