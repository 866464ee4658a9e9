"""Analysis Provider Interface

Decouples the orchestrator from any particular generative-model SDK.
"""

from abc import ABC, abstractmethod
from typing import List, Literal, Optional

from pydantic import BaseModel

from accident_analytics.infrastructure.analysis.parsing import parse_report
from accident_analytics.models.evidence import AnalysisRequest
from accident_analytics.models.report import AnalysisReport


class ProviderResponse(BaseModel):
    """Raw collaborator output before parsing"""

    text: Optional[str]
    model: str


class ChatTurn(BaseModel):
    role: Literal["user", "model"]
    text: str


class AnalysisProvider(ABC):
    """Generative analysis collaborator"""

    name: str = "provider"

    @abstractmethod
    async def generate(self, request: AnalysisRequest) -> ProviderResponse:
        """Invoke the model for a report.

        Raises:
            AnalysisError: If the invocation fails or returns nothing usable
        """
        pass

    @abstractmethod
    async def chat(self, history: List[ChatTurn], message: str) -> str:
        """Free-text assistant reply in the user's language.

        Raises:
            AnalysisError: If the invocation fails
        """
        pass

    async def request_analysis(
        self,
        request: AnalysisRequest,
        strict_liability: bool = False
    ) -> AnalysisReport:
        """Generate and parse in one step.

        Raises:
            AnalysisError: On invocation or parse failure
        """
        response = await self.generate(request)
        return parse_report(
            response.text,
            model=response.model,
            allow_simulation=request.allow_simulation,
            strict_liability=strict_liability,
        )
