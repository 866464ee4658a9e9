"""Analysis Provider Factory

Chooses the generative collaborator based on ANALYSIS_PROVIDER.
"""

import logging
from typing import Optional

from accident_analytics.config.settings import settings
from accident_analytics.infrastructure.analysis.provider import AnalysisProvider

logger = logging.getLogger(__name__)

_provider_instance: Optional[AnalysisProvider] = None


def get_analysis_provider() -> AnalysisProvider:
    """Get or create the global analysis provider instance.

    Settings:
        ANALYSIS_PROVIDER: "gemini" (default) or "anthropic"
        GEMINI_API_KEY / GEMINI_MODEL / GEMINI_THINKING_BUDGET
        ANTHROPIC_API_KEY / ANTHROPIC_MODEL

    Raises:
        ValueError: Unknown provider or missing credentials
    """
    global _provider_instance

    if _provider_instance is not None:
        return _provider_instance

    provider_type = settings.analysis_provider.lower()
    logger.info(f"Initializing analysis provider: {provider_type}")

    if provider_type == "gemini":
        from accident_analytics.infrastructure.analysis.gemini import GeminiAnalysisProvider

        _provider_instance = GeminiAnalysisProvider(
            api_key=settings.gemini_api_key,
            model=settings.gemini_model,
            max_output_tokens=settings.max_output_tokens,
            thinking_budget=settings.gemini_thinking_budget,
        )
    elif provider_type == "anthropic":
        from accident_analytics.infrastructure.analysis.anthropic_provider import AnthropicAnalysisProvider

        _provider_instance = AnthropicAnalysisProvider(
            api_key=settings.anthropic_api_key,
            model=settings.anthropic_model,
        )
    else:
        raise ValueError(f"Unknown ANALYSIS_PROVIDER: {settings.analysis_provider}")

    return _provider_instance


def set_analysis_provider(provider: AnalysisProvider) -> None:
    """Install a specific provider instance (tests, embedded use)."""
    global _provider_instance
    _provider_instance = provider


def reset_analysis_provider():
    global _provider_instance
    _provider_instance = None
    logger.warning("Analysis provider instance reset")
