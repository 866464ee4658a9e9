"""Analysis collaborator module.

Vendor SDKs sit behind the AnalysisProvider interface; vendor modules are
imported lazily by the factory.
"""

from accident_analytics.infrastructure.analysis.factory import (
    get_analysis_provider,
    reset_analysis_provider,
    set_analysis_provider,
)
from accident_analytics.infrastructure.analysis.parsing import parse_report, strip_fences
from accident_analytics.infrastructure.analysis.provider import AnalysisProvider, ChatTurn, ProviderResponse

__all__ = [
    "get_analysis_provider",
    "reset_analysis_provider",
    "set_analysis_provider",
    "parse_report",
    "strip_fences",
    "AnalysisProvider",
    "ChatTurn",
    "ProviderResponse",
]
