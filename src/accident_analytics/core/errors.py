"""Exception hierarchy for the analysis pipeline.

Every error carries a ``safe_message`` suitable for the operator. The full
message is for logs only and is never returned by the API.
"""

from typing import Optional


class AccidentAnalyticsError(Exception):
    """Base exception for the accident analytics service."""

    def __init__(self, message: str, *, safe_message: Optional[str] = None) -> None:
        super().__init__(message)
        self._safe_message = safe_message or message

    @property
    def safe_message(self) -> str:
        """Return operator-safe error message."""
        return self._safe_message


class IntakeError(AccidentAnalyticsError):
    """Evidence intake problem (empty queue, unknown item, rejected file)."""

    pass


class IntakeNotFound(IntakeError):
    """Unknown intake session or evidence item."""

    pass


class ValidationAborted(AccidentAnalyticsError):
    """A validation check could not complete.

    Raised when:
    - An evidence payload disappeared from storage mid-run
    - A checker reported an error verdict
    - A checker raised an unexpected exception
    """

    def __init__(self, message: str, check_id: Optional[str] = None) -> None:
        super().__init__(
            message,
            safe_message="Evidence validation could not complete. Please re-check the queued files."
        )
        self.check_id = check_id


class InvalidTransition(AccidentAnalyticsError):
    """Orchestrator was asked to move between states that are not connected."""

    def __init__(self, current: str, target: str) -> None:
        super().__init__(
            f"Illegal transition {current} -> {target}",
            safe_message="The analysis is not in a state that allows this action."
        )
        self.current = current
        self.target = target


class AnalysisError(AccidentAnalyticsError):
    """The analysis collaborator failed to produce a usable result."""

    def __init__(self, message: str, *, safe_message: Optional[str] = None) -> None:
        super().__init__(
            message,
            safe_message=safe_message or "Analysis failed. Please retry."
        )


class AnalysisTimeout(AnalysisError):
    """Collaborator call exceeded the configured timeout."""

    pass


class ReportParseError(AnalysisError):
    """Collaborator response is missing, malformed or not schema-conformant."""

    pass


class SimulationNotPermitted(ReportParseError):
    """Collaborator returned a simulated report while simulation is disabled."""

    pass


class AuthenticationError(AccidentAnalyticsError):
    """Login, sign-up or session validation failure."""

    pass
