"""
Errors

Exception taxonomy for discovery and interaction failures, plus the
failure classifier used to explain which fallback an interaction took.
"""

import logging
from enum import Enum
from typing import Optional, Sequence

# Configure logging
logger = logging.getLogger(__name__)


class FailureType(Enum):
    """Types of low-level failures raised by the browser driver"""
    NOT_FOUND = "not_found"
    NOT_VISIBLE = "not_visible"
    NOT_ENABLED = "not_enabled"
    STALE = "stale"
    OBSTRUCTED = "obstructed"
    TIMEOUT = "timeout"
    UNKNOWN = "unknown"


def classify_failure(error: Exception) -> FailureType:
    """
    Classify a driver failure based on its message.

    Args:
        error: The exception that occurred

    Returns:
        Classified failure type
    """
    error_str = str(error).lower()

    # Stale handle (node removed between query and use)
    if any(msg in error_str for msg in ["stale", "detached", "not attached", "no longer attached"]):
        return FailureType.STALE

    # Another element receives the pointer event
    if any(msg in error_str for msg in ["intercepts pointer events", "intercepted", "obscured", "other element"]):
        return FailureType.OBSTRUCTED

    if any(msg in error_str for msg in ["not visible", "hidden", "display: none"]):
        return FailureType.NOT_VISIBLE

    if any(msg in error_str for msg in ["disabled", "not enabled", "readonly", "not editable"]):
        return FailureType.NOT_ENABLED

    if any(msg in error_str for msg in ["no element", "not found", "unable to locate"]):
        return FailureType.NOT_FOUND

    if "timeout" in error_str:
        return FailureType.TIMEOUT

    return FailureType.UNKNOWN


class FormSentryError(Exception):
    """Base class for all FormSentry errors"""


class ElementNotFoundError(FormSentryError):
    """No strategy of a candidate list matched a visible element in any scope"""

    def __init__(self, role: str, selectors: Sequence[str] = (), elapsed: float = 0.0,
                 message: Optional[str] = None):
        self.role = role
        self.selectors = list(selectors)
        self.elapsed = elapsed
        if message is None:
            message = (
                f"No visible element for '{role}' after {elapsed:.1f}s "
                f"(tried {len(self.selectors)} selectors: {self.selectors})"
            )
        super().__init__(message)


class ScopeError(FormSentryError):
    """A frame scope no longer exists in the top document"""


class InteractionError(FormSentryError):
    """Every fallback of an interaction primitive failed"""

    def __init__(self, action: str, reason: str):
        self.action = action
        self.reason = reason
        super().__init__(f"{action} failed: {reason}")


class WorkflowStepError(FormSentryError):
    """A logical workflow step failed after all of its tiers were exhausted"""

    def __init__(self, step: str, cause: Optional[BaseException] = None):
        self.step = step
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"{step}{detail}")
