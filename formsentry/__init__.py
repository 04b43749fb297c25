"""
FormSentry

Resilient automation of a single-page sign-up form:
- Locator catalog with ordered fallback strategies per semantic role
- Discovery across the top document and every child frame
- Visibility-gated, polling element lookup
- Click, type and checkbox primitives with scripted fallbacks
- Custom dropdown handling for unknown widget libraries
- Submission outcome classification under a bounded time budget
"""

from .config import SentryConfig
from .errors import (
    FormSentryError,
    ElementNotFoundError,
    ScopeError,
    InteractionError,
    WorkflowStepError,
    FailureType
)
from .knowledge.locator_catalog import LocatorCatalog, LocatorStrategy, CandidateList, Role, SelectorType
from .context.navigator import ContextNavigator, Scope, TOP
from .core.outcome import OutcomeKind, SubmissionOutcome
from .signup_page import SignUpPage
from .runner import SignUpRunner, RunResult, StepResult, StepStatus

__version__ = "1.0.0"

__all__ = [
    # Configuration
    "SentryConfig",
    # Errors
    "FormSentryError",
    "ElementNotFoundError",
    "ScopeError",
    "InteractionError",
    "WorkflowStepError",
    "FailureType",
    # Locators
    "LocatorCatalog",
    "LocatorStrategy",
    "CandidateList",
    "Role",
    "SelectorType",
    # Scopes
    "ContextNavigator",
    "Scope",
    "TOP",
    # Workflow
    "OutcomeKind",
    "SubmissionOutcome",
    "SignUpPage",
    "SignUpRunner",
    "RunResult",
    "StepResult",
    "StepStatus"
]
