"""
Core Module

Polling, element discovery, interaction primitives, dropdown handling
and submission outcome detection.
"""

from .polling import Poller
from .finder import VisibilityGatedFinder, Located
from .interactions import InteractionPrimitives
from .dropdown import DropdownProtocol, NativeSelectHandler
from .outcome import SubmissionOutcomeDetector, SubmissionOutcome, OutcomeKind

__all__ = [
    "Poller",
    "VisibilityGatedFinder",
    "Located",
    "InteractionPrimitives",
    "DropdownProtocol",
    "NativeSelectHandler",
    "SubmissionOutcomeDetector",
    "SubmissionOutcome",
    "OutcomeKind"
]
