"""
Submission Outcome Detector

After a submit, races four signals under a bounded budget and classifies
what happened. Signal priority within one tick is fixed:

1. visible error banner carrying a validation keyword -> VALIDATION_ERROR
2. visible success banner                              -> SUCCESS
3. page text contains every success phrase             -> SUCCESS
4. URL differs from the URL before submitting          -> SUCCESS

Error detection dominates: when an error and a success signal are both
true in the same tick, the outcome is VALIDATION_ERROR.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from playwright.sync_api import Error as PlaywrightError, Frame, Page

from ..context.navigator import ContextNavigator
from ..knowledge.locator_catalog import LocatorCatalog, Role
from .finder import VisibilityGatedFinder
from .polling import Poller

# Configure logging
logger = logging.getLogger(__name__)


BODY_TEXT_SCRIPT = "() => (document.body && (document.body.innerText || document.body.textContent)) || ''"


class OutcomeKind(str, Enum):
    SUCCESS = "success"
    VALIDATION_ERROR = "validation_error"
    TIMEOUT = "timeout"


@dataclass(frozen=True)
class SubmissionOutcome:
    """Result of one submit attempt. `message` is diagnostics only."""
    kind: OutcomeKind
    message: Optional[str] = None
    signal: Optional[str] = None

    @property
    def is_success(self) -> bool:
        return self.kind == OutcomeKind.SUCCESS

    @classmethod
    def success(cls, signal: str) -> "SubmissionOutcome":
        return cls(OutcomeKind.SUCCESS, signal=signal)

    @classmethod
    def validation_error(cls, message: str) -> "SubmissionOutcome":
        return cls(OutcomeKind.VALIDATION_ERROR, message=message, signal="error_banner")

    @classmethod
    def timeout(cls) -> "SubmissionOutcome":
        return cls(OutcomeKind.TIMEOUT)


class SubmissionOutcomeDetector:
    """
    Classifies the page state after a form submission.

    Args:
        page: Playwright page (for the current URL)
        navigator: Scope walker
        finder: Visibility-gated finder
        catalog: Locator catalog (success/error banner roles)
        poller: Polling combinator
        validation_keywords: Words that mark an error banner as a real validation message
        success_phrases: Fragments that must all appear in page text for a text-based success
    """

    DEFAULT_BUDGET = 8.0
    DEFAULT_INTERVAL = 0.12

    def __init__(
        self,
        page: Page,
        navigator: ContextNavigator,
        finder: VisibilityGatedFinder,
        catalog: LocatorCatalog,
        poller: Optional[Poller] = None,
        budget_s: float = DEFAULT_BUDGET,
        interval_s: float = DEFAULT_INTERVAL,
        validation_keywords: Sequence[str] = ("required", "invalid", "please"),
        success_phrases: Sequence[str] = ("welcome email", "check your email")
    ):
        self.page = page
        self.navigator = navigator
        self.finder = finder
        self.catalog = catalog
        self.poller = poller or finder.poller
        self.budget_s = budget_s
        self.interval_s = interval_s
        self.validation_keywords = tuple(k.lower() for k in validation_keywords)
        self.success_phrases = tuple(p.lower() for p in success_phrases)

    # ==================== Text helpers ====================

    def _carries_success_phrases(self, text: str) -> bool:
        lowered = text.lower()
        return all(phrase in lowered for phrase in self.success_phrases)

    def _is_validation_text(self, text: str) -> bool:
        lowered = text.lower()
        if not any(keyword in lowered for keyword in self.validation_keywords):
            return False
        # A confirmation such as "Please check your email" is not a validation error
        return not self._carries_success_phrases(text)

    def _body_text(self, frame: Frame) -> str:
        try:
            return str(frame.evaluate(BODY_TEXT_SCRIPT) or "")
        except PlaywrightError as e:
            logger.debug(f"Could not read body text: {e}")
            return ""

    def page_contains_text(self, snippet: str) -> bool:
        """Case-insensitive search of the body text of every scope"""
        needle = snippet.lower()
        return bool(self.navigator.for_each_scope(
            lambda scope, frame: needle in self._body_text(frame).lower()
        ))

    def page_contains_all(self, snippets: Sequence[str]) -> bool:
        return all(self.page_contains_text(s) for s in snippets)

    # ==================== Signals ====================

    def _error_in_frame(self, frame: Frame) -> Optional[str]:
        for strategy in self.catalog.get(Role.ERROR_BANNER):
            for element in self.finder.visible_elements(strategy, frame):
                try:
                    text = (element.inner_text() or "").strip()
                except PlaywrightError:
                    continue
                if text and self._is_validation_text(text):
                    return text
        return None

    def error_signal(self) -> Optional[str]:
        return self.navigator.for_each_scope(lambda scope, frame: self._error_in_frame(frame))

    def success_banner_signal(self) -> bool:
        candidates = self.catalog.get(Role.SUCCESS_BANNER)
        return bool(self.navigator.for_each_scope(
            lambda scope, frame: self.finder.any_visible(candidates, frame)
        ))

    def success_text_signal(self) -> bool:
        return bool(self.success_phrases) and self.page_contains_all(self.success_phrases)

    def url_changed_signal(self, start_url: str) -> bool:
        try:
            return self.page.url != start_url
        except PlaywrightError:
            return False

    # ==================== Detection ====================

    def check_once(self, start_url: str) -> Optional[SubmissionOutcome]:
        """Evaluate every signal once, in priority order"""
        error_text = self.error_signal()
        if error_text:
            return SubmissionOutcome.validation_error(error_text)
        if self.success_banner_signal():
            return SubmissionOutcome.success("success_banner")
        if self.success_text_signal():
            return SubmissionOutcome.success("success_text")
        if self.url_changed_signal(start_url):
            return SubmissionOutcome.success("url_change")
        return None

    def wait_for_outcome(self, start_url: str, budget_s: Optional[float] = None) -> SubmissionOutcome:
        """
        Poll until a signal fires or the budget elapses.

        Returns:
            SUCCESS, VALIDATION_ERROR (returned as soon as it is seen) or TIMEOUT
        """
        budget = self.budget_s if budget_s is None else budget_s
        outcome = self.poller.until(lambda: self.check_once(start_url), budget, interval=self.interval_s)
        if outcome is None:
            logger.info(f"No submission outcome within {budget:.1f}s")
            return SubmissionOutcome.timeout()

        if outcome.kind == OutcomeKind.VALIDATION_ERROR:
            logger.warning(f"Submission rejected: {outcome.message}")
        else:
            logger.info(f"Submission succeeded ({outcome.signal})")
        return outcome
