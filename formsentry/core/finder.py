"""
Visibility-Gated Finder

Given a role's candidate list and a scope, returns the first currently
visible match. Strategies are evaluated in list order on every tick and
the first strategy with a visible element wins; results are never merged
across strategies and never cached between ticks.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from playwright.sync_api import Error as PlaywrightError, ElementHandle, Frame

from ..context.navigator import ContextNavigator, Scope, TOP
from ..errors import ElementNotFoundError
from ..knowledge.locator_catalog import CandidateList, LocatorStrategy
from .polling import Poller

# Configure logging
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Located:
    """A located element, bound to the scope it was found in"""
    element: ElementHandle
    scope: Scope
    strategy: LocatorStrategy


class VisibilityGatedFinder:
    """
    Finds the first visible element of a candidate list.

    Transient driver errors (node detached between query and visibility
    check) count as "no match this tick".
    """

    DEFAULT_TIMEOUT = 3.0

    def __init__(
        self,
        navigator: ContextNavigator,
        poller: Optional[Poller] = None,
        timeout: float = DEFAULT_TIMEOUT
    ):
        self.navigator = navigator
        self.poller = poller or Poller()
        self.timeout = timeout

    # ==================== Single pass ====================

    def query(self, strategy: LocatorStrategy, frame: Frame) -> List[ElementHandle]:
        """All nodes matching a strategy in a frame; [] on driver errors"""
        try:
            return frame.query_selector_all(strategy.to_selector())
        except PlaywrightError as e:
            logger.debug(f"Query {strategy} failed: {e}")
            return []

    def visible_elements(self, strategy: LocatorStrategy, frame: Frame) -> List[ElementHandle]:
        visible = []
        for element in self.query(strategy, frame):
            try:
                if element.is_visible():
                    visible.append(element)
            except PlaywrightError:
                continue
        return visible

    def first_visible(
        self,
        candidates: CandidateList,
        frame: Frame,
        scope: Scope = TOP
    ) -> Optional[Located]:
        for strategy in candidates:
            for element in self.query(strategy, frame):
                try:
                    if element.is_visible():
                        return Located(element=element, scope=scope, strategy=strategy)
                except PlaywrightError:
                    continue
        return None

    def any_visible(self, candidates: CandidateList, frame: Frame) -> bool:
        return self.first_visible(candidates, frame) is not None

    def exists_any(self, candidates: CandidateList, frame: Frame) -> bool:
        return any(self.query(strategy, frame) for strategy in candidates)

    def find_present(
        self,
        candidates: CandidateList,
        frame: Frame,
        scope: Scope = TOP
    ) -> Optional[Located]:
        """First node of the first matching strategy, visible or not"""
        for strategy in candidates:
            elements = self.query(strategy, frame)
            if elements:
                return Located(element=elements[0], scope=scope, strategy=strategy)
        return None

    # ==================== Polled search ====================

    def _poll_frame(
        self,
        candidates: CandidateList,
        frame: Frame,
        scope: Scope,
        timeout: float
    ) -> Optional[Located]:
        return self.poller.until(lambda: self.first_visible(candidates, frame, scope), timeout)

    def find_visible(
        self,
        candidates: CandidateList,
        scope: Scope = TOP,
        timeout: Optional[float] = None
    ) -> Optional[Located]:
        """
        Poll one scope until a candidate is visible.

        Returns:
            Located element, or None when the timeout elapses
        """
        timeout = self.timeout if timeout is None else timeout
        with self.navigator.with_scope(scope) as frame:
            return self._poll_frame(candidates, frame, scope, timeout)

    def find_visible_across_frames(
        self,
        candidates: CandidateList,
        per_scope_timeout: Optional[float] = None,
        first_scope: Optional[Scope] = None
    ) -> Located:
        """
        Search the top document, then each frame, each with its own timeout.
        `first_scope` (usually the scope holding the form) is searched first.

        The returned Located carries the winning scope; the element handle
        is only valid within it.

        Raises:
            ElementNotFoundError: no scope produced a visible match
        """
        timeout = self.timeout if per_scope_timeout is None else per_scope_timeout
        started = self.poller.now()

        located = self.navigator.for_each_scope(
            lambda scope, frame: self._poll_frame(candidates, frame, scope, timeout),
            first=first_scope
        )
        if located is not None:
            logger.debug(f"'{candidates.role}' found in {located.scope} via {located.strategy}")
            return located

        elapsed = self.poller.now() - started
        raise ElementNotFoundError(candidates.role, candidates.selectors(), elapsed)

    def visible_text_anywhere(self, text: str) -> bool:
        """Whether an element whose own normalized text equals `text` is visible in any scope"""
        literal = _xpath_literal(text)
        strategy = LocatorStrategy.xpath(f"//*[normalize-space(text())={literal}]")
        candidates = CandidateList(role=f"text:{text}", strategies=(strategy,))
        found = self.navigator.for_each_scope(
            lambda scope, frame: self.any_visible(candidates, frame)
        )
        return bool(found)


def _xpath_literal(text: str) -> str:
    """Quote a string for use inside an XPath expression"""
    if "'" not in text:
        return f"'{text}'"
    if '"' not in text:
        return f'"{text}"'
    parts = text.split("'")
    return "concat(" + ", \"'\", ".join(f"'{p}'" for p in parts) + ")"
