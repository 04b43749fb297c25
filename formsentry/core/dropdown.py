"""
Dropdown Protocol

Drives selection widgets whose markup is unknown ahead of time.

Two tiers live here:
- NativeSelectHandler: plain <select> elements (cheap, tried first)
- DropdownProtocol: custom widgets (ui-select, Angular Material, ng-select,
  Select2, Chosen, ARIA comboboxes). A toggle is opened, the rendered
  option nodes are scanned across every option strategy, and the dropdown
  is closed again with Escape when nothing matched.
"""

import logging
from typing import Iterator, List, Optional

from playwright.sync_api import Error as PlaywrightError, ElementHandle, Frame

from ..context.navigator import ContextNavigator
from ..errors import InteractionError
from ..knowledge.locator_catalog import CandidateList, LocatorCatalog, LocatorStrategy, Role
from .finder import VisibilityGatedFinder
from .interactions import InteractionPrimitives
from .polling import Poller

# Configure logging
logger = logging.getLogger(__name__)


def _distinct_texts(texts) -> List[str]:
    """Trimmed, non-empty, first-seen order, no duplicates"""
    seen = {}
    for text in texts:
        if text is None:
            continue
        text = text.strip()
        if text and text not in seen:
            seen[text] = None
    return list(seen)


class NativeSelectHandler:
    """Reads and drives plain <select> elements"""

    SELECT = LocatorStrategy(selector_type="tag", selector="select")
    OPTION_SELECTOR = "option"

    def __init__(
        self,
        navigator: ContextNavigator,
        finder: VisibilityGatedFinder,
        interactions: InteractionPrimitives,
        select_timeout_ms: int = 3000
    ):
        self.navigator = navigator
        self.finder = finder
        self.interactions = interactions
        self.select_timeout_ms = select_timeout_ms

    def _option_texts(self, select: ElementHandle) -> List[str]:
        texts = []
        for option in select.query_selector_all(self.OPTION_SELECTOR):
            texts.append(option.text_content())
        return texts

    def read_option_texts(self, frame: Frame) -> List[str]:
        """Distinct option texts across every <select> in the frame"""
        texts = []
        for select in self.finder.query(self.SELECT, frame):
            try:
                texts.extend(self._option_texts(select))
            except PlaywrightError as e:
                logger.debug(f"Could not read <select> options: {e}")
        return _distinct_texts(texts)

    def select_by_text(self, frame: Frame, text: str) -> bool:
        """Select `text` in the first visible <select> that offers it"""
        for select in self.finder.visible_elements(self.SELECT, frame):
            try:
                if text not in _distinct_texts(self._option_texts(select)):
                    continue
                self.interactions.scroll_into_view_center(select)
                select.select_option(label=text, timeout=self.select_timeout_ms)
                logger.info(f"Selected '{text}' in native <select>")
                return True
            except PlaywrightError as e:
                logger.debug(f"Native select of '{text}' failed: {e}")
        return False

    def read_across_scopes(self) -> List[str]:
        found = self.navigator.for_each_scope(lambda scope, frame: self.read_option_texts(frame))
        return found or []

    def select_across_scopes(self, text: str) -> bool:
        return bool(self.navigator.for_each_scope(lambda scope, frame: self.select_by_text(frame, text)))


class DropdownProtocol:
    """
    Open a custom dropdown, read or choose an option, close it on a miss.

    States: Closed -> Open -> OptionChosen | Closed (try next toggle)
    """

    DEFAULT_SETTLE = 0.1
    DEFAULT_READ_WINDOW = 2.0

    def __init__(
        self,
        navigator: ContextNavigator,
        finder: VisibilityGatedFinder,
        interactions: InteractionPrimitives,
        catalog: LocatorCatalog,
        poller: Optional[Poller] = None,
        settle_s: float = DEFAULT_SETTLE,
        read_window_s: float = DEFAULT_READ_WINDOW
    ):
        self.navigator = navigator
        self.finder = finder
        self.interactions = interactions
        self.catalog = catalog
        self.poller = poller or finder.poller
        self.settle_s = settle_s
        self.read_window_s = read_window_s

    @property
    def toggles(self) -> CandidateList:
        return self.catalog.get(Role.DROPDOWN_TOGGLE)

    @property
    def options(self) -> CandidateList:
        return self.catalog.get(Role.DROPDOWN_OPTION)

    def _visible_toggles(self, frame: Frame) -> Iterator[ElementHandle]:
        """Every visible toggle, strategy by strategy, re-queried per strategy"""
        for strategy in self.toggles:
            for toggle in self.finder.query(strategy, frame):
                try:
                    if toggle.is_visible():
                        yield toggle
                except PlaywrightError:
                    continue

    def _open(self, toggle: ElementHandle) -> None:
        self.interactions.scroll_into_view_center(toggle)
        self.interactions.click(toggle)

    # ==================== Choosing ====================

    def _click_option_by_exact_text(self, frame: Frame, text: str) -> bool:
        for strategy in self.options:
            for option in self.finder.query(strategy, frame):
                try:
                    if not option.is_visible():
                        continue
                    label = option.inner_text()
                    if label is not None and label.strip() == text:
                        self.interactions.scroll_into_view_center(option)
                        self.interactions.click(option)
                        return True
                except PlaywrightError:
                    continue
        return False

    def open_and_choose_option(self, target_text: str, frame: Frame) -> bool:
        """
        Choose the option whose trimmed text equals `target_text` exactly.

        Returns:
            True once an option was clicked, False when no toggle offered it
        """
        for toggle in self._visible_toggles(frame):
            try:
                self._open(toggle)
                self.poller.sleep(self.settle_s)
                if self._click_option_by_exact_text(frame, target_text):
                    logger.info(f"Chose '{target_text}' from custom dropdown")
                    return True
                self.interactions.press_cancel(toggle)
            except (PlaywrightError, InteractionError) as e:
                logger.debug(f"Toggle failed, trying next: {e}")
        return False

    # ==================== Reading ====================

    def _collect_visible_option_texts(self, frame: Frame) -> List[str]:
        texts = []
        for strategy in self.options:
            for option in self.finder.query(strategy, frame):
                try:
                    if option.is_visible():
                        texts.append(option.inner_text())
                except PlaywrightError:
                    continue
        return _distinct_texts(texts)

    def read_all_option_texts(self, frame: Frame) -> List[str]:
        """
        Open toggles until one renders options; return their distinct texts.

        Options are polled for a short window to tolerate async rendering.
        """
        for toggle in self._visible_toggles(frame):
            try:
                self._open(toggle)
                texts = self.poller.until(
                    lambda: self._collect_visible_option_texts(frame),
                    self.read_window_s
                )
                if texts:
                    return texts
                self.interactions.press_cancel(toggle)
            except (PlaywrightError, InteractionError) as e:
                logger.debug(f"Toggle failed, trying next: {e}")
        return []

    # ==================== Across scopes ====================

    def choose_across_scopes(self, target_text: str) -> bool:
        return bool(self.navigator.for_each_scope(
            lambda scope, frame: self.open_and_choose_option(target_text, frame)
        ))

    def read_across_scopes(self) -> List[str]:
        found = self.navigator.for_each_scope(lambda scope, frame: self.read_all_option_texts(frame))
        return found or []
