"""
Interaction Primitives

Scroll, click, type and checkbox handling on located element handles.
Every primitive tries the native Playwright path first and only falls
back to an in-page script when the driver reports an obstruction, a
stale handle or a timeout. Primitives raise only after every fallback
has been exhausted.
"""

import logging
from typing import Optional

from playwright.sync_api import Error as PlaywrightError, ElementHandle

from ..errors import InteractionError, classify_failure

# Configure logging
logger = logging.getLogger(__name__)


SCROLL_CENTER_SCRIPT = "el => el.scrollIntoView({block: 'center', inline: 'nearest'})"
SCRIPTED_CLICK_SCRIPT = "el => el.click()"
SET_CHECKED_SCRIPT = (
    "(el, checked) => {"
    " el.checked = checked;"
    " el.dispatchEvent(new Event('change', {bubbles: true}));"
    "}"
)


class InteractionPrimitives:
    """
    Native-first interactions with scripted fallbacks.

    Args:
        clickable_timeout_s: Bound for the visible+enabled wait before a click
        click_timeout_ms: Timeout passed to the native click
    """

    DEFAULT_CLICKABLE_TIMEOUT = 15.0
    DEFAULT_CLICK_TIMEOUT_MS = 3000

    def __init__(
        self,
        clickable_timeout_s: float = DEFAULT_CLICKABLE_TIMEOUT,
        click_timeout_ms: int = DEFAULT_CLICK_TIMEOUT_MS
    ):
        self.clickable_timeout_s = clickable_timeout_s
        self.click_timeout_ms = click_timeout_ms

    # ==================== Positioning ====================

    def scroll_into_view_center(self, element: ElementHandle) -> None:
        try:
            element.evaluate(SCROLL_CENTER_SCRIPT)
            element.hover(timeout=self.click_timeout_ms)
        except PlaywrightError as e:
            logger.debug(f"Scroll/hover skipped ({classify_failure(e).value}): {e}")

    def wait_until_clickable(self, element: ElementHandle, timeout_s: Optional[float] = None) -> bool:
        timeout_ms = int((self.clickable_timeout_s if timeout_s is None else timeout_s) * 1000)
        try:
            element.wait_for_element_state("visible", timeout=timeout_ms)
            element.wait_for_element_state("enabled", timeout=timeout_ms)
            return True
        except PlaywrightError as e:
            logger.debug(f"Element not clickable ({classify_failure(e).value}): {e}")
            return False

    # ==================== Clicking ====================

    def scripted_click(self, element: ElementHandle) -> None:
        try:
            element.evaluate(SCRIPTED_CLICK_SCRIPT)
        except PlaywrightError as e:
            raise InteractionError("click", f"scripted click failed: {e}") from e

    def click(self, element: ElementHandle) -> None:
        """
        Click an element, falling back to a scripted click.

        Raises:
            InteractionError: both the native and the scripted click failed
        """
        clickable = self.wait_until_clickable(element)
        self.scroll_into_view_center(element)
        if clickable:
            try:
                element.click(timeout=self.click_timeout_ms)
                return
            except PlaywrightError as e:
                logger.info(f"Native click failed ({classify_failure(e).value}), using scripted click")
        else:
            logger.info("Element never became clickable, using scripted click")
        self.scripted_click(element)

    def click_at_left_edge(self, element: ElementHandle, offset_px: int = 6) -> None:
        """
        Click just inside the left edge, vertically centred.

        Used for labels whose right part holds a hyperlink.
        """
        box = element.bounding_box()
        if not box:
            raise InteractionError("click", "element has no bounding box")
        position = {"x": min(offset_px, max(box["width"] - 1, 0)), "y": box["height"] / 2}
        try:
            element.click(position=position, timeout=self.click_timeout_ms)
        except PlaywrightError as e:
            raise InteractionError("click", f"offset click failed: {e}") from e

    def press_cancel(self, element: ElementHandle) -> None:
        try:
            element.press("Escape")
        except PlaywrightError as e:
            logger.debug(f"Escape not delivered: {e}")

    # ==================== Typing ====================

    def type_into(self, element: ElementHandle, text: str) -> None:
        """
        Clear an input and type `text` verbatim.

        Falls back to select-all + delete when the element refuses a
        programmatic clear.
        """
        try:
            element.fill("", timeout=self.click_timeout_ms)
        except PlaywrightError as e:
            logger.info(f"Clear rejected ({classify_failure(e).value}), clearing via keyboard")
            try:
                element.focus()
                element.press("Control+A")
                element.press("Delete")
            except PlaywrightError as key_error:
                raise InteractionError("type", f"could not clear field: {key_error}") from key_error
        try:
            element.type(text)
        except PlaywrightError as e:
            raise InteractionError("type", str(e)) from e

    # ==================== Checkboxes ====================

    def _is_checked(self, element: ElementHandle) -> bool:
        try:
            return element.is_checked()
        except PlaywrightError as e:
            raise InteractionError("checkbox", f"could not read state: {e}") from e

    def set_checkbox(self, element: ElementHandle, desired: bool = True) -> bool:
        """
        Bring a checkbox to the desired state.

        Returns:
            True if the state was changed, False if it already matched

        Raises:
            InteractionError: state still mismatched after every fallback
        """
        if self._is_checked(element) == desired:
            return False

        try:
            if not self.wait_until_clickable(element, timeout_s=self.click_timeout_ms / 1000):
                raise InteractionError("checkbox", "not clickable")
            self.scroll_into_view_center(element)
            element.click(timeout=self.click_timeout_ms)
        except (PlaywrightError, InteractionError) as e:
            reason = classify_failure(e).value if isinstance(e, PlaywrightError) else e.reason
            logger.info(f"Checkbox click failed ({reason}), setting state by script")
            try:
                element.evaluate(SET_CHECKED_SCRIPT, desired)
            except PlaywrightError as script_error:
                logger.warning(f"Scripted checkbox update failed: {script_error}")

        if self._is_checked(element) != desired:
            logger.info("Checkbox state still mismatched, forcing scripted click")
            try:
                element.evaluate(SCRIPTED_CLICK_SCRIPT)
            except PlaywrightError as e:
                logger.warning(f"Scripted checkbox click failed: {e}")

        if self._is_checked(element) != desired:
            raise InteractionError("checkbox", f"state is not {desired} after all fallbacks")
        return True

    def ensure_checked_by_script(self, element: ElementHandle) -> bool:
        """Set a (possibly hidden) checkbox's state directly. Returns True if it changed."""
        if self._is_checked(element):
            return False
        try:
            element.evaluate(SET_CHECKED_SCRIPT, True)
        except PlaywrightError as e:
            raise InteractionError("checkbox", f"scripted update failed: {e}") from e
        if not self._is_checked(element):
            raise InteractionError("checkbox", "scripted update did not stick")
        return True
