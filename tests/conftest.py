"""
Pytest configuration and shared fixtures for FormSentry tests.

The fakes below stand in for Playwright's sync Page / Frame / ElementHandle.
A FakeFrame answers `query_selector_all` from a selector-string -> elements
table, so tests register elements under the exact selector a catalog
strategy renders to.
"""

from typing import Callable, Dict, List, Optional

import pytest
from playwright.sync_api import Error as PlaywrightError

from formsentry.config import SentryConfig
from formsentry.context.navigator import ContextNavigator
from formsentry.core.finder import VisibilityGatedFinder
from formsentry.core.interactions import (
    SCRIPTED_CLICK_SCRIPT,
    SCROLL_CENTER_SCRIPT,
    SET_CHECKED_SCRIPT,
    InteractionPrimitives,
)
from formsentry.core.outcome import BODY_TEXT_SCRIPT
from formsentry.core.polling import Poller
from formsentry.knowledge.locator_catalog import LocatorCatalog, Role


# ==================== Fake Clock ====================

class FakeClock:
    """Monotonic clock whose sleep only advances time"""

    def __init__(self, start: float = 0.0):
        self.time = start
        self.sleeps: List[float] = []

    def now(self) -> float:
        return self.time

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.time += seconds


# ==================== Fake DOM ====================

class FakeElement:
    """Minimal ElementHandle stand-in that records what was done to it"""

    def __init__(
        self,
        text: str = "",
        visible: bool = True,
        enabled: bool = True,
        checkbox: bool = False,
        checked: bool = False,
        box: Optional[Dict[str, float]] = None,
        options: Optional[List["FakeElement"]] = None,
        on_click: Optional[Callable[["FakeElement"], None]] = None,
    ):
        self.text = text
        self.visible = visible
        self.enabled = enabled
        self.checkbox = checkbox
        self.checked = checked
        self.box = box if box is not None else {"x": 10, "y": 10, "width": 200, "height": 20}
        self.options = options or []
        self.on_click = on_click

        self.value = ""
        self.selected_label: Optional[str] = None
        self.calls: List[tuple] = []

        # Per-method failures: name -> exception
        self.errors: Dict[str, Exception] = {}

    def _maybe_fail(self, name: str) -> None:
        if name in self.errors:
            raise self.errors[name]

    def _activate(self) -> None:
        if self.checkbox:
            self.checked = not self.checked
        if self.on_click:
            self.on_click(self)

    # Queries
    def is_visible(self) -> bool:
        self._maybe_fail("is_visible")
        return self.visible

    def is_checked(self) -> bool:
        self._maybe_fail("is_checked")
        return self.checked

    def inner_text(self) -> str:
        self._maybe_fail("inner_text")
        return self.text

    def text_content(self) -> str:
        return self.text

    def bounding_box(self):
        return self.box

    def query_selector_all(self, selector: str) -> List["FakeElement"]:
        return list(self.options) if selector == "option" else []

    # Actions
    def evaluate(self, script: str, arg=None):
        self.calls.append(("evaluate", script, arg))
        self._maybe_fail("evaluate")
        if script == SCRIPTED_CLICK_SCRIPT:
            self._activate()
        elif script == SET_CHECKED_SCRIPT:
            self.checked = bool(arg)
        elif script == SCROLL_CENTER_SCRIPT:
            pass
        return None

    def hover(self, timeout=None) -> None:
        self.calls.append(("hover",))

    def wait_for_element_state(self, state: str, timeout=None) -> None:
        self.calls.append(("wait_for_element_state", state))
        if state == "visible" and not self.visible:
            raise PlaywrightError("Timeout 3000ms exceeded: element is not visible")
        if state == "enabled" and not self.enabled:
            raise PlaywrightError("Timeout 3000ms exceeded: element is disabled")

    def click(self, timeout=None, position=None) -> None:
        self.calls.append(("click", position))
        self._maybe_fail("click")
        self._activate()

    def fill(self, value: str, timeout=None) -> None:
        self.calls.append(("fill", value))
        self._maybe_fail("fill")
        self.value = value

    def focus(self) -> None:
        self.calls.append(("focus",))

    def press(self, key: str) -> None:
        self.calls.append(("press", key))
        if key == "Delete":
            self.value = ""

    def type(self, text: str) -> None:
        self.calls.append(("type", text))
        self._maybe_fail("type")
        self.value += text

    def select_option(self, label=None, timeout=None):
        self.calls.append(("select_option", label))
        self.selected_label = label
        return [label]

    def call_names(self) -> List[str]:
        return [c[0] for c in self.calls]


class FakeFrame:
    """Frame stand-in: selector string -> elements, plus body text"""

    def __init__(self, body_text: str = ""):
        self.elements: Dict[str, List[FakeElement]] = {}
        self.body_text = body_text
        self.child_frames: List["FakeFrame"] = []
        self.queries: List[str] = []
        self.query_error: Optional[Exception] = None

    def add(self, selector: str, *elements: FakeElement) -> "FakeFrame":
        self.elements.setdefault(selector, []).extend(elements)
        return self

    def query_selector_all(self, selector: str) -> List[FakeElement]:
        self.queries.append(selector)
        if self.query_error is not None:
            raise self.query_error
        return list(self.elements.get(selector, []))

    def evaluate(self, script: str, arg=None):
        if script == BODY_TEXT_SCRIPT:
            return self.body_text
        return None


class FakePage:
    """Page stand-in whose main frame holds the child frames"""

    def __init__(self, url: str = "http://example.test/#/SignUp"):
        self.url = url
        self.main_frame = FakeFrame()
        self.visited: List[str] = []
        self.evaluated: List[str] = []
        self.waited: List[str] = []
        self.screenshots: List[str] = []

    def add_frame(self, frame: Optional[FakeFrame] = None) -> FakeFrame:
        frame = frame or FakeFrame()
        self.main_frame.child_frames.append(frame)
        return frame

    def goto(self, url: str, wait_until=None):
        self.visited.append(url)
        self.url = url

    def wait_for_function(self, script: str, timeout=None):
        self.waited.append(script)

    def evaluate(self, script: str, arg=None):
        self.evaluated.append(script)
        return None

    def screenshot(self, path: str = None, **kwargs):
        self.screenshots.append(path)
        with open(path, "wb") as f:
            f.write(b"fake_screenshot_data")
        return b"fake_screenshot_data"


# ==================== Fixtures ====================

@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def poller(fake_clock):
    """Poller driven by the fake clock"""
    return Poller(interval=0.1, clock=fake_clock.now, sleep=fake_clock.sleep)


@pytest.fixture
def catalog():
    return LocatorCatalog.default()


@pytest.fixture
def page():
    return FakePage()


@pytest.fixture
def navigator(page):
    return ContextNavigator(page)


@pytest.fixture
def finder(navigator, poller):
    return VisibilityGatedFinder(navigator, poller, timeout=1.0)


@pytest.fixture
def interactions():
    return InteractionPrimitives(clickable_timeout_s=0.1, click_timeout_ms=100)


@pytest.fixture
def config(tmp_path):
    """Fast config writing reports into a temporary directory"""
    return SentryConfig(
        base_url="http://example.test/#/SignUp",
        find_timeout_s=0.5,
        poll_interval_s=0.1,
        dropdown_settle_s=0.0,
        option_read_window_s=0.3,
        clickable_timeout_s=0.1,
        click_timeout_ms=100,
        page_ready_timeout_s=1.0,
        submit_budget_s=8.0,
        outcome_interval_s=0.5,
        report_dir=str(tmp_path / "reports"),
    )


def selector(catalog: LocatorCatalog, role: Role, index: int = 0) -> str:
    """Playwright selector string of a role's strategy"""
    return catalog.get(role).strategies[index].to_selector()
