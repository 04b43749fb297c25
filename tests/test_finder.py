"""
Unit tests for the visibility-gated finder.
"""

import pytest
from playwright.sync_api import Error as PlaywrightError

from formsentry.context.navigator import Scope, TOP
from formsentry.core.finder import VisibilityGatedFinder, _xpath_literal
from formsentry.errors import ElementNotFoundError
from formsentry.knowledge.locator_catalog import Role

from conftest import FakeElement, selector


class TestFirstVisible:
    """Test single-pass lookups."""

    def test_list_order_wins(self, page, finder, catalog):
        """Test the earliest strategy with a visible match wins, even if a later one also matches."""
        names = catalog.get(Role.NAME_INPUT)
        first = FakeElement()
        later = FakeElement()
        page.main_frame.add(selector(catalog, Role.NAME_INPUT, 2), later)
        page.main_frame.add(selector(catalog, Role.NAME_INPUT, 0), first)

        located = finder.first_visible(names, page.main_frame)

        assert located.element is first
        assert located.strategy == names.strategies[0]
        assert located.scope == TOP

    def test_hidden_elements_skipped(self, page, finder, catalog):
        """Test hidden matches fall through to the next strategy."""
        hidden = FakeElement(visible=False)
        shown = FakeElement()
        page.main_frame.add(selector(catalog, Role.NAME_INPUT, 0), hidden)
        page.main_frame.add(selector(catalog, Role.NAME_INPUT, 1), shown)

        located = finder.first_visible(catalog.get(Role.NAME_INPUT), page.main_frame)

        assert located.element is shown

    def test_detached_element_is_no_match(self, page, finder, catalog):
        """Test a node detached between query and visibility check counts as no match."""
        stale = FakeElement()
        stale.errors["is_visible"] = PlaywrightError("Element is not attached to the DOM")
        page.main_frame.add(selector(catalog, Role.NAME_INPUT, 0), stale)

        assert finder.first_visible(catalog.get(Role.NAME_INPUT), page.main_frame) is None

    def test_query_error_is_no_match(self, page, finder, catalog):
        page.main_frame.query_error = PlaywrightError("Execution context was destroyed")

        assert finder.query(catalog.get(Role.NAME_INPUT).strategies[0], page.main_frame) == []
        assert not finder.exists_any(catalog.get(Role.NAME_INPUT), page.main_frame)

    def test_find_present_ignores_visibility(self, page, finder, catalog):
        hidden = FakeElement(visible=False, checkbox=True)
        page.main_frame.add(selector(catalog, Role.TERMS_CHECKBOX, 3), hidden)

        located = finder.find_present(catalog.get(Role.TERMS_CHECKBOX), page.main_frame)

        assert located.element is hidden
        assert finder.first_visible(catalog.get(Role.TERMS_CHECKBOX), page.main_frame) is None


class TestFindVisible:
    """Test polled lookups in one scope."""

    def test_waits_for_late_element(self, page, finder, catalog, fake_clock):
        """Test an element rendered after a few ticks is found."""
        element = FakeElement(visible=False)
        page.main_frame.add(selector(catalog, Role.EMAIL_INPUT, 0), element)

        def reveal(seconds):
            fake_clock.time += seconds
            if fake_clock.time >= 0.3:
                element.visible = True

        finder.poller._sleep = reveal

        located = finder.find_visible(catalog.get(Role.EMAIL_INPUT))

        assert located.element is element
        assert fake_clock.now() == pytest.approx(0.3)

    def test_none_on_timeout(self, finder, catalog, fake_clock):
        assert finder.find_visible(catalog.get(Role.EMAIL_INPUT), timeout=0.5) is None
        assert fake_clock.now() == pytest.approx(0.5)


class TestFindVisibleAcrossFrames:
    """Test the top-then-frames search."""

    def test_found_in_frame(self, page, finder, catalog):
        """Test the winning scope is reported with the element."""
        frame = page.add_frame()
        element = FakeElement()
        frame.add(selector(catalog, Role.SUBMIT_BUTTON, 0), element)

        located = finder.find_visible_across_frames(catalog.get(Role.SUBMIT_BUTTON))

        assert located.element is element
        assert located.scope == Scope.frame(0)
        assert finder.navigator.active_scope == TOP

    def test_top_preferred_over_frames(self, page, finder, catalog):
        frame = page.add_frame()
        frame.add(selector(catalog, Role.SUBMIT_BUTTON, 0), FakeElement())
        top_button = FakeElement()
        page.main_frame.add(selector(catalog, Role.SUBMIT_BUTTON, 1), top_button)

        located = finder.find_visible_across_frames(catalog.get(Role.SUBMIT_BUTTON))

        assert located.element is top_button
        assert located.scope == TOP

    def test_not_found_reports_role_and_elapsed(self, page, finder, catalog, fake_clock):
        """Test every scope gets its own timeout and the error carries diagnostics."""
        page.add_frame()

        with pytest.raises(ElementNotFoundError) as exc_info:
            finder.find_visible_across_frames(catalog.get(Role.SUBMIT_BUTTON), per_scope_timeout=0.5)

        error = exc_info.value
        assert error.role == "submit_button"
        assert error.selectors == catalog.get(Role.SUBMIT_BUTTON).selectors()
        assert error.elapsed == pytest.approx(1.0)


class TestVisibleText:
    """Test the plain-text lookup."""

    def test_visible_text_anywhere(self, page, finder):
        frame = page.add_frame()
        frame.add("xpath=//*[normalize-space(text())='Nederlands']", FakeElement(text="Nederlands"))

        assert finder.visible_text_anywhere("Nederlands")
        assert not finder.visible_text_anywhere("English")

    @pytest.mark.parametrize("text,expected", [
        ("Dutch", "'Dutch'"),
        ("I'm in", "\"I'm in\""),
        ("a'b\"c", "concat('a', \"'\", 'b\"c')"),
    ])
    def test_xpath_literal(self, text, expected):
        assert _xpath_literal(text) == expected


class TestFinderDefaults:
    def test_default_timeout(self, navigator):
        finder = VisibilityGatedFinder(navigator)

        assert finder.timeout == VisibilityGatedFinder.DEFAULT_TIMEOUT
        assert finder.poller is not None
