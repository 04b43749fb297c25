"""
Unit tests for the submission outcome detector.
"""

import pytest

from formsentry.core.outcome import OutcomeKind, SubmissionOutcome, SubmissionOutcomeDetector
from formsentry.knowledge.locator_catalog import Role

from conftest import FakeElement, selector

START_URL = "http://example.test/#/SignUp"
CONFIRMATION = "A welcome email has been sent. Please check your email."


@pytest.fixture
def detector(page, navigator, finder, catalog, poller):
    page.url = START_URL
    return SubmissionOutcomeDetector(page, navigator, finder, catalog, poller=poller, budget_s=8.0, interval_s=0.5)


def show_error(frame, catalog, text, index=0):
    element = FakeElement(text=text)
    frame.add(selector(catalog, Role.ERROR_BANNER, index), element)
    return element


def show_success_banner(frame, catalog):
    element = FakeElement(text=CONFIRMATION)
    frame.add(selector(catalog, Role.SUCCESS_BANNER, 3), element)
    return element


class TestSubmissionOutcome:
    def test_constructors(self):
        assert SubmissionOutcome.success("url_change").is_success
        assert SubmissionOutcome.validation_error("Email is required").message == "Email is required"
        assert SubmissionOutcome.timeout().kind == OutcomeKind.TIMEOUT
        assert not SubmissionOutcome.timeout().is_success


class TestCheckOnce:
    """Test signal priority within one tick."""

    def test_nothing_yet(self, detector):
        assert detector.check_once(START_URL) is None

    def test_error_dominates_success(self, page, detector, catalog):
        """Test an error and a success signal in the same tick yield VALIDATION_ERROR."""
        show_error(page.main_frame, catalog, "Email is required")
        show_success_banner(page.main_frame, catalog)
        page.main_frame.body_text = CONFIRMATION
        page.url = START_URL + "/done"

        outcome = detector.check_once(START_URL)

        assert outcome.kind == OutcomeKind.VALIDATION_ERROR
        assert outcome.message == "Email is required"

    def test_error_without_keyword_ignored(self, page, detector, catalog):
        """Test decorative text in an error container is not a validation error."""
        show_error(page.main_frame, catalog, "Terms and conditions")
        show_success_banner(page.main_frame, catalog)

        outcome = detector.check_once(START_URL)

        assert outcome.kind == OutcomeKind.SUCCESS
        assert outcome.signal == "success_banner"

    def test_hidden_error_ignored(self, page, detector, catalog):
        error = show_error(page.main_frame, catalog, "Email is invalid")
        error.visible = False

        assert detector.error_signal() is None

    def test_confirmation_in_alert_is_not_an_error(self, page, detector, catalog):
        """Test "Please check your email" inside an alert role counts as success."""
        show_error(page.main_frame, catalog, CONFIRMATION, index=1)
        page.main_frame.body_text = CONFIRMATION

        outcome = detector.check_once(START_URL)

        assert outcome.kind == OutcomeKind.SUCCESS
        assert outcome.signal == "success_text"

    def test_success_text_in_frame(self, page, detector):
        """Test page text is searched in every scope, case-insensitively."""
        frame = page.add_frame()
        frame.body_text = "a WELCOME EMAIL has been sent. please CHECK YOUR EMAIL"

        assert detector.check_once(START_URL) == SubmissionOutcome.success("success_text")

    def test_partial_success_text(self, page, detector):
        page.main_frame.body_text = "A welcome email is on its way"

        assert not detector.success_text_signal()

    def test_url_change(self, page, detector):
        page.url = "http://example.test/#/Welcome"

        assert detector.check_once(START_URL) == SubmissionOutcome.success("url_change")

    def test_error_in_frame(self, page, detector, catalog):
        frame = page.add_frame()
        show_error(frame, catalog, "Please enter a valid email")

        assert detector.error_signal() == "Please enter a valid email"


class TestWaitForOutcome:
    """Test the bounded wait."""

    def test_timeout_after_budget(self, detector, fake_clock):
        """Test no signal within the budget yields TIMEOUT."""
        outcome = detector.wait_for_outcome(START_URL)

        assert outcome.kind == OutcomeKind.TIMEOUT
        assert fake_clock.now() == pytest.approx(8.0)

    def test_budget_override(self, detector, fake_clock):
        assert detector.wait_for_outcome(START_URL, budget_s=2.0).kind == OutcomeKind.TIMEOUT
        assert fake_clock.now() == pytest.approx(2.0)

    def test_late_success(self, page, detector, fake_clock):
        """Test a confirmation rendered mid-budget is picked up."""
        def render(seconds):
            fake_clock.time += seconds
            if fake_clock.time >= 2.0:
                page.main_frame.body_text = CONFIRMATION

        detector.poller._sleep = render

        outcome = detector.wait_for_outcome(START_URL)

        assert outcome.is_success
        assert fake_clock.now() == pytest.approx(2.0)

    def test_error_returned_immediately(self, page, detector, catalog, fake_clock):
        show_error(page.main_frame, catalog, "Name is required")

        outcome = detector.wait_for_outcome(START_URL)

        assert outcome.kind == OutcomeKind.VALIDATION_ERROR
        assert fake_clock.now() == 0.0
