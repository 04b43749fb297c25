"""
Sign-up Page

The workflow surface of the sign-up form. Sequences the navigator, finder,
interaction primitives, dropdown protocol and outcome detector; holds no
locator knowledge of its own.
"""

import logging
from typing import List, Optional, Union

from playwright.sync_api import Error as PlaywrightError, Page

from .config import SentryConfig
from .context.navigator import ContextNavigator, Scope, TOP
from .core.dropdown import DropdownProtocol, NativeSelectHandler
from .core.finder import Located, VisibilityGatedFinder
from .core.interactions import InteractionPrimitives
from .core.outcome import SubmissionOutcome, SubmissionOutcomeDetector
from .core.polling import Poller
from .errors import ElementNotFoundError, InteractionError
from .knowledge.locator_catalog import CandidateList, LocatorCatalog, Role

# Configure logging
logger = logging.getLogger(__name__)


READY_STATE_SCRIPT = "() => document.readyState === 'complete'"

ANGULAR_IDLE_SCRIPT = """
() => {
    try {
        if (window.angular && angular.element(document.body).injector) {
            var $http = angular.element(document.body).injector().get('$http');
            return $http.pendingRequests.length === 0;
        }
        return true;
    } catch (e) {
        return true;
    }
}
"""

SCROLL_TOP_SCRIPT = "() => window.scrollTo(0, 0)"

FILLABLE_ROLES = (Role.NAME_INPUT, Role.ORGANIZATION_INPUT, Role.EMAIL_INPUT)


class SignUpPage:
    """
    Page object for the sign-up form.

    Public operations: open_page, languages_available, select_language,
    fill_field (fill_name / fill_organization / fill_email), accept_terms,
    submit, confirmation_shown.
    """

    def __init__(
        self,
        page: Page,
        config: Optional[SentryConfig] = None,
        catalog: Optional[LocatorCatalog] = None,
        poller: Optional[Poller] = None
    ):
        self.page = page
        self.config = config or SentryConfig()
        self.catalog = catalog or LocatorCatalog.load(self.config.catalog_path)
        self.poller = poller or Poller(
            interval=self.config.poll_interval_s,
            backoff=self.config.poll_backoff
        )

        self.navigator = ContextNavigator(page)
        self.finder = VisibilityGatedFinder(self.navigator, self.poller, timeout=self.config.find_timeout_s)
        self.interactions = InteractionPrimitives(
            clickable_timeout_s=self.config.clickable_timeout_s,
            click_timeout_ms=self.config.click_timeout_ms
        )
        self.native_select = NativeSelectHandler(
            self.navigator, self.finder, self.interactions,
            select_timeout_ms=self.config.click_timeout_ms
        )
        self.dropdown = DropdownProtocol(
            self.navigator, self.finder, self.interactions, self.catalog,
            poller=self.poller,
            settle_s=self.config.dropdown_settle_s,
            read_window_s=self.config.option_read_window_s
        )
        self.detector = SubmissionOutcomeDetector(
            page, self.navigator, self.finder, self.catalog,
            poller=self.poller,
            budget_s=self.config.submit_budget_s,
            interval_s=self.config.outcome_interval_s,
            validation_keywords=self.config.validation_keywords,
            success_phrases=self.config.success_phrases
        )

        self.form_scope: Optional[Scope] = None
        self.last_outcome: Optional[SubmissionOutcome] = None

    # ==================== Opening ====================

    def open_page(self, url: Optional[str] = None) -> None:
        """Navigate, wait for the DOM and Angular to settle, locate the form's scope"""
        url = url or self.config.base_url
        logger.info(f"Opening {url}")
        self.page.goto(url, wait_until="domcontentloaded")

        timeout_ms = int(self.config.page_ready_timeout_s * 1000)
        self.page.wait_for_function(READY_STATE_SCRIPT, timeout=timeout_ms)
        self._wait_for_angular(timeout_ms)
        self.form_scope = self._locate_form_scope()

    def _wait_for_angular(self, timeout_ms: int) -> None:
        try:
            self.page.wait_for_function(ANGULAR_IDLE_SCRIPT, timeout=timeout_ms)
        except PlaywrightError as e:
            logger.debug(f"Angular did not report idle: {e}")

    def _locate_form_scope(self) -> Optional[Scope]:
        names = self.catalog.get(Role.NAME_INPUT)
        toggles = self.catalog.get(Role.DROPDOWN_TOGGLE)

        def has_form(scope, frame):
            if self.finder.exists_any(names, frame) or self.finder.exists_any(toggles, frame):
                return scope
            return None

        scope = self.navigator.for_each_scope(has_form)
        if scope is None:
            # Some builds render the form late; later steps poll for it
            logger.warning("Sign-up form not present yet in any scope")
        else:
            logger.info(f"Sign-up form found in {scope}")
        return scope

    def _find_visible(self, candidates: CandidateList) -> Located:
        """Visible match across scopes, starting with the scope that holds the form"""
        return self.finder.find_visible_across_frames(candidates, first_scope=self.form_scope)

    # ==================== Languages ====================

    def _has_required_languages(self, texts: List[str]) -> bool:
        if not texts:
            return False
        normalized = {t.strip().lower() for t in texts if t}
        dutch = {label.lower() for label in self.config.dutch_labels}
        return self.config.required_language.lower() in normalized and bool(normalized & dutch)

    def languages_available(self) -> bool:
        """
        English and Dutch/Nederlands are offered.

        Tiers, in order: native <select>, custom dropdown, visible text
        anywhere on the page.
        """
        from_select = self.native_select.read_across_scopes()
        if self._has_required_languages(from_select):
            logger.info("Languages found in native <select>")
            return True

        from_dropdown = self.dropdown.read_across_scopes()
        if self._has_required_languages(from_dropdown):
            logger.info("Languages found in custom dropdown")
            return True

        if self.finder.visible_text_anywhere(self.config.required_language) and any(
            self.finder.visible_text_anywhere(label) for label in self.config.dutch_labels
        ):
            logger.info("Languages found as visible page text")
            return True

        logger.warning(
            f"Language dropdown not found (frames: {len(self.navigator.enumerate_frames())}, "
            f"select options: {from_select}, dropdown options: {from_dropdown})"
        )
        return False

    def select_language(self, language: Optional[str] = None) -> bool:
        """Select a language; native <select> first, then custom dropdowns in every scope"""
        language = language or self.config.language
        if self.native_select.select_across_scopes(language):
            return True
        if self.dropdown.choose_across_scopes(language):
            return True
        logger.warning(f"Could not select language '{language}'")
        return False

    # ==================== Fields ====================

    def fill_field(self, role: Union[Role, str], text: str) -> Located:
        """Type `text` into the first visible input of a field role"""
        role = Role(role)
        if role not in FILLABLE_ROLES:
            raise ValueError(f"{role.value} is not a text field role")
        located = self._find_visible(self.catalog.get(role))
        self.interactions.type_into(located.element, text)
        logger.info(f"Filled {role.value} in {located.scope}")
        return located

    def fill_name(self, name: str) -> Located:
        return self.fill_field(Role.NAME_INPUT, name)

    def fill_organization(self, organization: str) -> Located:
        return self.fill_field(Role.ORGANIZATION_INPUT, organization)

    def fill_email(self, email: str) -> Located:
        return self.fill_field(Role.EMAIL_INPUT, email)

    # ==================== Terms ====================

    def accept_terms(self) -> None:
        """
        Tick the terms checkbox without following the terms hyperlink.

        Tiers: first visible checkbox in the top document; terms-checkbox
        candidates in every scope; the terms label clicked near its left
        edge, followed by a scripted correction of the checkbox state.

        Raises:
            ElementNotFoundError: neither a checkbox nor a terms label was found
        """
        generic = self.catalog.get(Role.TERMS_CHECKBOX).strategies[-1]
        with self.navigator.with_scope(TOP) as frame:
            visible = self.finder.visible_elements(generic, frame)
            if visible:
                self.interactions.set_checkbox(visible[0], True)
                logger.info("Terms accepted via first visible checkbox")
                return

        checkboxes = self.catalog.get(Role.TERMS_CHECKBOX)
        try:
            located = self._find_visible(checkboxes)
        except ElementNotFoundError:
            located = None
        if located is not None:
            self.interactions.scroll_into_view_center(located.element)
            self.interactions.set_checkbox(located.element, True)
            logger.info(f"Terms accepted via checkbox in {located.scope}")
            return

        label = self._find_visible(self.catalog.get(Role.TERMS_LABEL))
        self.interactions.scroll_into_view_center(label.element)
        self.interactions.click_at_left_edge(label.element, self.config.label_click_offset_px)
        logger.info(f"Clicked terms label in {label.scope}")

        with self.navigator.with_scope(label.scope) as frame:
            checkbox = self.finder.find_present(checkboxes, frame, label.scope)
            if checkbox is None:
                logger.warning("No checkbox behind the terms label; relying on the label click")
                return
            if self.interactions.ensure_checked_by_script(checkbox.element):
                logger.info("Checkbox state corrected by script after label click")

    # ==================== Submission ====================

    def submit(self) -> SubmissionOutcome:
        """Click the submit control and classify the outcome"""
        start_url = self.page.url
        button = self._find_visible(self.catalog.get(Role.SUBMIT_BUTTON))
        self.interactions.scroll_into_view_center(button.element)
        self.interactions.click(button.element)

        try:
            self.page.evaluate(SCROLL_TOP_SCRIPT)
        except PlaywrightError as e:
            logger.debug(f"Could not scroll to top: {e}")

        self.last_outcome = self.detector.wait_for_outcome(start_url)
        return self.last_outcome

    def confirmation_shown(self) -> bool:
        """A success banner is visible, or the page text carries the success phrases. Never raises."""
        try:
            self._find_visible(self.catalog.get(Role.SUCCESS_BANNER))
            return True
        except ElementNotFoundError:
            pass
        except (PlaywrightError, InteractionError) as e:
            logger.debug(f"Confirmation banner check failed: {e}")

        try:
            if self.detector.success_text_signal():
                return True
        except PlaywrightError as e:
            logger.debug(f"Confirmation text check failed: {e}")

        if self.last_outcome is not None and self.last_outcome.message:
            logger.info(f"Last submission error: {self.last_outcome.message}")
        return False
