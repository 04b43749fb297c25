"""
Sign-up Runner

Runs the sign-up workflow step by step, records a result per step,
captures a screenshot on the first failure and renders the HTML report.
No step is retried: retries only happen inside discovery polling.
"""

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from playwright.sync_api import Error as PlaywrightError, Page

from .browser import BrowserSession
from .config import SentryConfig
from .core.outcome import SubmissionOutcome
from .errors import FormSentryError, WorkflowStepError
from .knowledge.locator_catalog import LocatorCatalog
from .reporting import write_html_report
from .signup_page import SignUpPage

# Configure logging
logger = logging.getLogger(__name__)


class StepStatus(Enum):
    """Status of a workflow step"""
    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class StepResult:
    """Result of a single workflow step"""
    step_number: int
    name: str
    status: StepStatus = StepStatus.SKIPPED
    duration_s: float = 0.0
    detail: Optional[str] = None
    error_message: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "step_number": self.step_number,
            "name": self.name,
            "status": self.status.value,
            "duration_s": round(self.duration_s, 3),
            "detail": self.detail,
            "error_message": self.error_message
        }


@dataclass
class RunResult:
    """Result of one sign-up workflow run"""
    url: str
    started_at: str
    steps: List[StepResult] = field(default_factory=list)
    duration_s: float = 0.0
    email: Optional[str] = None
    outcome: Optional[SubmissionOutcome] = None
    failed_step: Optional[str] = None
    error_message: Optional[str] = None
    screenshot_path: Optional[str] = None
    report_path: Optional[str] = None

    @property
    def passed(self) -> bool:
        return self.failed_step is None and all(s.status == StepStatus.PASSED for s in self.steps)

    @property
    def status(self) -> str:
        return "passed" if self.passed else "failed"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "status": self.status,
            "started_at": self.started_at,
            "duration_s": round(self.duration_s, 3),
            "email": self.email,
            "outcome": self.outcome.kind.value if self.outcome else None,
            "outcome_message": self.outcome.message if self.outcome else None,
            "failed_step": self.failed_step,
            "error_message": self.error_message,
            "screenshot_path": self.screenshot_path,
            "steps": [s.to_dict() for s in self.steps]
        }


class SignUpRunner:
    """
    Executes the sign-up workflow against a page.

    Steps: open page, validate languages, select language, fill name,
    fill organization, fill email, accept terms, submit, verify confirmation.
    """

    def __init__(
        self,
        config: Optional[SentryConfig] = None,
        catalog: Optional[LocatorCatalog] = None,
        page_factory: Callable[..., SignUpPage] = SignUpPage,
        write_report: bool = True
    ):
        self.config = config or SentryConfig()
        self.catalog = catalog or LocatorCatalog.load(self.config.catalog_path)
        self.page_factory = page_factory
        self.write_report = write_report

    def unique_email(self) -> str:
        millis = int(time.time() * 1000)
        return f"{self.config.email_prefix}{millis}@{self.config.email_domain}"

    def _steps(self, signup: SignUpPage, result: RunResult):
        cfg = self.config

        def validate_languages():
            if not signup.languages_available():
                raise WorkflowStepError("language dropdown not found")
            return f"{cfg.required_language} and {'/'.join(cfg.dutch_labels)} offered"

        def select_language():
            if not signup.select_language(cfg.language):
                raise WorkflowStepError(f"language '{cfg.language}' could not be selected")
            return cfg.language

        def submit():
            result.outcome = signup.submit()
            return result.outcome.kind.value + (f": {result.outcome.message}" if result.outcome.message else "")

        def verify_confirmation():
            if not signup.confirmation_shown():
                reason = "confirmation message not found"
                if result.outcome is not None and result.outcome.message:
                    reason += f" (last error: {result.outcome.message})"
                raise WorkflowStepError(reason)
            return "confirmation shown"

        return [
            ("open page", lambda: signup.open_page(cfg.base_url)),
            ("validate languages", validate_languages),
            ("select language", select_language),
            ("fill name", lambda: signup.fill_name(cfg.full_name)),
            ("fill organization", lambda: signup.fill_organization(cfg.full_name)),
            ("fill email", lambda: signup.fill_email(result.email)),
            ("accept terms", signup.accept_terms),
            ("submit", submit),
            ("verify confirmation", verify_confirmation),
        ]

    def run(self, page: Page) -> RunResult:
        """Run every step against an open page; stop at the first failure"""
        started = time.monotonic()
        result = RunResult(
            url=self.config.base_url,
            started_at=datetime.now().isoformat(timespec="seconds"),
            email=self.unique_email()
        )
        signup = self.page_factory(page, self.config, self.catalog)

        steps = self._steps(signup, result)
        result.steps = [StepResult(i, name) for i, (name, _) in enumerate(steps, start=1)]

        for step, (name, action) in zip(result.steps, steps):
            logger.info(f"Step {step.step_number}: {name}")
            step_started = time.monotonic()
            try:
                detail = action()
                step.status = StepStatus.PASSED
                if isinstance(detail, str):
                    step.detail = detail
            except (FormSentryError, PlaywrightError) as e:
                step.status = StepStatus.FAILED
                step.error_message = str(e)
                result.failed_step = name
                result.error_message = f"Step '{name}' failed: {e}"
                logger.error(result.error_message)
            finally:
                step.duration_s = time.monotonic() - step_started

            if step.status == StepStatus.FAILED:
                if self.config.screenshot_on_failure:
                    result.screenshot_path = self._capture_screenshot(page, name)
                break

        result.duration_s = time.monotonic() - started
        logger.info(f"Run {result.status} in {result.duration_s:.1f}s")

        if self.write_report:
            result.report_path = str(write_html_report(result, self.config.report_dir))
        return result

    def run_in_browser(self) -> RunResult:
        """Launch a browser, run the workflow, close the browser"""
        with BrowserSession(self.config) as page:
            return self.run(page)

    def _capture_screenshot(self, page: Page, step_name: str) -> Optional[str]:
        report_dir = Path(self.config.report_dir)
        stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        path = report_dir / f"{step_name.replace(' ', '_')}_{stamp}.png"
        try:
            report_dir.mkdir(parents=True, exist_ok=True)
            page.screenshot(path=str(path))
            logger.info(f"Failure screenshot saved to {path}")
            return str(path)
        except (PlaywrightError, OSError) as e:
            logger.warning(f"Could not capture screenshot: {e}")
            return None
