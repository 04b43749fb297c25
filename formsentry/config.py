"""
Configuration for FormSentry runs.

Defaults match the sign-up form the runner was written against. Every
field can be overridden through a FORMSENTRY_* environment variable;
the CLI loads a .env file first.
"""

import os
from dataclasses import dataclass, field, fields
from typing import Optional, Tuple

DEFAULT_BASE_URL = "http://jt-dev.azurewebsites.net/#/SignUp"

ENV_PREFIX = "FORMSENTRY_"


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _parse_tuple(value: str) -> Tuple[str, ...]:
    return tuple(part.strip() for part in value.split(",") if part.strip())


@dataclass
class SentryConfig:
    """Configuration for the sign-up workflow"""
    base_url: str = DEFAULT_BASE_URL
    headless: bool = False
    viewport_width: int = 1920
    viewport_height: int = 1080

    # Discovery polling (seconds)
    find_timeout_s: float = 3.0
    poll_interval_s: float = 0.08
    poll_backoff: float = 1.0
    dropdown_settle_s: float = 0.1
    option_read_window_s: float = 2.0

    # Interaction bounds
    clickable_timeout_s: float = 15.0
    click_timeout_ms: int = 3000
    label_click_offset_px: int = 6
    page_ready_timeout_s: float = 15.0

    # Submission outcome
    submit_budget_s: float = 8.0
    outcome_interval_s: float = 0.12
    validation_keywords: Tuple[str, ...] = ("required", "invalid", "please")
    success_phrases: Tuple[str, ...] = ("welcome email", "check your email")

    # Languages that must be offered by the form
    required_language: str = "English"
    dutch_labels: Tuple[str, ...] = ("Dutch", "Nederlands")

    # Workflow data
    language: str = "English"
    full_name: str = "Sarvesh Kumar Ojha"
    email_prefix: str = "sarvesh"
    email_domain: str = "test.com"

    # Files
    catalog_path: Optional[str] = None
    report_dir: str = "reports"
    screenshot_on_failure: bool = True

    extra_browser_args: Tuple[str, ...] = field(
        default=("--disable-gpu", "--no-sandbox", "--disable-dev-shm-usage")
    )

    @classmethod
    def from_env(cls, **overrides) -> "SentryConfig":
        """
        Build a config from FORMSENTRY_* environment variables.

        Keyword overrides win over the environment.
        """
        values = {}
        for f in fields(cls):
            raw = os.getenv(ENV_PREFIX + f.name.upper())
            if raw is None:
                continue
            default = f.default
            if isinstance(default, bool):
                values[f.name] = _parse_bool(raw)
            elif isinstance(default, int):
                values[f.name] = int(raw)
            elif isinstance(default, float):
                values[f.name] = float(raw)
            elif isinstance(default, tuple):
                values[f.name] = _parse_tuple(raw)
            else:
                values[f.name] = raw
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
