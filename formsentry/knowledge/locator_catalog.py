"""
Locator Catalog - Pre-seeded Candidate Lists per Semantic Role

Each role maps to an ordered list of selection strategies. Order is
priority: framework-targeted strategies first, generic ones last.
The built-in table covers ui-select, Angular Material, ng-select,
Select2, Chosen, ARIA comboboxes and plain markup. Any role can be
replaced from a JSON file without touching the finder logic.
"""

import json
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, Iterator, List, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

# Configure logging
logger = logging.getLogger(__name__)


class SelectorType(str, Enum):
    CSS = "css"
    XPATH = "xpath"
    TEXT = "text"
    ID = "id"
    NAME = "name"
    TAG = "tag"


class Role(str, Enum):
    """Semantic roles the sign-up workflow needs to locate"""
    DROPDOWN_TOGGLE = "dropdown_toggle"
    DROPDOWN_OPTION = "dropdown_option"
    NAME_INPUT = "name_input"
    ORGANIZATION_INPUT = "organization_input"
    EMAIL_INPUT = "email_input"
    TERMS_CHECKBOX = "terms_checkbox"
    TERMS_LABEL = "terms_label"
    SUBMIT_BUTTON = "submit_button"
    SUCCESS_BANNER = "success_banner"
    ERROR_BANNER = "error_banner"


class LocatorStrategy(BaseModel):
    """One way of locating elements of a role. Evaluated fresh on every query."""
    model_config = ConfigDict(frozen=True)

    selector_type: SelectorType
    selector: str = Field(min_length=1)
    description: Optional[str] = None

    @classmethod
    def css(cls, selector: str, description: Optional[str] = None) -> "LocatorStrategy":
        return cls(selector_type=SelectorType.CSS, selector=selector, description=description)

    @classmethod
    def xpath(cls, selector: str, description: Optional[str] = None) -> "LocatorStrategy":
        return cls(selector_type=SelectorType.XPATH, selector=selector, description=description)

    def to_selector(self) -> str:
        """Render as a Playwright selector string"""
        if self.selector_type == SelectorType.CSS:
            return f"css={self.selector}"
        if self.selector_type == SelectorType.XPATH:
            return f"xpath={self.selector}"
        if self.selector_type == SelectorType.TEXT:
            return f"text={self.selector}"
        if self.selector_type == SelectorType.ID:
            return f"css=[id='{self.selector}']"
        if self.selector_type == SelectorType.NAME:
            return f"css=[name='{self.selector}']"
        return f"css={self.selector}"

    def __str__(self) -> str:
        return self.to_selector()


@dataclass(frozen=True)
class CandidateList:
    """Priority-ordered strategies sharing one role. First visible match wins."""
    role: str
    strategies: Tuple[LocatorStrategy, ...]

    def __post_init__(self):
        if not self.strategies:
            raise ValueError(f"Candidate list for '{self.role}' is empty")

    def __iter__(self) -> Iterator[LocatorStrategy]:
        return iter(self.strategies)

    def __len__(self) -> int:
        return len(self.strategies)

    def selectors(self) -> List[str]:
        return [s.to_selector() for s in self.strategies]


# ============================================================
# BUILT-IN CANDIDATES
# (selector_type, selector) pairs, most specific first
# ============================================================
DEFAULT_LOCATORS: Dict[Role, List[Tuple[str, str]]] = {
    Role.DROPDOWN_TOGGLE: [
        # ui-select
        ("css", "span.ui-select-toggle"),
        ("xpath", "//span[contains(@class,'ui-select-toggle')]"),
        ("xpath", "(//div[contains(@class,'ui-select-container')])[1]"),
        ("xpath", "//div[contains(@class,'ui-select-container') and (.//span[contains(@class,'ui-select-placeholder') or contains(@class,'ui-select-match')])]"),
        # Angular Material
        ("css", ".mat-select-trigger"),
        ("xpath", "//div[contains(@class,'mat-select')]"),
        # ng-select
        ("css", "ng-select .ng-select-container"),
        # Select2
        ("css", ".select2-selection"),
        # Chosen
        ("css", ".chosen-container"),
        # ARIA combobox
        ("css", "[role='combobox']"),
        # Anything labelled "language"
        ("xpath", "//*[self::div or self::span or self::label][contains(translate(., 'LANGUAGE', 'language'),'language')]"),
    ],
    Role.DROPDOWN_OPTION: [
        # ui-select
        ("css", "div.ui-select-choices-row"),
        ("xpath", "//div[contains(@class,'ui-select-choices-row')]"),
        ("xpath", "//div[contains(@class,'ui-select-choices')]//div[contains(@class,'ui-select-choices-row')]"),
        ("xpath", "//li[contains(@class,'ui-select-choices-row')]"),
        # Angular Material
        ("css", "mat-option .mat-option-text"),
        ("xpath", "//mat-option//span[contains(@class,'mat-option-text') or self::span]"),
        ("css", ".mat-select-panel .mat-option"),
        # ng-select
        ("css", ".ng-dropdown-panel .ng-option"),
        # Select2
        ("css", ".select2-results__option"),
        # Chosen
        ("css", ".chosen-results li"),
        # ARIA listbox items
        ("css", "[role='option']"),
        # Visible <option> of an expanded <select>
        ("tag", "option"),
    ],
    Role.NAME_INPUT: [
        ("name", "name"),
        ("xpath", "//input[@placeholder='Name']"),
        ("xpath", "//input[contains(@id,'name')]"),
    ],
    Role.ORGANIZATION_INPUT: [
        ("name", "orgName"),
        ("xpath", "//input[@placeholder='Organization Name' or @placeholder='Organisation Name']"),
        ("xpath", "//input[contains(@id,'org')]"),
    ],
    Role.EMAIL_INPUT: [
        ("xpath", "//input[@type='email']"),
        ("name", "email"),
        ("xpath", "//input[@placeholder='Email' or @placeholder='E-mail']"),
    ],
    Role.TERMS_CHECKBOX: [
        ("css", "input[type='checkbox'][id*='term'], input[type='checkbox'][name*='term'], "
                "input[type='checkbox'][id*='agree'], input[type='checkbox'][name*='agree']"),
        ("css", "input[type='checkbox'][ng-model*='agree']"),
        ("xpath", "//label[contains(.,'I agree')]/preceding::input[@type='checkbox'][1] | "
                  "//input[@type='checkbox'][ancestor::*[contains(.,'I agree')]][1]"),
        ("css", "input[type='checkbox']"),
    ],
    Role.TERMS_LABEL: [
        ("xpath", "//label[contains(normalize-space(.),'I agree') and (contains(.,'Terms') or contains(.,'conditions') or contains(.,'Conditions'))]"),
        ("xpath", "(//*[self::label or self::span][contains(.,'I agree') and contains(.,'Terms')])[1]"),
    ],
    Role.SUBMIT_BUTTON: [
        ("xpath", "//button[@type='submit']"),
        ("xpath", "//button[contains(normalize-space(.),'Sign Up') or contains(normalize-space(.),'SignUp') or contains(normalize-space(.),'Get Started')]"),
    ],
    Role.SUCCESS_BANNER: [
        ("xpath", "//*[contains(normalize-space(),'A welcome email has been sent. Please check your email.')]"),
        ("xpath", "//*[contains(normalize-space(),'A welcome email has been sent') and contains(normalize-space(),'Please check your email')]"),
        ("xpath", "//*[contains(translate(., 'WELCOME EMAIL', 'welcome email'),'welcome email') and contains(translate(., 'CHECK YOUR EMAIL', 'check your email'),'check your email')]"),
        ("css", ".alert-success, .toast-success, .toast-message, .text-success, .alert.alert-success"),
        ("css", "[class*='success']"),
    ],
    Role.ERROR_BANNER: [
        ("css", ".help-block, .text-danger, .alert-danger, .validation-message, [data-valmsg-for]"),
        ("css", "[role='alert'], .invalid-feedback, .error-message, .field-error"),
    ],
}


def _role_key(role: Union[Role, str]) -> str:
    return role.value if isinstance(role, Role) else str(role)


def _build_candidates(role: str, entries) -> CandidateList:
    strategies = []
    for entry in entries:
        if isinstance(entry, LocatorStrategy):
            strategies.append(entry)
        elif isinstance(entry, Mapping):
            strategies.append(LocatorStrategy(**entry))
        else:
            selector_type, selector = entry
            strategies.append(LocatorStrategy(selector_type=selector_type, selector=selector))
    return CandidateList(role=role, strategies=tuple(strategies))


class LocatorCatalog:
    """
    Immutable role -> candidate list mapping.

    Built once at startup. Unknown roles in an override file are kept,
    so callers can register candidate lists for roles of their own.
    """

    def __init__(self, candidates: Mapping[str, CandidateList]):
        self._candidates: Dict[str, CandidateList] = dict(candidates)

    @classmethod
    def default(cls) -> "LocatorCatalog":
        return cls.from_dict({role.value: entries for role, entries in DEFAULT_LOCATORS.items()})

    @classmethod
    def from_dict(cls, data: Mapping[str, list]) -> "LocatorCatalog":
        return cls({_role_key(role): _build_candidates(_role_key(role), entries) for role, entries in data.items()})

    @classmethod
    def load(cls, path: Optional[Union[str, Path]] = None) -> "LocatorCatalog":
        """
        Built-in catalog, with roles replaced by those in a JSON file.

        The file maps role names to lists of either
        {"selector_type": ..., "selector": ..., "description": ...}
        objects or [selector_type, selector] pairs.
        """
        catalog = cls.default()
        if not path:
            return catalog

        with open(path, "r", encoding="utf-8") as f:
            overrides = json.load(f)
        if not isinstance(overrides, dict):
            raise ValueError(f"Catalog file {path} must contain a JSON object")

        merged = dict(catalog._candidates)
        for role, entries in overrides.items():
            merged[role] = _build_candidates(role, entries)
            logger.info(f"Catalog override for '{role}': {len(entries)} strategies")
        return cls(merged)

    def get(self, role: Union[Role, str]) -> CandidateList:
        key = _role_key(role)
        try:
            return self._candidates[key]
        except KeyError:
            raise KeyError(f"No candidate list registered for role '{key}'") from None

    def __getitem__(self, role: Union[Role, str]) -> CandidateList:
        return self.get(role)

    def __contains__(self, role: Union[Role, str]) -> bool:
        key = _role_key(role)
        return key in self._candidates

    def roles(self) -> List[str]:
        return list(self._candidates)

    def to_dict(self) -> Dict[str, list]:
        return {
            role: [s.model_dump(mode="json") for s in candidates.strategies]
            for role, candidates in self._candidates.items()
        }
