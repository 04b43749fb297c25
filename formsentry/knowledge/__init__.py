"""
Locator Knowledge

Ordered selector strategies per semantic role of the sign-up form.
"""

from .locator_catalog import (
    DEFAULT_LOCATORS,
    CandidateList,
    LocatorCatalog,
    LocatorStrategy,
    Role,
    SelectorType
)

__all__ = [
    "DEFAULT_LOCATORS",
    "CandidateList",
    "LocatorCatalog",
    "LocatorStrategy",
    "Role",
    "SelectorType"
]
