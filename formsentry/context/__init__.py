"""
Browsing Context Navigation

Enumerates the top document and its child frames as scopes.
"""

from .navigator import ContextNavigator, Scope, TOP

__all__ = [
    "ContextNavigator",
    "Scope",
    "TOP"
]
