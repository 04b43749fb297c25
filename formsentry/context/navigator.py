"""
Context Navigator

Manages the search scope across the top document and its embedded
frames. Scopes are passed explicitly: callers get the resolved Playwright
Frame for the duration of a `with_scope` block, and the navigator's
active scope is always back at the top document once the block exits.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, TypeVar

from playwright.sync_api import Error as PlaywrightError, Frame, Page

from ..errors import ScopeError

# Configure logging
logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Scope:
    """Top document (frame_index is None) or child frame i of the top document"""
    frame_index: Optional[int] = None

    @property
    def is_top(self) -> bool:
        return self.frame_index is None

    @classmethod
    def frame(cls, index: int) -> "Scope":
        if index < 0:
            raise ValueError("frame index must be >= 0")
        return cls(frame_index=index)

    def __str__(self) -> str:
        return "top" if self.is_top else f"frame[{self.frame_index}]"


TOP = Scope()


class ContextNavigator:
    """
    Resolves scopes to frames and walks them in document order.

    One navigator per page. Not thread-safe: a browser session has a single
    active context.
    """

    def __init__(self, page: Page):
        self.page = page
        self.active_scope: Scope = TOP

    def set_page(self, page: Page):
        """Set the Playwright page object"""
        self.page = page
        self.active_scope = TOP

    def _child_frames(self) -> List[Frame]:
        return list(self.page.main_frame.child_frames)

    def enumerate_frames(self) -> List[int]:
        """Indices of the top document's embedded frames, in document order"""
        try:
            return list(range(len(self._child_frames())))
        except PlaywrightError as e:
            logger.debug(f"Could not enumerate frames: {e}")
            return []

    def scopes(self, first: Optional[Scope] = None) -> List[Scope]:
        """Top document, then frames in document order; `first` is moved to the front when present"""
        ordered = [TOP] + [Scope.frame(i) for i in self.enumerate_frames()]
        if first is not None and first in ordered:
            ordered.remove(first)
            ordered.insert(0, first)
        return ordered

    def resolve(self, scope: Scope) -> Frame:
        if scope.is_top:
            return self.page.main_frame
        frames = self._child_frames()
        if scope.frame_index >= len(frames):
            raise ScopeError(f"{scope} does not exist (page has {len(frames)} frames)")
        return frames[scope.frame_index]

    @contextmanager
    def with_scope(self, scope: Scope) -> Iterator[Frame]:
        """
        Run a block against `scope`.

        Yields the resolved frame. The active scope is reset to the top
        document on every exit path.
        """
        frame = self.resolve(scope)
        self.active_scope = scope
        try:
            yield frame
        finally:
            self.active_scope = TOP

    def for_each_scope(
        self,
        visitor: Callable[[Scope, Frame], Optional[T]],
        first: Optional[Scope] = None
    ) -> Optional[T]:
        """
        Visit the top document, then each frame, until one reports a match.
        A known scope passed as `first` is visited before the others.

        The visitor returns something truthy to signal a match; that value
        is returned. Frames that disappear mid-walk are skipped.
        """
        for scope in self.scopes(first):
            try:
                with self.with_scope(scope) as frame:
                    result = visitor(scope, frame)
            except ScopeError as e:
                logger.debug(f"Skipping {scope}: {e}")
                continue
            if result:
                return result
        return None
