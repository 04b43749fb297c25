"""
Bounded polling.

Discovery tries many candidate strategies per tick instead of committing
to one locator, so waits are cooperative poll loops rather than blocking
driver waits. A poll loop's only cancellation is its own deadline.
"""

import time
from typing import Callable, Optional, TypeVar

T = TypeVar("T")


class Poller:
    """
    Poll-until-predicate-or-deadline combinator.

    Args:
        interval: Seconds between checks
        backoff: Multiplier applied to the interval after every check
        max_interval: Upper bound for the interval when backing off
        clock: Monotonic time source (seconds)
        sleep: Sleep function (seconds)
    """

    DEFAULT_INTERVAL = 0.08

    def __init__(
        self,
        interval: float = DEFAULT_INTERVAL,
        backoff: float = 1.0,
        max_interval: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep
    ):
        if interval < 0:
            raise ValueError("interval must be >= 0")
        if backoff < 1.0:
            raise ValueError("backoff must be >= 1.0")
        self.interval = interval
        self.backoff = backoff
        self.max_interval = max_interval
        self.clock = clock
        self._sleep = sleep

    def now(self) -> float:
        return self.clock()

    def sleep(self, seconds: float) -> None:
        if seconds > 0:
            self._sleep(seconds)

    def until(
        self,
        check: Callable[[], Optional[T]],
        timeout: float,
        interval: Optional[float] = None
    ) -> Optional[T]:
        """
        Call check until it returns something truthy or timeout elapses.

        The check always runs at least once. Sleeps are clipped to the
        remaining budget.

        Returns:
            The first truthy check result, or None on timeout
        """
        deadline = self.clock() + max(timeout, 0.0)
        step = self.interval if interval is None else interval

        while True:
            result = check()
            if result:
                return result

            remaining = deadline - self.clock()
            if remaining <= 0:
                return None

            self.sleep(min(step, remaining))
            step *= self.backoff
            if self.max_interval is not None:
                step = min(step, self.max_interval)
