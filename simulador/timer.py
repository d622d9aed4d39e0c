"""
Countdown timer for the active-case phase.

The timer does not schedule anything itself: an external source (the
1-second gr.Timer in the UI, or a test) calls tick() with the handle it was
given by start(). Re-arming cancels the previous handle, so ticks coming from
a stale schedule are ignored instead of speeding up the countdown.
"""
import itertools
from typing import Callable, Optional

from .config import CASE_DURATION_SECONDS, URGENT_THRESHOLD_SECONDS


def format_remaining(seconds: int) -> str:
    """Render remaining seconds as MM:SS."""
    seconds = max(0, int(seconds))
    minutes, secs = divmod(seconds, 60)
    return f"{minutes:02d}:{secs:02d}"


def is_urgent(seconds: int) -> bool:
    return seconds < URGENT_THRESHOLD_SECONDS


class CountdownHandle:
    """Cancellation token for one activation of the countdown."""

    _ids = itertools.count(1)

    def __init__(self):
        self.id = next(self._ids)
        self._cancelled = False

    @property
    def active(self) -> bool:
        return not self._cancelled

    def cancel(self):
        self._cancelled = True

    def __repr__(self):
        return f"CountdownHandle(id={self.id}, active={self.active})"


class CountdownTimer:
    """Decrements a remaining-time value once per tick while armed."""

    def __init__(self, duration: int = CASE_DURATION_SECONDS,
                 on_expire: Optional[Callable[[], None]] = None):
        self.duration = duration
        self.on_expire = on_expire
        self.remaining = duration
        self._handle: Optional[CountdownHandle] = None

    @property
    def active(self) -> bool:
        return self._handle is not None and self._handle.active

    def start(self, remaining: Optional[int] = None) -> CountdownHandle:
        """Arm the countdown, releasing any previous handle first."""
        self.cancel()
        self.remaining = self.duration if remaining is None else max(0, int(remaining))
        self._handle = CountdownHandle()
        return self._handle

    def cancel(self):
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def tick(self, handle: Optional[CountdownHandle] = None) -> bool:
        """
        Advance one second.

        Args:
            handle: The handle returned by start(); defaults to the live one.

        Returns:
            True only on the tick that reaches zero.
        """
        if handle is None:
            handle = self._handle
        if handle is None or handle is not self._handle or not handle.active:
            return False

        if self.remaining > 0:
            self.remaining -= 1
        if self.remaining > 0:
            return False

        self.cancel()
        if self.on_expire is not None:
            self.on_expire()
        return True
