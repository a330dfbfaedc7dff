"""
scheduling.py - Deferred calls with cancellation

The controller uses a scheduler to run the computer's move after a short
"think time". Scheduling returns a handle that can be cancelled when the game
is reset or reconfigured before the move runs.
"""

import threading
from typing import Callable, Optional

from connect4mc.debug import debug


class PendingCall:
    """Handle for a scheduled call."""

    def __init__(self, timer: Optional[threading.Timer] = None):
        self._timer = timer
        self._cancelled = False
        self._done = False
        self._lock = threading.Lock()

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def done(self) -> bool:
        return self._done

    def cancel(self) -> bool:
        """
        Cancel the call if it has not started.

        Returns:
            True if the call will not run
        """
        with self._lock:
            if self._done:
                return False
            self._cancelled = True
        if self._timer is not None:
            self._timer.cancel()
        return True

    def _claim(self) -> bool:
        # Marks the call as started unless it was cancelled first
        with self._lock:
            if self._cancelled:
                return False
            self._done = True
            return True

    def run(self, callback: Callable[[], None]):
        if self._claim():
            callback()


class TimerScheduler:
    """Runs callbacks on a daemon timer thread after a delay."""

    def schedule(self, delay: float, callback: Callable[[], None]) -> PendingCall:
        handle = PendingCall()
        timer = threading.Timer(delay, handle.run, args=(callback,))
        timer.daemon = True
        handle._timer = timer
        timer.start()
        debug.trace(f"Scheduled call in {delay:.2f}s", "scheduler")
        return handle


class ImmediateScheduler:
    """Runs callbacks synchronously, ignoring the delay."""

    def schedule(self, delay: float, callback: Callable[[], None]) -> PendingCall:
        handle = PendingCall()
        handle.run(callback)
        return handle
