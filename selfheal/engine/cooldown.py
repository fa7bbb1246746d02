"""Cooldown guard that prevents alert → action → alert feedback loops.

CooldownGuard -- per-target cooldown keyed by ``namespace/app``. A key is
                 recorded only after a successful mutation; a failed attempt
                 leaves it eligible for the next delivery.

State is held in-process; restarting the engine resets all cooldowns.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable

_DEFAULT_WINDOW_SECONDS = 180.0


class CooldownGuard:
    """Lock-protected map of target key -> time of last successful action.

    Entries are never deleted, only aged out by comparison with the window.
    Besides the plain ``is_cooling_down`` / ``record_cooldown`` pair the guard
    tracks keys whose action is currently running, so that two concurrent
    deliveries for the same target cannot both pass the check.

    The lock guards map access only and is never held across a cluster call.
    """

    def __init__(
        self,
        window_seconds: float = _DEFAULT_WINDOW_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._window = window_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._last_success: dict[str, float] = {}
        self._in_flight: set[str] = set()

    @property
    def window_seconds(self) -> float:
        return self._window

    def is_cooling_down(self, key: str) -> bool:
        with self._lock:
            return self._cooling_locked(key, self._clock())

    def record_cooldown(self, key: str) -> None:
        with self._lock:
            self._last_success[key] = self._clock()

    def try_begin(self, key: str) -> bool:
        """Claim *key* for an action.

        Returns False when the key is cooling down or another action for it
        is still running.
        """
        with self._lock:
            if key in self._in_flight or self._cooling_locked(key, self._clock()):
                return False
            self._in_flight.add(key)
            return True

    def finish(self, key: str, success: bool) -> None:
        """Release a key claimed by ``try_begin``; start its cooldown on success."""
        with self._lock:
            self._in_flight.discard(key)
            if success:
                self._last_success[key] = self._clock()

    def remaining(self, key: str) -> float:
        """Seconds left in *key*'s cooldown window (0.0 when not cooling down)."""
        with self._lock:
            last = self._last_success.get(key)
            if last is None:
                return 0.0
            return max(0.0, self._window - (self._clock() - last))

    def active_count(self) -> int:
        with self._lock:
            now = self._clock()
            return sum(1 for key in self._last_success if self._cooling_locked(key, now))

    def _cooling_locked(self, key: str, now: float) -> bool:
        last = self._last_success.get(key)
        return last is not None and (now - last) < self._window
