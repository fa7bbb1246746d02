"""Per-kind tally of recovery outcomes, for diagnostics only."""

from __future__ import annotations

import threading

from selfheal.observability.metrics import recovery_actions_total


class RecoveryCounters:
    """Process-lifetime success/failure counts keyed by action kind.

    Every update is mirrored to the ``selfheal_recovery_actions_total``
    Prometheus counter.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._successes: dict[str, int] = {}
        self._failures: dict[str, int] = {}

    def record_success(self, kind: str) -> None:
        with self._lock:
            self._successes[kind] = self._successes.get(kind, 0) + 1
        recovery_actions_total.labels(action=kind, outcome="success").inc()

    def record_failure(self, kind: str) -> None:
        with self._lock:
            self._failures[kind] = self._failures.get(kind, 0) + 1
        recovery_actions_total.labels(action=kind, outcome="failure").inc()

    def get(self, kind: str) -> int:
        """Number of successful actions of *kind*."""
        with self._lock:
            return self._successes.get(kind, 0)

    def failures(self, kind: str) -> int:
        with self._lock:
            return self._failures.get(kind, 0)

    def snapshot(self) -> dict[str, dict[str, int]]:
        with self._lock:
            return {"success": dict(self._successes), "failure": dict(self._failures)}
