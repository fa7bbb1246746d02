"""Tests for CooldownGuard."""

from __future__ import annotations

import threading

from selfheal.engine.cooldown import CooldownGuard

_KEY = "default/nodejs-app"


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


class TestIsCoolingDown:
    def test_absent_key_is_not_cooling_down(self) -> None:
        guard = CooldownGuard(window_seconds=180, clock=FakeClock())
        assert guard.is_cooling_down(_KEY) is False

    def test_recorded_key_cools_down_until_window_elapses(self) -> None:
        clock = FakeClock()
        guard = CooldownGuard(window_seconds=180, clock=clock)
        guard.record_cooldown(_KEY)

        clock.now = 179.9
        assert guard.is_cooling_down(_KEY) is True

        clock.now = 180.0
        assert guard.is_cooling_down(_KEY) is False

    def test_keys_are_independent(self) -> None:
        guard = CooldownGuard(window_seconds=180, clock=FakeClock())
        guard.record_cooldown(_KEY)
        assert guard.is_cooling_down("default/other-app") is False
        assert guard.is_cooling_down("staging/nodejs-app") is False

    def test_re_recording_extends_window(self) -> None:
        clock = FakeClock()
        guard = CooldownGuard(window_seconds=60, clock=clock)
        guard.record_cooldown(_KEY)
        clock.now = 50
        guard.record_cooldown(_KEY)
        clock.now = 100
        assert guard.is_cooling_down(_KEY) is True


class TestTryBeginFinish:
    def test_begin_then_success_starts_cooldown(self) -> None:
        guard = CooldownGuard(window_seconds=180, clock=FakeClock())
        assert guard.try_begin(_KEY) is True
        guard.finish(_KEY, success=True)
        assert guard.is_cooling_down(_KEY) is True
        assert guard.try_begin(_KEY) is False

    def test_failure_leaves_key_eligible(self) -> None:
        guard = CooldownGuard(window_seconds=180, clock=FakeClock())
        assert guard.try_begin(_KEY) is True
        guard.finish(_KEY, success=False)
        assert guard.is_cooling_down(_KEY) is False
        assert guard.try_begin(_KEY) is True

    def test_in_flight_key_cannot_be_claimed_twice(self) -> None:
        guard = CooldownGuard(window_seconds=180, clock=FakeClock())
        assert guard.try_begin(_KEY) is True
        assert guard.try_begin(_KEY) is False
        # In flight is not the same as cooling down.
        assert guard.is_cooling_down(_KEY) is False

    def test_claim_allowed_again_after_window(self) -> None:
        clock = FakeClock()
        guard = CooldownGuard(window_seconds=180, clock=clock)
        guard.try_begin(_KEY)
        guard.finish(_KEY, success=True)
        clock.now = 181
        assert guard.try_begin(_KEY) is True

    def test_only_one_thread_wins_the_claim(self) -> None:
        guard = CooldownGuard(window_seconds=180)
        barrier = threading.Barrier(8)
        wins: list[bool] = []
        lock = threading.Lock()

        def _claim() -> None:
            barrier.wait()
            result = guard.try_begin(_KEY)
            with lock:
                wins.append(result)

        threads = [threading.Thread(target=_claim) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert wins.count(True) == 1


class TestDiagnostics:
    def test_remaining(self) -> None:
        clock = FakeClock()
        guard = CooldownGuard(window_seconds=180, clock=clock)
        assert guard.remaining(_KEY) == 0.0
        guard.record_cooldown(_KEY)
        clock.now = 30
        assert guard.remaining(_KEY) == 150.0
        clock.now = 500
        assert guard.remaining(_KEY) == 0.0

    def test_active_count_ages_out(self) -> None:
        clock = FakeClock()
        guard = CooldownGuard(window_seconds=100, clock=clock)
        guard.record_cooldown("a/x")
        clock.now = 50
        guard.record_cooldown("b/y")
        assert guard.active_count() == 2
        clock.now = 120
        assert guard.active_count() == 1

    def test_window_seconds_property(self) -> None:
        assert CooldownGuard(window_seconds=42).window_seconds == 42
