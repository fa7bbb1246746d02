"""Shared fixtures: an in-memory cluster, a controllable clock and the engine wired to both."""

from __future__ import annotations

import pytest

from selfheal.engine.cooldown import CooldownGuard
from selfheal.engine.counters import RecoveryCounters
from selfheal.engine.executor import RecoveryExecutor
from selfheal.engine.processor import AlertProcessor
from tests.fakes import FakeClock, FakeClusterClient


@pytest.fixture
def fake_cluster() -> FakeClusterClient:
    return FakeClusterClient()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cooldown(clock: FakeClock) -> CooldownGuard:
    return CooldownGuard(window_seconds=180, clock=clock)


@pytest.fixture
def counters() -> RecoveryCounters:
    return RecoveryCounters()


@pytest.fixture
def executor(fake_cluster: FakeClusterClient) -> RecoveryExecutor:
    return RecoveryExecutor(cluster=fake_cluster, call_timeout=2.0)


@pytest.fixture
def processor(
    executor: RecoveryExecutor,
    cooldown: CooldownGuard,
    counters: RecoveryCounters,
) -> AlertProcessor:
    return AlertProcessor(executor=executor, cooldown=cooldown, counters=counters)
