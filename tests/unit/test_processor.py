"""Tests for AlertProcessor: status filtering, cooldown, outcomes, counters."""

from __future__ import annotations

import asyncio

from selfheal.engine.cooldown import CooldownGuard
from selfheal.engine.counters import RecoveryCounters
from selfheal.engine.errors import MutationError, UnknownActionError
from selfheal.engine.processor import AlertDisposition, AlertProcessor, counter_kind
from selfheal.models.alerts import Alert, AlertLabels, AlertStatus
from tests.fakes import FakeClock, FakeClusterClient


def _alert(status: str = AlertStatus.FIRING, **labels: str) -> Alert:
    return Alert(labels=AlertLabels(labels), status=status)


def _restart_alert(pod: str = "nodejs-app-abc", app: str = "nodejs-app", **extra: str) -> Alert:
    return _alert(
        alertname="HighMemoryUsage",
        recovery_action="restart",
        pod=pod,
        namespace="default",
        app=app,
        **extra,
    )


class TestStatusAndTranslation:
    async def test_resolved_alert_is_ignored(
        self, processor: AlertProcessor, fake_cluster: FakeClusterClient
    ) -> None:
        result = await processor.process_alert(
            _alert(AlertStatus.RESOLVED, recovery_action="restart", pod="p", app="a")
        )

        assert result.disposition is AlertDisposition.IGNORED
        assert fake_cluster.calls == []

    async def test_unrecognised_status_is_ignored(
        self, processor: AlertProcessor, fake_cluster: FakeClusterClient
    ) -> None:
        for status in ("", "pending"):
            result = await processor.process_alert(_alert(status, recovery_action="restart", pod="p", app="a"))

            assert result.disposition is AlertDisposition.IGNORED
        assert fake_cluster.calls == []

    async def test_alert_without_action_is_skipped(
        self, processor: AlertProcessor, fake_cluster: FakeClusterClient
    ) -> None:
        result = await processor.process_alert(_alert(alertname="Watchdog"))

        assert result.disposition is AlertDisposition.SKIPPED
        assert result.action is None
        assert fake_cluster.calls == []


class TestExecution:
    async def test_successful_restart(
        self,
        processor: AlertProcessor,
        fake_cluster: FakeClusterClient,
        cooldown: CooldownGuard,
        counters: RecoveryCounters,
    ) -> None:
        result = await processor.process_alert(_restart_alert())

        assert result.disposition is AlertDisposition.SUCCEEDED
        assert fake_cluster.deleted_pods == [("default", "nodejs-app-abc")]
        assert cooldown.is_cooling_down("default/nodejs-app")
        assert counters.get("restart") == 1

    async def test_failed_mutation_does_not_start_cooldown(
        self,
        processor: AlertProcessor,
        fake_cluster: FakeClusterClient,
        cooldown: CooldownGuard,
        counters: RecoveryCounters,
    ) -> None:
        fake_cluster.fail_on["delete_pod"] = RuntimeError("boom")

        result = await processor.process_alert(_restart_alert())

        assert result.disposition is AlertDisposition.FAILED
        assert isinstance(result.outcome.error, MutationError)
        assert not cooldown.is_cooling_down("default/nodejs-app")
        assert counters.get("restart") == 0
        assert counters.failures("restart") == 1

    async def test_failed_key_is_retried_on_next_delivery(
        self, processor: AlertProcessor, fake_cluster: FakeClusterClient
    ) -> None:
        fake_cluster.fail_on["delete_pod"] = RuntimeError("boom")
        await processor.process_alert(_restart_alert())

        del fake_cluster.fail_on["delete_pod"]
        result = await processor.process_alert(_restart_alert())

        assert result.disposition is AlertDisposition.SUCCEEDED
        assert len(fake_cluster.calls_to("delete_pod")) == 2

    async def test_unknown_action_is_recorded(
        self,
        processor: AlertProcessor,
        fake_cluster: FakeClusterClient,
        counters: RecoveryCounters,
    ) -> None:
        result = await processor.process_alert(_alert(recovery_action="teleport", app="nodejs-app", pod="p"))

        assert result.disposition is AlertDisposition.FAILED
        assert isinstance(result.outcome.error, UnknownActionError)
        assert fake_cluster.calls == []
        assert counters.failures("unknown") == 1


class TestCooldown:
    async def test_second_firing_within_window_is_suppressed(
        self, processor: AlertProcessor, fake_cluster: FakeClusterClient
    ) -> None:
        first = await processor.process_alert(_restart_alert())
        second = await processor.process_alert(_restart_alert(pod="nodejs-app-def"))

        assert first.disposition is AlertDisposition.SUCCEEDED
        assert second.disposition is AlertDisposition.COOLDOWN
        assert len(fake_cluster.calls_to("delete_pod")) == 1

    async def test_window_elapsed_allows_action_again(
        self,
        processor: AlertProcessor,
        fake_cluster: FakeClusterClient,
        clock: FakeClock,
    ) -> None:
        await processor.process_alert(_restart_alert())
        clock.advance(181)
        result = await processor.process_alert(_restart_alert())

        assert result.disposition is AlertDisposition.SUCCEEDED
        assert len(fake_cluster.calls_to("delete_pod")) == 2

    async def test_different_apps_do_not_share_cooldown(
        self, processor: AlertProcessor, fake_cluster: FakeClusterClient
    ) -> None:
        await processor.process_alert(_restart_alert(app="a", pod="a-1"))
        result = await processor.process_alert(_restart_alert(app="b", pod="b-1"))

        assert result.disposition is AlertDisposition.SUCCEEDED
        assert len(fake_cluster.calls_to("delete_pod")) == 2

    async def test_cooldown_is_shared_across_action_kinds(
        self, processor: AlertProcessor, fake_cluster: FakeClusterClient
    ) -> None:
        fake_cluster.add_deployment("nodejs-app", replicas=2)
        await processor.process_alert(_restart_alert())

        result = await processor.process_alert(_alert(recovery_action="scale", app="nodejs-app"))

        assert result.disposition is AlertDisposition.COOLDOWN
        assert fake_cluster.calls_to("set_replica_count") == []

    async def test_scale_grows_each_window(
        self,
        processor: AlertProcessor,
        fake_cluster: FakeClusterClient,
        clock: FakeClock,
    ) -> None:
        deployment = fake_cluster.add_deployment("nodejs-app", replicas=2)
        seen = []
        for _ in range(3):
            await processor.process_alert(_alert(recovery_action="scale", app="nodejs-app"))
            seen.append(deployment.replicas)
            clock.advance(200)

        assert seen == [3, 4, 5]

    async def test_concurrent_deliveries_mutate_once(
        self, processor: AlertProcessor, fake_cluster: FakeClusterClient
    ) -> None:
        fake_cluster.delay = 0.05

        results = await asyncio.gather(
            processor.process_alert(_restart_alert()),
            processor.process_alert(_restart_alert()),
        )

        dispositions = sorted(r.disposition.value for r in results)
        assert dispositions == ["cooldown", "succeeded"]
        assert len(fake_cluster.calls_to("delete_pod")) == 1


class TestBatch:
    async def test_failure_does_not_abort_batch(
        self, processor: AlertProcessor, fake_cluster: FakeClusterClient
    ) -> None:
        batch = [
            _alert(recovery_action="restart", app="a"),  # no pod -> fails
            _alert(recovery_action="bogus", app="b"),
            _restart_alert(app="c", pod="c-1"),
        ]

        results = await processor.process_batch(batch)

        assert [r.disposition for r in results] == [
            AlertDisposition.FAILED,
            AlertDisposition.FAILED,
            AlertDisposition.SUCCEEDED,
        ]
        assert fake_cluster.deleted_pods == [("default", "c-1")]

    async def test_alerts_processed_in_order(
        self, processor: AlertProcessor, fake_cluster: FakeClusterClient
    ) -> None:
        batch = [_restart_alert(app=f"app-{i}", pod=f"pod-{i}") for i in range(5)]

        await processor.process_batch(batch)

        assert [pod for _, pod in fake_cluster.deleted_pods] == [f"pod-{i}" for i in range(5)]

    async def test_empty_batch(self, processor: AlertProcessor) -> None:
        assert await processor.process_batch([]) == []


class TestCounterKind:
    def test_known_kinds_pass_through(self) -> None:
        assert counter_kind("restart") == "restart"
        assert counter_kind("redeploy") == "redeploy"
        assert counter_kind("scale") == "scale"

    def test_other_values_bucket_to_unknown(self) -> None:
        assert counter_kind("Restart") == "unknown"
        assert counter_kind("") == "unknown"
