"""Per-batch alert processing: translate → cooldown → execute → record."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import StrEnum

import structlog

from selfheal.engine.cooldown import CooldownGuard
from selfheal.engine.counters import RecoveryCounters
from selfheal.engine.executor import RecoveryExecutor
from selfheal.engine.translator import translate
from selfheal.models.actions import ActionKind, RecoveryAction, RecoveryOutcome
from selfheal.models.alerts import Alert
from selfheal.observability.metrics import actions_suppressed_total, alerts_received_total

_log = structlog.get_logger(component="engine.processor")

_KNOWN_KINDS = frozenset(kind.value for kind in ActionKind)


class AlertDisposition(StrEnum):
    """What happened to one alert of a batch."""

    IGNORED = "ignored"
    SKIPPED = "skipped"
    COOLDOWN = "cooldown"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class AlertResult:
    alert: Alert
    disposition: AlertDisposition
    action: RecoveryAction | None = None
    outcome: RecoveryOutcome | None = None


def counter_kind(kind: str) -> str:
    """Bucket arbitrary label values so counters keep a fixed key set."""
    return kind if kind in _KNOWN_KINDS else "unknown"


class AlertProcessor:
    """Processes webhook batches one alert at a time, in order.

    A failure on one alert is logged and recorded, never raised, so the
    remaining alerts of the batch are still attempted.
    """

    def __init__(
        self,
        executor: RecoveryExecutor,
        cooldown: CooldownGuard,
        counters: RecoveryCounters,
    ) -> None:
        self._executor = executor
        self._cooldown = cooldown
        self._counters = counters

    async def process_batch(self, alerts: Sequence[Alert]) -> list[AlertResult]:
        results: list[AlertResult] = []
        for alert in alerts:
            results.append(await self.process_alert(alert))
        return results

    async def process_alert(self, alert: Alert) -> AlertResult:
        alerts_received_total.labels(status=alert.status_label).inc()
        if not alert.is_firing:
            return AlertResult(alert=alert, disposition=AlertDisposition.IGNORED)

        action = translate(alert)
        if action is None:
            _log.info("alert_skipped", alertname=alert.labels.alert_name, reason="no recovery_action label")
            return AlertResult(alert=alert, disposition=AlertDisposition.SKIPPED)

        key = action.cooldown_key
        if not self._cooldown.try_begin(key):
            actions_suppressed_total.labels(action=counter_kind(action.kind)).inc()
            _log.info(
                "action_suppressed_by_cooldown",
                alertname=action.alert_name,
                action=action.kind,
                target=key,
                seconds_remaining=int(self._cooldown.remaining(key)),
            )
            return AlertResult(alert=alert, disposition=AlertDisposition.COOLDOWN, action=action)

        _log.info(
            "executing_recovery_action",
            alertname=action.alert_name,
            action=action.kind,
            namespace=action.namespace,
            app=action.app,
            pod=action.pod,
        )
        succeeded = False
        try:
            outcome = await self._executor.execute(action)
            succeeded = outcome.success
        finally:
            self._cooldown.finish(key, success=succeeded)

        kind = counter_kind(action.kind)
        if outcome.success:
            self._counters.record_success(kind)
            _log.info("recovery_succeeded", alertname=action.alert_name, action=action.kind, detail=outcome.detail)
            return AlertResult(alert=alert, disposition=AlertDisposition.SUCCEEDED, action=action, outcome=outcome)

        self._counters.record_failure(kind)
        _log.error(
            "recovery_failed",
            alertname=action.alert_name,
            action=action.kind,
            target=key,
            error_type=type(outcome.error).__name__,
            error=outcome.detail,
        )
        return AlertResult(alert=alert, disposition=AlertDisposition.FAILED, action=action, outcome=outcome)
