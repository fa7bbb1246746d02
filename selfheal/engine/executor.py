"""Recovery executor: turns a RecoveryAction into cluster mutations.

Dispatch is keyed by action kind:

    restart   -> delete the alerting pod; its controller recreates it
    redeploy  -> bump the pod-template restart annotation of the app's
                 Deployment, forcing a rolling replacement
    scale     -> add one replica through the scale subresource
    otherwise -> UnknownActionError, nothing is touched

Every cluster call is bounded by ``call_timeout`` seconds. No retries are
made here; a failed action leaves its cooldown key unset so the next
Alertmanager delivery can try again.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from typing import TypeVar

import structlog

from selfheal.cluster.base import ClusterClient
from selfheal.engine.errors import (
    MissingPodError,
    MutationError,
    MutationTimeoutError,
    RecoveryError,
    ReplicaCeilingError,
    UnknownActionError,
    WorkloadLookupError,
)
from selfheal.models.actions import ActionKind, RecoveryAction, RecoveryOutcome, WorkloadRef
from selfheal.observability.metrics import cluster_call_duration_seconds

_log = structlog.get_logger(component="engine.executor")

_T = TypeVar("_T")

_DEFAULT_CALL_TIMEOUT = 10.0


def format_restart_timestamp(moment: datetime) -> str:
    """RFC 3339 UTC timestamp, the format ``kubectl rollout restart`` writes."""
    return moment.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")


class RecoveryExecutor:
    """Performs the mutation sequence for each recovery action kind.

    Args:
        cluster:       ClusterClient used for every mutation.
        call_timeout:  Deadline in seconds applied to each cluster call.
        max_replicas:  Upper bound for ``scale``; 0 disables the bound.
        now:           Wall-clock source for restart annotations.
    """

    def __init__(
        self,
        cluster: ClusterClient,
        call_timeout: float = _DEFAULT_CALL_TIMEOUT,
        max_replicas: int = 0,
        now: Callable[[], datetime] = lambda: datetime.now(tz=UTC),
    ) -> None:
        self._cluster = cluster
        self._call_timeout = call_timeout
        self._max_replicas = max_replicas
        self._now = now

    async def execute(self, action: RecoveryAction) -> RecoveryOutcome:
        """Run *action* and report how it ended. Recovery errors never propagate."""
        try:
            detail = await self._dispatch(action)
        except RecoveryError as exc:
            return RecoveryOutcome(action=action, success=False, detail=str(exc), error=exc)
        return RecoveryOutcome(action=action, success=True, detail=detail)

    async def _dispatch(self, action: RecoveryAction) -> str:
        if action.kind == ActionKind.RESTART:
            return await self._restart_pod(action)
        if action.kind == ActionKind.REDEPLOY:
            return await self._redeploy(action)
        if action.kind == ActionKind.SCALE:
            return await self._scale_up(action)
        raise UnknownActionError(action)

    # ------------------------------------------------------------------
    # Action kinds
    # ------------------------------------------------------------------

    async def _restart_pod(self, action: RecoveryAction) -> str:
        if not action.pod:
            raise MissingPodError(action)

        _log.info("restarting_pod", namespace=action.namespace, pod=action.pod)
        await self._call(action, "delete_pod", lambda: self._cluster.delete_pod(action.namespace, action.pod))
        return f"deleted pod {action.namespace}/{action.pod}"

    async def _redeploy(self, action: RecoveryAction) -> str:
        workload = await self._find_workload(action)
        timestamp = format_restart_timestamp(self._now())

        _log.info("redeploying_workload", namespace=action.namespace, workload=workload.name, restarted_at=timestamp)
        await self._call(
            action,
            "patch_restart_annotation",
            lambda: self._cluster.patch_restart_annotation(action.namespace, workload.name, timestamp),
        )
        return f"rolling restart of {action.namespace}/{workload.name} at {timestamp}"

    async def _scale_up(self, action: RecoveryAction) -> str:
        workload = await self._find_workload(action)
        current = await self._call(
            action,
            "get_replica_count",
            lambda: self._cluster.get_replica_count(action.namespace, workload.name),
        )
        if current is None:
            current = workload.replicas if workload.replicas is not None else 1
        desired = current + 1
        if self._max_replicas and desired > self._max_replicas:
            raise ReplicaCeilingError(action, current, self._max_replicas)

        _log.info(
            "scaling_workload",
            namespace=action.namespace,
            workload=workload.name,
            from_replicas=current,
            to_replicas=desired,
        )
        await self._call(
            action,
            "set_replica_count",
            lambda: self._cluster.set_replica_count(action.namespace, workload.name, desired),
        )
        return f"scaled {action.namespace}/{workload.name} from {current} to {desired} replicas"

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _find_workload(self, action: RecoveryAction) -> WorkloadRef:
        """Return the first Deployment labelled ``app=<action.app>``."""
        selector = f"app={action.app}"
        workloads = await self._call(
            action,
            "list_workloads",
            lambda: self._cluster.list_workloads(action.namespace, selector),
        )
        if not workloads:
            raise WorkloadLookupError(action, selector)
        if len(workloads) > 1:
            # API order is not guaranteed; the first match wins.
            _log.warning(
                "multiple_workloads_matched",
                namespace=action.namespace,
                selector=selector,
                workloads=[w.name for w in workloads],
                chosen=workloads[0].name,
            )
        return workloads[0]

    async def _call(self, action: RecoveryAction, operation: str, fn: Callable[[], Awaitable[_T]]) -> _T:
        """Run one cluster call under the deadline, translating failures."""
        t_start = time.monotonic()
        try:
            return await asyncio.wait_for(fn(), timeout=self._call_timeout)
        except TimeoutError as exc:
            raise MutationTimeoutError(action, operation, self._call_timeout) from exc
        except Exception as exc:
            raise MutationError(action, operation, exc) from exc
        finally:
            cluster_call_duration_seconds.labels(operation=operation).observe(time.monotonic() - t_start)
