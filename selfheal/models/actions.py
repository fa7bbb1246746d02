"""Recovery action data structures."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class ActionKind(StrEnum):
    """Recovery action kinds the executor knows how to perform."""

    RESTART = "restart"
    REDEPLOY = "redeploy"
    SCALE = "scale"


@dataclass(frozen=True)
class RecoveryAction:
    """Structured recovery request produced by the translator.

    ``kind`` holds the raw label value; it is only validated against
    ActionKind by the executor.
    """

    kind: str
    namespace: str
    app: str
    alert_name: str = ""
    pod: str = ""

    @property
    def cooldown_key(self) -> str:
        return f"{self.namespace}/{self.app}"


@dataclass(frozen=True)
class WorkloadRef:
    """A replica-controlling workload (Deployment) found by label lookup.

    ``replicas`` is the desired count from the Deployment spec at lookup
    time, or None when the spec leaves it unset.
    """

    name: str
    namespace: str
    replicas: int | None = None


@dataclass(frozen=True)
class RecoveryOutcome:
    """Terminal state of one executed recovery action."""

    action: RecoveryAction
    success: bool
    detail: str = ""
    error: Exception | None = None
