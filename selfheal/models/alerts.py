"""Alert data structures and the alert label contract."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum

# Label names produced by the alerting rules. Treated as a stable protocol.
LABEL_RECOVERY_ACTION = "recovery_action"
LABEL_ALERT_NAME = "alertname"
LABEL_POD = "pod"
LABEL_POD_LEGACY = "kubernetes_pod_name"
LABEL_NAMESPACE = "namespace"
LABEL_NAMESPACE_LEGACY = "kubernetes_namespace"
LABEL_APP = "app"

DEFAULT_NAMESPACE = "default"
UNKNOWN_APP = "unknown"


class AlertStatus(StrEnum):
    """Alert lifecycle status as reported by Alertmanager."""

    FIRING = "firing"
    RESOLVED = "resolved"


_KNOWN_STATUSES = frozenset(status.value for status in AlertStatus)


@dataclass(frozen=True)
class AlertLabels:
    """Typed view over an alert's label set.

    Every label lookup the engine performs goes through one of the named
    accessors below, so the fallback rules live in exactly one place.
    """

    values: dict[str, str] = field(default_factory=dict)

    def get(self, name: str) -> str:
        return self.values.get(name, "")

    @property
    def recovery_action(self) -> str:
        return self.get(LABEL_RECOVERY_ACTION)

    @property
    def alert_name(self) -> str:
        return self.get(LABEL_ALERT_NAME)

    @property
    def pod(self) -> str:
        return self.get(LABEL_POD) or self.get(LABEL_POD_LEGACY)

    @property
    def namespace_or_default(self) -> str:
        return self.get(LABEL_NAMESPACE) or self.get(LABEL_NAMESPACE_LEGACY) or DEFAULT_NAMESPACE

    @property
    def app_or_unknown(self) -> str:
        return self.get(LABEL_APP) or UNKNOWN_APP


@dataclass(frozen=True)
class Alert:
    """A single alert from a webhook batch. Immutable once parsed.

    ``status`` holds whatever Alertmanager sent (possibly empty); only
    :attr:`AlertStatus.FIRING` drives recovery.
    """

    labels: AlertLabels
    status: str = ""
    annotations: dict[str, str] = field(default_factory=dict)
    starts_at: datetime | None = None
    ends_at: datetime | None = None

    @property
    def is_firing(self) -> bool:
        return self.status == AlertStatus.FIRING

    @property
    def status_label(self) -> str:
        """Status bucketed to a fixed set, for metric labels."""
        return self.status if self.status in _KNOWN_STATUSES else "other"
