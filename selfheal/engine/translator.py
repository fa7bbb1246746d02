"""Alert-to-action translation.

Pure mapping from one alert's labels to a RecoveryAction. No I/O, no state.
"""

from __future__ import annotations

from selfheal.models.actions import RecoveryAction
from selfheal.models.alerts import Alert


def translate(alert: Alert) -> RecoveryAction | None:
    """Return the recovery action requested by *alert*, or None.

    None means the alert carries no ``recovery_action`` label and should be
    skipped. The kind is passed through as-is; the executor rejects unknown
    kinds.
    """
    labels = alert.labels
    kind = labels.recovery_action
    if not kind:
        return None

    return RecoveryAction(
        kind=kind,
        namespace=labels.namespace_or_default,
        app=labels.app_or_unknown,
        alert_name=labels.alert_name,
        pod=labels.pod,
    )
