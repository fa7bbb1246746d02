"""Core data structures for selfheal."""

from selfheal.models.actions import ActionKind, RecoveryAction, RecoveryOutcome, WorkloadRef
from selfheal.models.alerts import Alert, AlertLabels, AlertStatus
from selfheal.models.config import SelfHealConfig

__all__ = [
    "ActionKind",
    "Alert",
    "AlertLabels",
    "AlertStatus",
    "RecoveryAction",
    "RecoveryOutcome",
    "SelfHealConfig",
    "WorkloadRef",
]
