"""Alert-to-action decision and execution engine."""

from selfheal.engine.cooldown import CooldownGuard
from selfheal.engine.counters import RecoveryCounters
from selfheal.engine.executor import RecoveryExecutor
from selfheal.engine.processor import AlertDisposition, AlertProcessor, AlertResult
from selfheal.engine.translator import translate

__all__ = [
    "AlertDisposition",
    "AlertProcessor",
    "AlertResult",
    "CooldownGuard",
    "RecoveryCounters",
    "RecoveryExecutor",
    "translate",
]
