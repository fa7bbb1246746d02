"""Exceptions raised while carrying out a recovery action.

None of these escape the per-alert loop: the executor converts them into a
failed RecoveryOutcome and the processor logs it.
"""

from __future__ import annotations

from selfheal.models.actions import RecoveryAction


class RecoveryError(Exception):
    """Base class for every recovery-side failure."""

    def __init__(self, action: RecoveryAction, message: str) -> None:
        super().__init__(message)
        self.action = action


class MissingPodError(RecoveryError):
    """A restart was requested but the alert carried no pod identifier."""

    def __init__(self, action: RecoveryAction) -> None:
        super().__init__(action, "no pod identifier provided for restart action")


class WorkloadLookupError(RecoveryError):
    """No workload matched the ``app=<value>`` selector."""

    def __init__(self, action: RecoveryAction, selector: str) -> None:
        super().__init__(action, f"no matching workload for {selector} in namespace {action.namespace}")
        self.selector = selector


class MutationError(RecoveryError):
    """The Kubernetes API call failed."""

    def __init__(self, action: RecoveryAction, operation: str, cause: BaseException) -> None:
        super().__init__(action, f"{operation} failed: {cause}")
        self.operation = operation
        self.cause = cause


class MutationTimeoutError(MutationError):
    """The Kubernetes API call did not finish before its deadline."""

    def __init__(self, action: RecoveryAction, operation: str, timeout: float) -> None:
        super().__init__(action, operation, TimeoutError(f"deadline of {timeout:g}s exceeded"))
        self.timeout = timeout


class UnknownActionError(RecoveryError):
    """The ``recovery_action`` label named a kind the executor does not know."""

    def __init__(self, action: RecoveryAction) -> None:
        super().__init__(action, f"unknown recovery action: {action.kind!r}")


class ReplicaCeilingError(RecoveryError):
    """Scaling up would exceed the configured replica ceiling."""

    def __init__(self, action: RecoveryAction, current: int, ceiling: int) -> None:
        super().__init__(action, f"replica ceiling reached: current={current}, max={ceiling}")
        self.current = current
        self.ceiling = ceiling
