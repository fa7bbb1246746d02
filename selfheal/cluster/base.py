"""Abstract cluster mutation client.

The engine depends only on this interface; KubernetesClusterClient is the
production implementation and tests substitute an in-memory fake.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from selfheal.models.actions import WorkloadRef


class ClusterClient(ABC):
    """Mutations the recovery executor can perform against the cluster.

    Implementations raise on failure; the executor wraps every call with a
    deadline and converts exceptions into MutationError.
    """

    @abstractmethod
    async def delete_pod(self, namespace: str, pod_name: str) -> None:
        """Delete a pod so that its owning controller recreates it."""

    @abstractmethod
    async def list_workloads(self, namespace: str, label_selector: str) -> list[WorkloadRef]:
        """List Deployments in *namespace* matching *label_selector*, in API order."""

    @abstractmethod
    async def patch_restart_annotation(self, namespace: str, workload_name: str, timestamp: str) -> None:
        """Set the pod-template restart annotation to *timestamp*."""

    @abstractmethod
    async def get_replica_count(self, namespace: str, workload_name: str) -> int | None:
        """Read desired replicas from the scale subresource (None when unset)."""

    @abstractmethod
    async def set_replica_count(self, namespace: str, workload_name: str, replicas: int) -> None:
        """Write desired replicas through the scale subresource."""

    async def close(self) -> None:  # noqa: B027
        """Release connections held by the client."""
