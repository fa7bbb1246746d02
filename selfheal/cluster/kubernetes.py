"""kubernetes-asyncio implementation of ClusterClient."""

from __future__ import annotations

from typing import Any

import structlog
from kubernetes_asyncio import client as k8s_client  # type: ignore[import-untyped]
from kubernetes_asyncio import config as k8s_config  # type: ignore[import-untyped]

from selfheal.cluster.base import ClusterClient
from selfheal.models.actions import WorkloadRef

_log = structlog.get_logger(component="cluster.kubernetes")

RESTART_ANNOTATION = "kubectl.kubernetes.io/restartedAt"


class KubernetesClusterClient(ClusterClient):
    """Talks to the Kubernetes API through CoreV1Api and AppsV1Api.

    Use :meth:`create` to build an instance with credentials loaded from the
    in-cluster service account, falling back to the local kubeconfig.
    """

    def __init__(self, api_client: Any) -> None:
        self._api_client = api_client
        self._core_v1 = k8s_client.CoreV1Api(api_client)
        self._apps_v1 = k8s_client.AppsV1Api(api_client)

    @classmethod
    async def create(cls) -> KubernetesClusterClient:
        """Load credentials and build a client.

        Raises ``kubernetes_asyncio.config.ConfigException`` when neither the
        in-cluster service account nor a kubeconfig is usable.
        """
        try:
            # load_incluster_config() is synchronous in kubernetes-asyncio
            k8s_config.load_incluster_config()
            _log.info("k8s client configured from in-cluster service account")
        except k8s_config.ConfigException:
            await k8s_config.load_kube_config()
            _log.info("k8s client configured from kubeconfig")
        return cls(k8s_client.ApiClient())

    async def delete_pod(self, namespace: str, pod_name: str) -> None:
        await self._core_v1.delete_namespaced_pod(name=pod_name, namespace=namespace)

    async def list_workloads(self, namespace: str, label_selector: str) -> list[WorkloadRef]:
        result = await self._apps_v1.list_namespaced_deployment(namespace=namespace, label_selector=label_selector)
        return [_to_workload_ref(item) for item in result.items or []]

    async def patch_restart_annotation(self, namespace: str, workload_name: str, timestamp: str) -> None:
        body = {"spec": {"template": {"metadata": {"annotations": {RESTART_ANNOTATION: timestamp}}}}}
        await self._apps_v1.patch_namespaced_deployment(name=workload_name, namespace=namespace, body=body)

    async def get_replica_count(self, namespace: str, workload_name: str) -> int | None:
        scale = await self._apps_v1.read_namespaced_deployment_scale(name=workload_name, namespace=namespace)
        if scale.spec is None:
            return None
        # replicas is omitempty on the wire: an absent value on a returned spec means 0.
        return scale.spec.replicas or 0

    async def set_replica_count(self, namespace: str, workload_name: str, replicas: int) -> None:
        body = {"spec": {"replicas": replicas}}
        await self._apps_v1.patch_namespaced_deployment_scale(name=workload_name, namespace=namespace, body=body)

    async def close(self) -> None:
        await self._api_client.close()


def _to_workload_ref(deployment: Any) -> WorkloadRef:
    metadata = deployment.metadata
    spec = deployment.spec
    return WorkloadRef(
        name=metadata.name,
        namespace=metadata.namespace,
        replicas=spec.replicas if spec is not None else None,
    )
