"""Cluster mutation clients.

Exports:
    ClusterClient -- abstract interface the recovery executor depends on.

The kubernetes-asyncio implementation lives in ``selfheal.cluster.kubernetes``
and is imported lazily by the application bootstrap.
"""

from selfheal.cluster.base import ClusterClient

__all__ = ["ClusterClient"]
