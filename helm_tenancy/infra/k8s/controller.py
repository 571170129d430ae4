"""Abstract Kubernetes controller interface.

Defines the namespace-scoped reads and the namespace deletion the release
services need. Implementations return raw resource manifests as plain
dictionaries so that readiness and export logic can be exercised without a
cluster.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

Manifest = dict[str, Any]


class KubernetesController(ABC):
    """Abstract base class for Kubernetes operations.

    All methods are async. Failures are raised as
    ``helm_tenancy.app.core.errors.ClusterQueryError``; implementations
    never return partial results for a failed call.
    """

    # =========================================================================
    # Namespace Operations
    # =========================================================================

    @abstractmethod
    async def delete_namespace(self, namespace: str) -> None:
        """Delete a namespace and everything in it.

        Args:
            namespace: Namespace to delete
        """
        ...

    # =========================================================================
    # Resource Listing
    # =========================================================================

    @abstractmethod
    async def list_services(self, namespace: str) -> list[Manifest]:
        """List Services in a namespace."""
        ...

    @abstractmethod
    async def list_pods(self, namespace: str) -> list[Manifest]:
        """List Pods in a namespace."""
        ...

    @abstractmethod
    async def list_persistent_volume_claims(self, namespace: str) -> list[Manifest]:
        """List PersistentVolumeClaims in a namespace."""
        ...

    @abstractmethod
    async def list_deployments(self, namespace: str) -> list[Manifest]:
        """List Deployments in a namespace."""
        ...

    @abstractmethod
    async def list_statefulsets(self, namespace: str) -> list[Manifest]:
        """List StatefulSets in a namespace."""
        ...

    @abstractmethod
    async def list_secrets(self, namespace: str) -> list[Manifest]:
        """List Secrets in a namespace."""
        ...
