"""Kr8s-based implementation of KubernetesController.

Uses the kr8s library for native async Kubernetes operations against the
cluster described by a release's kubeconfig.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import kr8s
from kr8s.asyncio.objects import (
    Deployment,
    Namespace,
    PersistentVolumeClaim,
    Pod,
    Secret,
    Service,
    StatefulSet,
)
from loguru import logger

from helm_tenancy.app.core.errors import ClusterQueryError

from .controller import KubernetesController, Manifest


class Kr8sController(KubernetesController):
    """Kubernetes controller using kr8s library.

    One controller addresses one cluster. The kr8s API client is not cached
    on the instance because kr8s clients are tied to the event loop that was
    running when they were created.
    """

    def __init__(self, kubeconfig: Path | str) -> None:
        """Initialize the kr8s controller.

        Args:
            kubeconfig: Path to the kubeconfig of the target cluster
        """
        self.kubeconfig = str(kubeconfig)

    async def _get_api(self) -> Any:  # Returns kr8s._api.Api
        """Create the kr8s API client for this controller's cluster."""
        try:
            return await kr8s.asyncio.api(kubeconfig=self.kubeconfig)
        except Exception as e:
            raise ClusterQueryError(
                f"Unable to connect to the cluster: {e}", details=str(e)
            ) from e

    # =========================================================================
    # Namespace Operations
    # =========================================================================

    async def delete_namespace(self, namespace: str) -> None:
        """Delete a Kubernetes namespace and all its resources."""
        api = await self._get_api()
        try:
            ns = await Namespace.get(namespace, api=api)
            await ns.delete()
        except kr8s.NotFoundError as e:
            raise ClusterQueryError(f'namespace "{namespace}" not found') from e
        except Exception as e:
            raise ClusterQueryError(
                f'Failed to delete namespace "{namespace}": {e}', details=str(e)
            ) from e
        logger.info(f'namespace "{namespace}" deleted')

    # =========================================================================
    # Resource Listing
    # =========================================================================

    async def list_services(self, namespace: str) -> list[Manifest]:
        return await self._list(Service, namespace)

    async def list_pods(self, namespace: str) -> list[Manifest]:
        return await self._list(Pod, namespace)

    async def list_persistent_volume_claims(self, namespace: str) -> list[Manifest]:
        return await self._list(PersistentVolumeClaim, namespace)

    async def list_deployments(self, namespace: str) -> list[Manifest]:
        return await self._list(Deployment, namespace)

    async def list_statefulsets(self, namespace: str) -> list[Manifest]:
        return await self._list(StatefulSet, namespace)

    async def list_secrets(self, namespace: str) -> list[Manifest]:
        return await self._list(Secret, namespace)

    # =========================================================================
    # Helpers
    # =========================================================================

    async def _list(self, kind: Any, namespace: str) -> list[Manifest]:
        """List every object of ``kind`` in a namespace as raw manifests."""
        api = await self._get_api()
        try:
            return [
                dict(obj.raw) async for obj in kind.list(namespace=namespace, api=api)
            ]
        except Exception as e:
            raise ClusterQueryError(
                f"Failed to list {kind.__name__} in namespace {namespace}: {e}",
                details=str(e),
            ) from e
