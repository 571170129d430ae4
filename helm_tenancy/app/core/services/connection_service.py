"""Export of the secrets and services a client needs to reach a release."""

from __future__ import annotations

from typing import TYPE_CHECKING

from loguru import logger

from helm_tenancy.app.core.models import ConnectionBundle, SecretEntry, ServiceEntry

if TYPE_CHECKING:
    from helm_tenancy.infra.k8s import KubernetesController

OPAQUE_SECRET_TYPE = "Opaque"


class ResourceExporter:
    """Projects namespace secrets and services into a connection bundle.

    Only generic (``Opaque``) secrets are exported; service account tokens,
    TLS material and Helm release records are left out. Secret payloads are
    passed through exactly as the API returns them.
    """

    def __init__(self, controller: KubernetesController) -> None:
        self._controller = controller

    async def export_secrets_and_services(self, namespace: str) -> ConnectionBundle:
        """Collect the connection bundle for a namespace.

        Raises:
            ClusterQueryError: If a Kubernetes query fails
        """
        logger.info(f"Getting secrets and services for namespace {namespace}")
        secrets = await self.export_secrets(namespace)
        services = await self.export_services(namespace)
        return ConnectionBundle(secrets=secrets, services=services)

    async def export_secrets(self, namespace: str) -> list[SecretEntry]:
        return [
            SecretEntry(
                name=(secret.get("metadata") or {}).get("name", ""),
                data=dict(secret.get("data") or {}),
            )
            for secret in await self._controller.list_secrets(namespace)
            if secret.get("type") == OPAQUE_SECRET_TYPE
        ]

    async def export_services(self, namespace: str) -> list[ServiceEntry]:
        return [
            ServiceEntry(
                name=(service.get("metadata") or {}).get("name", ""),
                metadata=service.get("metadata") or {},
                spec=service.get("spec") or {},
                status=service.get("status") or {},
            )
            for service in await self._controller.list_services(namespace)
        ]
