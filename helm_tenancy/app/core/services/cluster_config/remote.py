"""Cluster configuration fetched from the credential service on every call."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, override

import httpx
import yaml
from loguru import logger

from helm_tenancy.app.core.errors import ConfigResolutionError
from helm_tenancy.app.core.models import ClusterConfig
from helm_tenancy.app.core.services.cluster_config.base import (
    ClusterConfigResolver,
    extract_credentials,
    render_kubeconfig,
)


class RemoteClusterConfigResolver(ClusterConfigResolver):
    """Resolves credentials with a synchronous round trip per operation.

    The fetched bundle is still rendered to a kubeconfig file so the
    Kubernetes client can address the cluster, but it is overwritten on every
    resolution and never read back. Commands address the cluster with
    explicit API server and token flags.
    """

    def __init__(
        self,
        service_url: str,
        cache_dir: Path,
        *,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the remote resolver.

        Args:
            service_url: Base URL of the cluster credential service
            cache_dir: Directory where rendered kubeconfig files are written
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests use MockTransport)
        """
        super().__init__(cache_dir)
        self.service_url = service_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    @override
    async def resolve(self, release_name: str) -> ClusterConfig:
        document = await self.fetch(release_name)
        server, token = extract_credentials(document)
        path = self.write_kubeconfig(release_name, render_kubeconfig(document, release_name))
        return ClusterConfig(
            server=server,
            token=token,
            document=document,
            kubeconfig_path=path,
            use_kubeconfig_flag=False,
        )

    async def fetch(self, release_name: str) -> dict[str, Any]:
        """Fetch the credential bundle for a release from the service.

        Raises:
            ConfigResolutionError: If the service is unreachable, answers with
                an error status, or returns something that is not a document
        """
        logger.info(f"Fetching cluster configuration for release {release_name}")
        try:
            async with httpx.AsyncClient(
                base_url=self.service_url,
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                response = await client.get(
                    "/clusterConfig", params={"releaseName": release_name}
                )
        except httpx.HTTPError as e:
            raise ConfigResolutionError(
                f"Cluster configuration service unreachable: {e}", details=str(e)
            ) from e

        if response.status_code == 404:
            raise ConfigResolutionError(
                f"No cluster configuration found for release {release_name}"
            )
        if response.is_error:
            raise ConfigResolutionError(
                f"Cluster configuration service returned HTTP {response.status_code}",
                details=response.text[:2000],
            )

        document = _parse_document(response.text)
        if not document:
            raise ConfigResolutionError(
                f"No cluster configuration found for release {release_name}"
            )
        return document


def _parse_document(body: str) -> dict[str, Any] | None:
    """Parse a JSON credential bundle or a YAML kubeconfig document."""
    try:
        parsed = json.loads(body)
    except json.JSONDecodeError:
        try:
            parsed = yaml.safe_load(body)
        except yaml.YAMLError as e:
            raise ConfigResolutionError(
                "Cluster configuration service returned an unreadable document"
            ) from e

    if parsed is None:
        return None
    if not isinstance(parsed, dict):
        raise ConfigResolutionError(
            "Cluster configuration service returned an unreadable document"
        )
    return parsed
