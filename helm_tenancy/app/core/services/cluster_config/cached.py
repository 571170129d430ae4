"""Cluster configuration persisted locally after the first fetch."""

from __future__ import annotations

from pathlib import Path
from typing import Any, override

import yaml
from loguru import logger

from helm_tenancy.app.core.errors import ConfigResolutionError
from helm_tenancy.app.core.models import ClusterConfig
from helm_tenancy.app.core.services.cluster_config.base import (
    ClusterConfigResolver,
    extract_credentials,
    render_kubeconfig,
)
from helm_tenancy.app.core.services.cluster_config.remote import (
    RemoteClusterConfigResolver,
)


class CachedClusterConfigResolver(ClusterConfigResolver):
    """Reuses a locally stored kubeconfig, fetching only when it is missing.

    Entries are keyed by release name and written atomically, so concurrent
    resolutions of different releases never interfere and a reader never sees
    a half-written file. Commands address the cluster with ``--kubeconfig``.
    """

    def __init__(self, remote: RemoteClusterConfigResolver) -> None:
        """Initialize the cached resolver.

        Args:
            remote: Resolver used when no local entry exists
        """
        super().__init__(remote.cache_dir)
        self._remote = remote

    @override
    async def resolve(self, release_name: str) -> ClusterConfig:
        path = self.kubeconfig_path(release_name)

        stored = self._read(path)
        if stored is not None:
            try:
                server, token = extract_credentials(stored)
            except ConfigResolutionError:
                logger.warning(f"Stored kubeconfig {path} is incomplete, fetching again")
            else:
                logger.debug(f"Using stored kubeconfig for release {release_name}")
                return self._cluster_config(server, token, stored, path)

        document = await self._remote.fetch(release_name)
        server, token = extract_credentials(document)
        kubeconfig = render_kubeconfig(document, release_name)
        path = self.write_kubeconfig(release_name, kubeconfig)
        logger.info(f"Stored kubeconfig for release {release_name} at {path}")
        return self._cluster_config(server, token, kubeconfig, path)

    @staticmethod
    def _read(path: Path) -> dict[str, Any] | None:
        if not path.is_file():
            return None
        try:
            loaded = yaml.safe_load(path.read_text())
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Unable to read stored kubeconfig {path}: {e}")
            return None
        return loaded if isinstance(loaded, dict) else None

    @staticmethod
    def _cluster_config(
        server: str, token: str, document: dict[str, Any], path: Path
    ) -> ClusterConfig:
        return ClusterConfig(
            server=server,
            token=token,
            document=document,
            kubeconfig_path=path,
            use_kubeconfig_flag=True,
        )
