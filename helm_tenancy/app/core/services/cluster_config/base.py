"""Cluster configuration resolution interface and shared helpers.

A resolver turns a release name into the API endpoint and credential of the
cluster hosting that release. Two strategies exist: fetch remotely on every
call, or fetch once and reuse a locally persisted kubeconfig.
"""

from __future__ import annotations

import os
import re
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

import yaml
from loguru import logger

from helm_tenancy.app.core.errors import ConfigResolutionError, ValidationError
from helm_tenancy.app.core.models import ClusterConfig

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]")


class ClusterConfigResolver(ABC):
    """Abstract interface for cluster configuration resolution."""

    def __init__(self, cache_dir: Path) -> None:
        """Initialize the resolver.

        Args:
            cache_dir: Directory where rendered kubeconfig files are written
        """
        self.cache_dir = Path(cache_dir)

    @abstractmethod
    async def resolve(self, release_name: str) -> ClusterConfig:
        """Resolve the cluster access descriptor for a release.

        Args:
            release_name: Release whose cluster should be addressed

        Returns:
            ClusterConfig for the release's cluster

        Raises:
            ConfigResolutionError: If the credentials cannot be obtained
        """
        pass

    # =========================================================================
    # Local store
    # =========================================================================

    def kubeconfig_path(self, release_name: str) -> Path:
        """Path of the kubeconfig file kept for a release."""
        if not release_name or not release_name.strip():
            raise ValidationError("releaseName is required")
        safe_name = _UNSAFE_FILENAME_CHARS.sub("_", release_name.strip())
        if safe_name.startswith("."):
            safe_name = f"_{safe_name}"
        return self.cache_dir / f"{safe_name}.kubeconfig"

    def write_kubeconfig(self, release_name: str, kubeconfig: dict[str, Any]) -> Path:
        """Persist a kubeconfig atomically.

        The document is written to a temporary file in the same directory and
        then renamed over the target, so readers never observe a partial file.
        """
        target = self.kubeconfig_path(release_name)
        target.parent.mkdir(parents=True, exist_ok=True)

        fd, temp_name = tempfile.mkstemp(
            dir=target.parent, prefix=f".{target.stem}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w") as f:
                yaml.safe_dump(kubeconfig, f, default_flow_style=False, sort_keys=False)
            os.chmod(temp_name, 0o600)
            os.replace(temp_name, target)
        except BaseException:
            Path(temp_name).unlink(missing_ok=True)
            raise
        return target

    def forget(self, release_name: str) -> None:
        """Remove the kubeconfig kept for a release, if any."""
        path = self.kubeconfig_path(release_name)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Unable to remove stored kubeconfig {path}: {e}")
            return
        logger.debug(f"Removed stored kubeconfig for release {release_name}")


# =============================================================================
# Credential document helpers
# =============================================================================


def extract_credentials(document: Any) -> tuple[str, str]:
    """Return ``(server, token)`` from a kubeconfig-shaped document.

    Raises:
        ConfigResolutionError: If the document carries no server or token
    """
    try:
        server = document["clusters"][0]["cluster"]["server"]
        token = document["users"][0]["user"]["token"]
    except (KeyError, IndexError, TypeError) as e:
        raise ConfigResolutionError(
            "Cluster configuration has no API server or token mapping"
        ) from e

    if not server or not token:
        raise ConfigResolutionError(
            "Cluster configuration has no API server or token mapping"
        )
    return str(server), str(token)


def render_kubeconfig(document: dict[str, Any], release_name: str) -> dict[str, Any]:
    """Complete a credential bundle into a usable kubeconfig.

    Documents that already declare a current context are returned as is.
    Bare ``{clusters, users}`` bundles get names, a context scoped to the
    release namespace, and a current context.
    """
    if document.get("current-context") and document.get("contexts"):
        return document

    cluster_entry = document["clusters"][0]
    user_entry = document["users"][0]
    cluster_name = cluster_entry.get("name") or f"{release_name}-cluster"
    user_name = user_entry.get("name") or f"{release_name}-user"

    return {
        "apiVersion": "v1",
        "kind": "Config",
        "clusters": [{"name": cluster_name, "cluster": dict(cluster_entry["cluster"])}],
        "users": [{"name": user_name, "user": dict(user_entry["user"])}],
        "contexts": [
            {
                "name": release_name,
                "context": {
                    "cluster": cluster_name,
                    "user": user_name,
                    "namespace": release_name,
                },
            }
        ],
        "current-context": release_name,
    }
