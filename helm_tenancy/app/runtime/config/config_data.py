"""Typed configuration model loaded from config.yaml."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field

from helm_tenancy.infra.helm.types import DEFAULT_MAX_OUTPUT_BYTES


class AppSettings(BaseModel):
    """HTTP service settings."""

    environment: str = "development"
    host: str = "0.0.0.0"
    port: int = 4000


class HelmSettings(BaseModel):
    """Package-manager client settings."""

    binary: str = Field(default="helm", description="Path or name of the Helm binary")
    max_output_bytes: int = Field(default=DEFAULT_MAX_OUTPUT_BYTES, gt=0)
    timeout_seconds: float | None = Field(
        default=600.0,
        description="Maximum seconds a single Helm invocation may run",
    )


class ClusterConfigSettings(BaseModel):
    """Cluster credential service settings."""

    service_url: str = Field(
        default="http://localhost:8080",
        description="Base URL of the cluster credential service",
    )
    strategy: Literal["remote", "cached"] = Field(
        default="remote",
        description="'remote' fetches on every call, 'cached' reuses the local store",
    )
    cache_dir: Path = Field(
        default=Path("/tmp/helm-tenancy/kubeconfigs"),
        description="Directory holding rendered kubeconfig files",
    )
    timeout_seconds: float = 30.0


class LoggingSettings(BaseModel):
    level: str = "INFO"


class ConfigData(BaseModel):
    """Root configuration object (the ``config:`` section of config.yaml)."""

    app: AppSettings = Field(default_factory=AppSettings)
    helm: HelmSettings = Field(default_factory=HelmSettings)
    cluster_config: ClusterConfigSettings = Field(default_factory=ClusterConfigSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
