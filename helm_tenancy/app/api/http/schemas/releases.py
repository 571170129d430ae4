"""Pydantic schemas for release lifecycle endpoints.

Field names on the wire are camelCase (``releaseName``, ``chartName``...),
as the existing clients of this API send and expect them. Every request
field, and the install/upgrade body itself, is optional at the schema
level: missing identifiers are reported by the release service, and
malformed bodies by the application's validation handler, both in the
failure envelope.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from helm_tenancy.app.core.models import (
    ConnectionBundle,
    DeploymentState,
    InstallResult,
    ReadinessVerdict,
    Release,
    ServiceEntry,
)


class ApiModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# =============================================================================
# Request Models
# =============================================================================


class ReleaseRequest(ApiModel):
    """Request model for install and upgrade.

    Example:
        ```json
        {
            "chartName": "acme/app",
            "releaseName": "tenant-42",
            "privateChartsRepo": "https://charts.acme.example",
            "values": {"replicas": 3, "image.tag": "v2"},
            "flags": {"timeout": "5m0s", "wait": true},
            "reuseValue": "true"
        }
        ```
    """

    chart_name: str | None = Field(default=None, alias="chartName")
    release_name: str | None = Field(default=None, alias="releaseName")
    private_charts_repo: str | None = Field(default=None, alias="privateChartsRepo")
    values: dict[str, Any] | None = Field(
        default=None,
        description="Value overrides, one --set per key",
    )
    flags: dict[str, Any] | None = Field(
        default=None,
        description="Extra package manager flags, one --key value per entry",
    )
    reuse_value: Any = Field(
        default=None,
        alias="reuseValue",
        description="'true', '1' or 'on' reuses the values of the previous release",
    )

    def to_release(self) -> Release:
        return Release(
            release_name=self.release_name,
            chart_name=self.chart_name,
            private_charts_repo=self.private_charts_repo,
            values=dict(self.values or {}),
            flags=dict(self.flags or {}),
            reuse_value=self.reuse_value,
        )


class ReleaseNameBody(ApiModel):
    """Optional JSON body of POST /delete and POST /uninstall."""

    release_name: str | None = Field(default=None, alias="releaseName")


# =============================================================================
# Response Models
# =============================================================================


class InstallResponse(ApiModel):
    status: Literal["success"] = "success"
    release_name: str = Field(alias="releaseName")
    service_name: str | None = Field(default=None, alias="serviceName")
    release_status: str | None = Field(default=None, alias="releaseStatus")
    message: str = ""

    @classmethod
    def from_result(cls, result: InstallResult) -> InstallResponse:
        return cls(
            release_name=result.release_name,
            service_name=result.service_name,
            release_status=result.status,
            message=result.message,
        )


class SuccessResponse(ApiModel):
    status: Literal["success"] = "success"
    release_name: str | None = Field(default=None, alias="releaseName")


class StatusResponse(ApiModel):
    """Verdict of GET /status.

    ``status`` is ``success`` once every workload is ready, ``inprogress``
    while the release or its workloads are still coming up, and ``failed``
    when the package manager reports a terminal state.
    """

    status: Literal["success", "inprogress", "failed"]
    message: str

    @classmethod
    def from_verdict(cls, verdict: ReadinessVerdict) -> StatusResponse:
        return cls(status=verdict.status.value, message=verdict.message)


class DeployedResponse(ApiModel):
    status: Literal["success"] = "success"
    release_name: str = Field(alias="releaseName")
    deployed: bool
    state: str
    release_status: str = Field(alias="releaseStatus")
    description: str = ""

    @classmethod
    def from_state(cls, state: DeploymentState) -> DeployedResponse:
        return cls(
            release_name=state.release_name,
            deployed=state.deployed,
            state=state.state,
            release_status=state.raw_status,
            description=state.description,
        )


class SecretModel(ApiModel):
    name: str
    data: dict[str, str] = Field(default_factory=dict)


class ServiceModel(ApiModel):
    name: str
    metadata: dict[str, Any] = Field(default_factory=dict)
    spec: dict[str, Any] = Field(default_factory=dict)
    status: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_entry(cls, entry: ServiceEntry) -> ServiceModel:
        return cls(name=entry.name, metadata=entry.metadata, spec=entry.spec, status=entry.status)


class ConnectionDetailsResponse(ApiModel):
    """Secrets and services a client needs to reach a release."""

    secrets: list[SecretModel] = Field(default_factory=list)
    services: list[ServiceModel] = Field(default_factory=list)

    @classmethod
    def from_bundle(cls, bundle: ConnectionBundle) -> ConnectionDetailsResponse:
        return cls(
            secrets=[SecretModel(name=s.name, data=s.data) for s in bundle.secrets],
            services=[ServiceModel.from_entry(s) for s in bundle.services],
        )


class ServicesResponse(ApiModel):
    status: Literal["success"] = "success"
    services: list[ServiceModel] = Field(default_factory=list)


# =============================================================================
# Error Response Models
# =============================================================================


class FailureResponse(ApiModel):
    """Uniform failure envelope returned with HTTP 500."""

    status: Literal["failed"] = "failed"
    reason: str = Field(description="Human-readable failure reason")
