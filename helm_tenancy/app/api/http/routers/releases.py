"""Release lifecycle endpoints.

Endpoint Summary:
    POST        /install            - Install a chart as a new release
    PUT|POST    /upgrade            - Upgrade an existing release
    DELETE|POST /delete, /uninstall - Remove a release and its namespace
    GET         /status             - Lifecycle state plus workload readiness
    GET         /deployed           - Lifecycle state only
    GET         /connectionDetails  - Opaque secrets and services of the release
    GET         /services           - Services of the release

Failures raised by the release service are turned into the uniform
``{"status": "failed", "reason": ...}`` envelope by the application's
exception handler.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Body, Depends, Query

from helm_tenancy.app.api.http.deps import get_release_service
from helm_tenancy.app.api.http.schemas.releases import (
    ConnectionDetailsResponse,
    DeployedResponse,
    FailureResponse,
    InstallResponse,
    ReleaseNameBody,
    ReleaseRequest,
    ServiceModel,
    ServicesResponse,
    StatusResponse,
    SuccessResponse,
)
from helm_tenancy.app.core.services.release_service import ReleaseLifecycleService

router = APIRouter(tags=["releases"])

_FAILURE = {500: {"description": "The operation failed", "model": FailureResponse}}

ReleaseNameParam = Annotated[str | None, Query(alias="releaseName")]


# =============================================================================
# Install / Upgrade
# =============================================================================


@router.post(
    "/install",
    response_model=InstallResponse,
    responses=_FAILURE,
    summary="Install a chart",
)
async def install(
    request: ReleaseRequest | None = Body(default=None),
    service: ReleaseLifecycleService = Depends(get_release_service),
) -> InstallResponse:
    """Install ``chartName`` as ``releaseName`` in a namespace of the same name.

    Returns the name of the first Service of the release, if it has one.
    """
    result = await service.install((request or ReleaseRequest()).to_release())
    return InstallResponse.from_result(result)


@router.api_route(
    "/upgrade",
    methods=["PUT", "POST"],
    response_model=InstallResponse,
    responses=_FAILURE,
    summary="Upgrade a release",
)
async def upgrade(
    request: ReleaseRequest | None = Body(default=None),
    service: ReleaseLifecycleService = Depends(get_release_service),
) -> InstallResponse:
    result = await service.upgrade((request or ReleaseRequest()).to_release())
    return InstallResponse.from_result(result)


# =============================================================================
# Uninstall
# =============================================================================


@router.api_route(
    "/delete",
    methods=["DELETE", "POST"],
    response_model=SuccessResponse,
    responses=_FAILURE,
    summary="Uninstall a release",
)
@router.api_route(
    "/uninstall",
    methods=["DELETE", "POST"],
    response_model=SuccessResponse,
    responses=_FAILURE,
    summary="Uninstall a release",
)
async def uninstall(
    release_name: ReleaseNameParam = None,
    body: ReleaseNameBody | None = Body(default=None),
    service: ReleaseLifecycleService = Depends(get_release_service),
) -> SuccessResponse:
    """Remove a release, then delete its namespace.

    ``releaseName`` is read from the query string, or from the JSON body
    when the query string does not carry it.
    """
    name = release_name or (body.release_name if body else None)
    await service.uninstall(name)
    return SuccessResponse(release_name=name)


# =============================================================================
# Status
# =============================================================================


@router.get(
    "/status",
    response_model=StatusResponse,
    responses=_FAILURE,
    summary="Release status",
)
async def status(
    release_name: ReleaseNameParam = None,
    service: ReleaseLifecycleService = Depends(get_release_service),
) -> StatusResponse:
    """Report whether a release is provisioned.

    A ``failed`` verdict is still returned with HTTP 200: it describes the
    release, not a failure of the request.
    """
    verdict = await service.release_status(release_name)
    return StatusResponse.from_verdict(verdict)


@router.get(
    "/deployed",
    response_model=DeployedResponse,
    responses=_FAILURE,
    summary="Release lifecycle state",
)
async def deployed(
    release_name: ReleaseNameParam = None,
    service: ReleaseLifecycleService = Depends(get_release_service),
) -> DeployedResponse:
    state = await service.is_deployed(release_name)
    return DeployedResponse.from_state(state)


# =============================================================================
# Connection details
# =============================================================================


@router.get(
    "/connectionDetails",
    response_model=ConnectionDetailsResponse,
    responses=_FAILURE,
    summary="Connection details of a release",
)
async def connection_details(
    release_name: ReleaseNameParam = None,
    service: ReleaseLifecycleService = Depends(get_release_service),
) -> ConnectionDetailsResponse:
    bundle = await service.release_connection_details(release_name)
    return ConnectionDetailsResponse.from_bundle(bundle)


@router.get(
    "/services",
    response_model=ServicesResponse,
    responses=_FAILURE,
    summary="Services of a release",
)
async def services(
    release_name: ReleaseNameParam = None,
    service: ReleaseLifecycleService = Depends(get_release_service),
) -> ServicesResponse:
    entries = await service.release_services(release_name)
    return ServicesResponse(services=[ServiceModel.from_entry(e) for e in entries])
