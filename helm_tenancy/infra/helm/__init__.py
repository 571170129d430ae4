"""Helm command construction and execution.

- commands: structured command builders for lifecycle intents
- runner: async process execution with an output ceiling
- gateway: execution with failure translation and JSON parsing

Usage:
    from helm_tenancy.infra.helm import AsyncCommandRunner, PackageManagerGateway

    gateway = PackageManagerGateway(AsyncCommandRunner(), binary="helm")
    response = await gateway.execute_json(build_status("tenant-42", cluster))
"""

from .commands import (
    HelmCommand,
    HelmIntent,
    build_command,
    build_install,
    build_repo_add,
    build_repo_update,
    build_status,
    build_uninstall,
    build_upgrade,
    build_version,
    is_truthy,
)
from .gateway import (
    PackageManagerGateway,
    package_manager_ready,
    package_manager_version,
)
from .runner import AsyncCommandRunner
from .types import DEFAULT_MAX_OUTPUT_BYTES, CommandResult

__all__ = [
    "AsyncCommandRunner",
    "CommandResult",
    "DEFAULT_MAX_OUTPUT_BYTES",
    "HelmCommand",
    "HelmIntent",
    "PackageManagerGateway",
    "build_command",
    "build_install",
    "build_repo_add",
    "build_repo_update",
    "build_status",
    "build_uninstall",
    "build_upgrade",
    "build_version",
    "is_truthy",
    "package_manager_ready",
    "package_manager_version",
]
