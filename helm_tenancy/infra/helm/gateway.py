"""Package-manager gateway.

Executes rendered Helm commands, surfaces process-level failures as
``ExecutionError`` and parses structured JSON output.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from loguru import logger

from helm_tenancy.app.core.errors import ExecutionError, PackageManagerError

from .commands import HelmCommand, build_repo_add, build_repo_update, build_version
from .types import CommandResult

if TYPE_CHECKING:
    from helm_tenancy.app.core.models import Release

    from .runner import AsyncCommandRunner

_INITIALIZED_VERSION: str | None = None


class PackageManagerGateway:
    """Runs Helm commands through an async command runner.

    Provides operations for:
    - Plain execution with failure translation
    - JSON execution for ``--output json`` commands
    - Chart source preparation (repository registration and refresh)
    """

    def __init__(self, runner: AsyncCommandRunner, binary: str = "helm") -> None:
        """Initialize the gateway.

        Args:
            runner: Command runner used to spawn the binary
            binary: Path or name of the Helm binary
        """
        self._runner = runner
        self.binary = binary

    async def execute(self, command: HelmCommand) -> CommandResult:
        """Execute a command, raising when it does not succeed.

        Raises:
            ExecutionError: If the process cannot run or exits non-zero
        """
        logger.debug(f"Executing: {command.redacted(self.binary)}")
        result = await self._runner.run(command.render(self.binary))
        if result.stderr:
            logger.debug(f"{' '.join(command.verb)} stderr: {result.stderr.strip()}")
        if not result.success:
            raise ExecutionError(
                result.stderr.strip()
                or f"helm {' '.join(command.verb)} exited with code {result.returncode}",
                stderr=result.stderr,
                returncode=result.returncode,
            )
        return result

    async def execute_json(self, command: HelmCommand) -> dict[str, Any]:
        """Execute a command and parse its stdout as a JSON object.

        Raises:
            ExecutionError: If the process cannot run or exits non-zero
            PackageManagerError: If stdout is not a JSON object
        """
        result = await self.execute(command)
        try:
            parsed = json.loads(result.stdout)
        except json.JSONDecodeError as e:
            raise PackageManagerError(
                f"helm {' '.join(command.verb)} returned malformed JSON",
                details=result.stdout[:2000],
            ) from e
        if not isinstance(parsed, dict):
            raise PackageManagerError(
                f"helm {' '.join(command.verb)} returned unexpected JSON",
                details=result.stdout[:2000],
            )
        return parsed

    async def prepare_chart_source(self, release: Release) -> None:
        """Make the release's chart resolvable before install or upgrade.

        When a private repository is named, it is registered under the
        chart's repository alias first. The known repositories are then
        refreshed. Either step failing aborts the lifecycle operation.
        """
        if release.private_charts_repo and release.chart_name:
            logger.info(
                f"Registering chart repository {release.private_charts_repo} "
                f"for {release.chart_name}"
            )
            await self.execute(
                build_repo_add(release.chart_name, release.private_charts_repo)
            )

        await self.execute(build_repo_update())

    async def initialize(self) -> str:
        """Verify the Helm client once per process.

        Idempotent: the first successful call records the client version and
        later calls return it without spawning the binary again.

        Returns:
            Helm client version string
        """
        global _INITIALIZED_VERSION
        if _INITIALIZED_VERSION is not None:
            return _INITIALIZED_VERSION

        result = await self.execute(build_version())
        _INITIALIZED_VERSION = result.stdout.strip() or "unknown"
        logger.info(f"Helm client initialized: {_INITIALIZED_VERSION}")
        return _INITIALIZED_VERSION


def package_manager_ready() -> bool:
    """Whether the Helm client has been initialized in this process."""
    return _INITIALIZED_VERSION is not None


def package_manager_version() -> str | None:
    return _INITIALIZED_VERSION


def reset_package_manager_state() -> None:
    """Forget the initialization state (used by tests)."""
    global _INITIALIZED_VERSION
    _INITIALIZED_VERSION = None
