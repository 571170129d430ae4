"""Error taxonomy for release lifecycle operations.

Every failure raised by the core derives from ``ReleaseError`` so the HTTP
layer and the CLI can translate it into a uniform failure result with a
single handler. Nothing here is fatal to the process; each error is scoped
to the in-flight operation.
"""

from __future__ import annotations


class ReleaseError(Exception):
    """Base class for all release lifecycle failures."""

    def __init__(self, message: str, details: str | None = None):
        self.message = message
        self.details = details
        super().__init__(message)


class ValidationError(ReleaseError):
    """A required release or chart identifier is missing."""


class ConfigResolutionError(ReleaseError):
    """The cluster credential service is unreachable or has no mapping."""


class ExecutionError(ReleaseError):
    """The package manager could not be run or its invocation failed."""

    def __init__(
        self,
        message: str,
        stderr: str = "",
        returncode: int | None = None,
    ):
        self.stderr = stderr
        self.returncode = returncode
        super().__init__(message, details=stderr or None)


class PackageManagerError(ReleaseError):
    """The package manager ran but reported a non-success outcome."""


class InstallFailed(PackageManagerError):
    """An install finished in a terminal non-success state."""


class UpgradeFailed(PackageManagerError):
    """An upgrade finished in a terminal non-success state."""


class ClusterQueryError(ReleaseError):
    """A Kubernetes API call failed."""
