"""Data types for package-manager command results."""

from __future__ import annotations

from dataclasses import dataclass

__all__ = ["CommandResult", "DEFAULT_MAX_OUTPUT_BYTES"]

# Ceiling applied to each of stdout and stderr
DEFAULT_MAX_OUTPUT_BYTES = 2000 * 2000


@dataclass
class CommandResult:
    """Result of a command execution."""

    success: bool
    stdout: str = ""
    stderr: str = ""
    returncode: int = 0
