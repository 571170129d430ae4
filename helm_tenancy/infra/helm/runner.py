"""Command runner for executing the package-manager binary.

This module provides the async process execution used by the package-manager
gateway. Commands are always passed as an argument vector; no shell is
involved, so values supplied by callers cannot alter the command structure.
"""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Mapping, Sequence

from loguru import logger

from helm_tenancy.app.core.errors import ExecutionError

from .types import DEFAULT_MAX_OUTPUT_BYTES, CommandResult

_CHUNK_SIZE = 64 * 1024


class AsyncCommandRunner:
    """Low-level async command executor with consistent result handling.

    The runner never raises for a non-zero exit code; callers decide how to
    interpret ``CommandResult.success``. It raises ``ExecutionError`` only
    when the process cannot be started, when either output stream exceeds
    the configured ceiling, or when the timeout elapses.
    """

    def __init__(
        self,
        *,
        max_output_bytes: int = DEFAULT_MAX_OUTPUT_BYTES,
        timeout: float | None = None,
        env: Mapping[str, str] | None = None,
    ) -> None:
        """Initialize the command runner.

        Args:
            max_output_bytes: Maximum bytes accepted on each of stdout/stderr
            timeout: Seconds to wait for the process, or None to wait forever
            env: Optional environment for the child process
        """
        self.max_output_bytes = max_output_bytes
        self.timeout = timeout
        self._env = dict(env) if env is not None else None

    async def run(self, cmd: Sequence[str]) -> CommandResult:
        """Execute a command and return a structured result.

        Args:
            cmd: Command and arguments as a sequence

        Returns:
            CommandResult with success status, decoded output and return code

        Raises:
            ExecutionError: If the process cannot be spawned, overflows the
                output ceiling or times out
        """
        argv = list(cmd)
        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=self._env,
            )
        except OSError as e:
            raise ExecutionError(
                f"Failed to start '{argv[0]}': {e}", stderr=str(e)
            ) from e

        try:
            (stdout, stdout_overflow), (stderr, stderr_overflow) = await asyncio.wait_for(
                asyncio.gather(
                    self._drain(process, process.stdout),
                    self._drain(process, process.stderr),
                ),
                timeout=self.timeout,
            )
            returncode = await process.wait()
        except TimeoutError:
            self._kill(process)
            await process.wait()
            raise ExecutionError(
                f"'{argv[0]}' did not finish within {self.timeout} seconds"
            ) from None

        stderr_text = stderr.decode("utf-8", errors="replace")
        if stdout_overflow or stderr_overflow:
            logger.warning(
                f"Output of '{argv[0]}' exceeded {self.max_output_bytes} bytes, process killed"
            )
            raise ExecutionError(
                f"Output of '{argv[0]}' exceeded {self.max_output_bytes} bytes",
                stderr=stderr_text,
                returncode=returncode,
            )

        return CommandResult(
            success=returncode == 0,
            stdout=stdout.decode("utf-8", errors="replace"),
            stderr=stderr_text,
            returncode=returncode,
        )

    async def _drain(
        self,
        process: asyncio.subprocess.Process,
        stream: asyncio.StreamReader | None,
    ) -> tuple[bytes, bool]:
        """Read a stream to EOF, killing the process once the ceiling is hit."""
        if stream is None:
            return b"", False

        buffer = bytearray()
        while chunk := await stream.read(_CHUNK_SIZE):
            if len(buffer) + len(chunk) > self.max_output_bytes:
                self._kill(process)
                return bytes(buffer), True
            buffer.extend(chunk)
        return bytes(buffer), False

    @staticmethod
    def _kill(process: asyncio.subprocess.Process) -> None:
        if process.returncode is None:
            with contextlib.suppress(ProcessLookupError):
                process.kill()
