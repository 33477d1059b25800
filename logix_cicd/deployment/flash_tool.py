"""
ControlFLASH Plus SDK wrapper

Runs the firmware flashing executable for one module and streams its output
line by line while it runs. The executable takes two positional arguments:
the module communication path and the target revision.
"""

import asyncio
import contextlib
import logging
from collections.abc import Sequence
from pathlib import Path

from logix_cicd.core.interfaces import LineCallback
from logix_cicd.deployment.exceptions import FlashToolError
from logix_cicd.deployment.models import FlashResult

logger = logging.getLogger(__name__)

_READ_CHUNK_SIZE = 64 * 1024


def _emit(raw: bytes, sink: list[str], callback: LineCallback | None) -> None:
    line = raw.decode("utf-8", errors="replace").rstrip("\r")
    if not line:
        return
    sink.append(line)
    if callback:
        callback(line)


async def _drain(stream: asyncio.StreamReader, sink: list[str], callback: LineCallback | None) -> None:
    """
    Read a pipe until EOF, keeping non-blank lines

    Reads fixed-size chunks and splits lines here, so a progress line of any
    length never hits the StreamReader line limit.
    """
    pending = bytearray()
    while True:
        chunk = await stream.read(_READ_CHUNK_SIZE)
        if not chunk:
            break
        pending.extend(chunk)
        *lines, rest = pending.split(b"\n")
        for raw in lines:
            _emit(bytes(raw), sink, callback)
        pending = bytearray(rest)

    if pending:
        _emit(bytes(pending), sink, callback)


class ControlFlashTool:
    """
    Invoke the ControlFLASH Plus SDK executable

    Example:
        tool = ControlFlashTool([settings.flash_tool_path])
        result = await tool.flash("AB_ETH-1\\192.168.1.10", "33.011", on_stdout=print)
        if not result.succeeded:
            ...
    """

    def __init__(self, command: Sequence[str | Path]):
        """
        Args:
            command: Executable (plus any leading arguments) to start
        """
        if not command:
            raise ValueError("command must name an executable")
        self.command = [str(part) for part in command]

    async def flash(
        self,
        comm_path: str,
        target_revision: str,
        on_stdout: LineCallback | None = None,
        on_stderr: LineCallback | None = None,
    ) -> FlashResult:
        """
        Verify and flash one module, blocking until the tool exits

        Args:
            comm_path: Module communication path
            target_revision: Firmware revision to flash
            on_stdout: Called with each stdout line as it arrives
            on_stderr: Called with each stderr line as it arrives

        Returns:
            FlashResult with the exit code and captured lines

        Raises:
            FlashToolError: If the executable cannot be started
        """
        argv = self.command + [comm_path, target_revision]
        logger.info(f"Running: {' '.join(argv)}")

        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except (FileNotFoundError, PermissionError) as e:
            raise FlashToolError(f"Cannot start flash tool '{self.command[0]}': {e}", command=argv)

        result = FlashResult(exit_code=-1)
        drains = [
            asyncio.ensure_future(_drain(process.stdout, result.stdout_lines, on_stdout)),
            asyncio.ensure_future(_drain(process.stderr, result.stderr_lines, on_stderr)),
        ]
        try:
            await asyncio.gather(*drains)
            result.exit_code = await process.wait()
        finally:
            for task in drains:
                task.cancel()
            if process.returncode is None:
                logger.warning(f"Stopping flash tool for {comm_path} before it exited")
                with contextlib.suppress(ProcessLookupError):
                    process.kill()
                await process.wait()

        if result.succeeded:
            logger.info(f"Flash tool finished for {comm_path}")
        else:
            logger.warning(f"Flash tool exited with code {result.exit_code} for {comm_path}")
        return result
