#!/usr/bin/env python3
"""
Bounded subprocess runner used for tool-version probes
(``node --version``, ``pnpm --version`` and friends).
"""

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence, Union

from nodemate.exceptions import CommandError, CommandTimeoutError

logger = logging.getLogger(__name__)

DEFAULT_PROBE_TIMEOUT = 5.0


@dataclass(frozen=True)
class CommandResult:
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


async def run_command(
    args: Sequence[str],
    timeout: float = DEFAULT_PROBE_TIMEOUT,
    cwd: Optional[Union[str, Path]] = None,
) -> CommandResult:
    """
    Run ``args`` without a shell and capture its output.

    Raises:
        CommandError: The executable is missing or cannot be started.
        CommandTimeoutError: The process did not finish within ``timeout``.
    """
    command = " ".join(args)
    try:
        process = await asyncio.create_subprocess_exec(
            *args,
            cwd=str(cwd) if cwd else None,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as exc:
        raise CommandError(
            f"Cannot run {command}: {exc}", command=command, original_error=exc
        ) from exc

    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except asyncio.TimeoutError as exc:
        process.kill()
        await process.wait()
        raise CommandTimeoutError(
            f"Command timed out after {timeout:g}s: {command}",
            command=command,
            timeout_seconds=timeout,
        ) from exc

    result = CommandResult(
        returncode=process.returncode if process.returncode is not None else -1,
        stdout=stdout.decode("utf-8", errors="replace").strip(),
        stderr=stderr.decode("utf-8", errors="replace").strip(),
    )
    logger.debug("%s -> %s", command, result.returncode)
    return result


async def probe_version(
    executable: str, timeout: float = DEFAULT_PROBE_TIMEOUT
) -> Optional[str]:
    """Return ``<executable> --version`` output, or None if it is unavailable."""
    try:
        result = await run_command([executable, "--version"], timeout=timeout)
    except CommandError as exc:
        logger.debug("Version probe failed for %s: %s", executable, exc)
        return None
    if not result.ok or not result.stdout:
        return None
    return result.stdout.splitlines()[0]
