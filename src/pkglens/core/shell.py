"""Asynchronous execution of package manager commands."""

from __future__ import annotations

import asyncio
import os
import time
from typing import Iterable, Optional

from pkglens.core.errors import CommandTimeoutError, ExecutionError
from pkglens.core.logging import get_logger

log = get_logger(__name__)

ENV_OVERRIDES = {
    "LANG": "C",
    "LC_ALL": "C",
}

OUTPUT_PREVIEW_CHARS = 500


def command_env() -> dict[str, str]:
    """Environment for child processes with a stable, untranslated locale."""
    env = os.environ.copy()
    env.update(ENV_OVERRIDES)
    return env


async def run_capture(
    *cmd: str, timeout: Optional[float] = None
) -> tuple[str, int]:
    """Run a command and capture stdout and stderr merged in emission order.

    Args:
        *cmd: Command and its arguments to run.
        timeout: Seconds to wait before killing the process. None waits forever.

    Returns:
        A tuple of (output, returncode).

    Raises:
        ExecutionError: If the executable cannot be launched.
        CommandTimeoutError: If the command times out.
    """
    command = " ".join(cmd)
    start = time.perf_counter()
    log.debug("command_start", command=command, timeout=timeout)

    try:
        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT,
            env=command_env(),
        )
    except OSError as e:
        log.error("command_launch_failed", command=command, error=str(e))
        raise ExecutionError(command=command, error=str(e)) from e

    try:
        out, _ = await asyncio.wait_for(process.communicate(), timeout)
    except asyncio.TimeoutError as e:
        duration_ms = int((time.perf_counter() - start) * 1000)
        log.error(
            "command_timeout",
            command=command,
            timeout=timeout,
            duration_ms=duration_ms
        )
        await _reap(process)
        raise CommandTimeoutError(
            command=command,
            timeout=timeout,
            context={"duration_ms": duration_ms}
        ) from e
    except asyncio.CancelledError:
        log.warning("command_cancelled", command=command)
        await _reap(process)
        raise

    duration_ms = int((time.perf_counter() - start) * 1000)
    log.info(
        "command_complete",
        command=command,
        returncode=process.returncode,
        duration_ms=duration_ms
    )

    return out.decode("utf-8", errors="replace"), process.returncode


async def run(
    *cmd: str, timeout: Optional[float] = None, ok_codes: Iterable[int] = (0,)
) -> str:
    """Run a command and return its combined output.

    Args:
        *cmd: Command and its arguments to run.
        timeout: Seconds to wait before killing the process. None waits forever.
        ok_codes: Exit codes that count as success.

    Returns:
        Combined stdout and stderr.

    Raises:
        ExecutionError: If the command cannot be launched or exits with
            a code outside ``ok_codes``.
    """
    out, code = await run_capture(*cmd, timeout=timeout)

    if code not in tuple(ok_codes):
        command = " ".join(cmd)
        log.error(
            "command_failed",
            command=command,
            returncode=code,
            error=out[:OUTPUT_PREVIEW_CHARS]
        )
        raise ExecutionError(
            command=command,
            returncode=code,
            error=out.strip()[:OUTPUT_PREVIEW_CHARS]
        )

    return out


async def _reap(process: asyncio.subprocess.Process) -> None:
    """Kill a child that is still running and wait for it to exit."""
    if process.returncode is None:
        try:
            process.kill()
        except ProcessLookupError:
            pass
    await process.wait()
