"""Async subprocess helpers with a hard timeout."""

import asyncio

import structlog

logger = structlog.get_logger(__name__)


class CommandError(RuntimeError):
    """A spawned command failed, timed out or could not be started."""

    def __init__(self, command: str, message: str) -> None:
        super().__init__(f"{command}: {message}")
        self.command = command


async def run_command(*argv: str, timeout: float) -> str:
    """
    Run ``argv`` without a shell and return its stripped stdout.

    Non-zero exit, a missing executable and exceeding ``timeout`` all raise
    ``CommandError``. A child still running when the call times out or is
    cancelled is killed and reaped before the exception propagates.
    """
    command = argv[0]
    try:
        process = await asyncio.create_subprocess_exec(
            *argv,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        raise CommandError(command, f"could not start ({e})") from e

    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except TimeoutError as e:
        logger.warning("command_timeout", command=command, timeout_seconds=timeout)
        raise CommandError(command, f"timed out after {timeout:g}s") from e
    finally:
        # Cancellation by an outer timeout lands here too; never leave the child running.
        if process.returncode is None:
            process.kill()
            await asyncio.shield(process.wait())

    if process.returncode != 0:
        detail = stderr.decode(errors="replace").strip()[:200]
        logger.debug("command_failed", command=command, returncode=process.returncode)
        raise CommandError(command, f"exited with {process.returncode}: {detail}")

    return stdout.decode(errors="replace").strip()


async def run_powershell(script: str, timeout: float) -> str:
    return await run_command(
        "powershell", "-NoProfile", "-NonInteractive", "-Command", script, timeout=timeout
    )
