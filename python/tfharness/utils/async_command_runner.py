"""
tfharness/utils/async_command_runner.py

Provides an asynchronous command runner for the Terraform CLI. Optionally accepts
an error_parser callback that inspects stderr of a failed command and returns a
more specific exception to raise (e.g. a missing-variable error) instead of the
generic CommandError.

Commands are never retried: a failing apply is a real failure, so the caller sees
the first error. Output is returned exactly as the process wrote it.

Usage example:
    from tfharness.utils.async_command_runner import run_command, CommandError

    try:
        output = await run_command(["terraform", "version"], cwd=module_dir)
    except CommandError as err:
        print(f"Command failed: {err.stderr}")
"""

from __future__ import annotations

import asyncio
import logging
import os
from typing import Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


class CommandError(Exception):
    """Represents a failure when executing a shell command.

    Attributes:
        message (str): The error message describing the command failure.
        return_code (Optional[int]): The exit code if available.
        stdout (str): Captured standard output, possibly empty.
        stderr (str): Captured standard error, possibly empty.
    """

    def __init__(
        self,
        message: str,
        return_code: Optional[int] = None,
        stdout: str = "",
        stderr: str = "",
    ) -> None:
        """
        Initialize a CommandError.

        Args:
            message (str): The error message describing the command failure.
            return_code (Optional[int]): The exit code if known.
            stdout (str): Captured standard output.
            stderr (str): Captured standard error.
        """
        super().__init__(message)
        self.return_code = return_code
        self.stdout = stdout
        self.stderr = stderr


def _build_env(
    env: Optional[Dict[str, str]], suppress_env_vars: Optional[List[str]]
) -> Optional[Dict[str, str]]:
    if env is None and not suppress_env_vars:
        return None
    proc_env = os.environ.copy()
    for var in suppress_env_vars or []:
        proc_env.pop(var, None)
    if env:
        proc_env.update(env)
    return proc_env


async def _terminate(proc: asyncio.subprocess.Process) -> None:
    """Kill the process if it is still running and reap it."""
    if proc.returncode is None:
        try:
            proc.kill()
        except ProcessLookupError:
            pass
    await proc.wait()


async def run_command(
    command: List[str],
    *,
    sensitive: bool = True,
    env: Optional[Dict[str, str]] = None,
    cwd: Optional[str] = None,
    input_data: Optional[str] = None,
    successful_return_codes: List[int] = [0],
    suppress_env_vars: Optional[List[str]] = None,
    error_parser: Optional[Callable[[str], Optional[Exception]]] = None,
    timeout: Optional[float] = None,
) -> str:
    """
    Executes a local command in a subprocess, asynchronously, with an optional
    error parser callback.

    If the command fails (return code not in successful_return_codes) and
    `error_parser` is given, stderr is passed to it; a non-None exception it
    returns is raised as-is. Otherwise a CommandError is raised carrying the
    return code, stdout and stderr. When `sensitive=True`, the command, stdout
    and stderr are left out of the error *message* (they stay on the attributes).

    Args:
        command (List[str]):
            The command and arguments to execute.
        sensitive (bool):
            If True, hides command details in the raised error message.
        env (Optional[Dict[str, str]]):
            Additional environment variables to add or override.
        cwd (Optional[str]):
            Working directory for the command.
        input_data (Optional[str]):
            If provided, passed to stdin.
        successful_return_codes (List[int]):
            Which return codes won't be treated as errors. Defaults to [0].
        suppress_env_vars (Optional[List[str]]):
            A list of environment variables to remove from the environment.
        error_parser (Optional[Callable[[str], Optional[Exception]]]):
            Receives stderr of a failed command. A returned exception is raised
            in place of the generic CommandError.
        timeout (Optional[float]):
            Seconds to wait for the process. On expiry the process is killed and
            a CommandError with return_code None is raised.

    Returns:
        str: The captured stdout of the command on success.

    Raises:
        CommandError: If the command fails or times out.
        Exception: Whatever `error_parser` returns for a failed command.
    """
    stdin = asyncio.subprocess.PIPE if input_data else asyncio.subprocess.DEVNULL

    proc = await asyncio.create_subprocess_exec(
        *command,
        stdin=stdin,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
        env=_build_env(env, suppress_env_vars),
        cwd=cwd,
    )

    try:
        stdout_bytes, stderr_bytes = await asyncio.wait_for(
            proc.communicate(input=input_data.encode() if input_data else None),
            timeout=timeout,
        )
    except asyncio.TimeoutError:
        await _terminate(proc)
        logger.warning("Command %r timed out after %s seconds", command[0], timeout)
        raise CommandError(f"Command timed out after {timeout} seconds.", None)
    except BaseException:
        # Cancellation included: never leave the child running.
        await _terminate(proc)
        raise

    stdout_str = stdout_bytes.decode(errors="replace")
    stderr_str = stderr_bytes.decode(errors="replace")

    if proc.returncode not in successful_return_codes:
        if error_parser:
            parsed = error_parser(stderr_str)
            if parsed is not None:
                raise parsed

        detail = ""
        if not sensitive:
            detail = (
                f"\nCommand: {' '.join(command)}"
                f"\nStdout: {stdout_str.strip()}"
                f"\nStderr: {stderr_str.strip()}"
            )

        raise CommandError(
            f"Command failed with return code {proc.returncode}.{detail}",
            proc.returncode,
            stdout=stdout_str,
            stderr=stderr_str,
        )

    return stdout_str
