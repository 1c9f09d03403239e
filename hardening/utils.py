"""Command execution utilities."""

import logging
import os
import subprocess
from typing import Callable, Dict, List, Optional

from .errors import ExecutionError

OPERATION_TIMEOUT: int = 60  # seconds

logger = logging.getLogger(__name__)

# Signature shared by run_command and the fakes used in tests.
Runner = Callable[..., subprocess.CompletedProcess]


def run_command(
    cmd: List[str],
    check: bool = True,
    capture_output: bool = True,
    input: Optional[str] = None,
    env: Optional[Dict[str, str]] = None,
    timeout: Optional[int] = OPERATION_TIMEOUT,
) -> subprocess.CompletedProcess:
    """
    Run a system command and return the completed process.

    Args:
        cmd: Argument vector; never passed through a shell.
        check: Raise ExecutionError when the command exits non-zero.
        capture_output: Capture stdout and stderr as text.
        input: Text written to the command's stdin.
        env: Extra environment variables merged over the current environment.
        timeout: Seconds before the command is abandoned.

    Returns:
        The CompletedProcess with text output.

    Raises:
        ExecutionError: If the command is missing, times out, or (with check)
            exits non-zero.
    """
    logger.debug(f"Running command: {' '.join(cmd)}")
    merged_env = None
    if env:
        merged_env = os.environ.copy()
        merged_env.update(env)

    try:
        result = subprocess.run(
            cmd,
            input=input,
            capture_output=capture_output,
            text=True,
            env=merged_env,
            timeout=timeout,
        )
    except FileNotFoundError as e:
        raise ExecutionError(f"Command not found: {cmd[0]}") from e
    except subprocess.TimeoutExpired as e:
        raise ExecutionError(
            f"Command timed out after {timeout} seconds: {' '.join(cmd)}"
        ) from e

    if check and result.returncode != 0:
        stderr = (result.stderr or "").strip() if capture_output else ""
        raise ExecutionError(
            f"Command failed with exit code {result.returncode}: {' '.join(cmd)}"
            + (f": {stderr}" if stderr else "")
        )
    return result

