"""Subprocess helpers with command tracing.

Every external command bazelpin runs goes through run_command so that
BAZEL_VERSION_TRACE shows it on stderr.
"""

from __future__ import annotations

import shlex
import subprocess
from pathlib import Path
from typing import List, Mapping, Optional, Union

from bazelpin.core.logging import get_logger

LOGGER = get_logger(__name__)


def format_command(cmd: List[str]) -> str:
    """Render a command the way a shell trace would."""
    return " ".join(shlex.quote(part) for part in cmd)


def run_command(
    cmd: List[str],
    cwd: Optional[Union[str, Path]] = None,
    env: Optional[Mapping[str, str]] = None,
    input_text: Optional[str] = None,
    discard_stdout: bool = False,
    capture_output: bool = False,
) -> subprocess.CompletedProcess:
    """Run a command to completion and return its CompletedProcess.

    The exit status is never checked here; callers decide what a failure
    means for them.

    Args:
        cmd: Command and arguments to run.
        cwd: Working directory for the command.
        env: Full environment for the child. Inherits ours if None.
        input_text: Text written to the child's stdin.
        discard_stdout: Send stdout to /dev/null (stderr is still inherited).
        capture_output: Capture stdout and stderr as text.

    Returns:
        CompletedProcess for the finished command.

    Raises:
        OSError: If the command cannot be started.
    """
    LOGGER.debug(f"+ {format_command(cmd)}")

    if capture_output:
        stdout = subprocess.PIPE
        stderr = subprocess.PIPE
    else:
        stdout = subprocess.DEVNULL if discard_stdout else None
        stderr = None

    result = subprocess.run(
        cmd,
        cwd=str(cwd) if cwd is not None else None,
        env=dict(env) if env is not None else None,
        input=input_text,
        stdout=stdout,
        stderr=stderr,
        text=True,
        encoding="utf-8",
        errors="replace",
    )
    LOGGER.debug(f"{cmd[0]} exited with status {result.returncode}")
    return result
