"""Running command strings through a POSIX shell."""

import os
import subprocess
from typing import IO, Mapping, Optional, Union

from gh_wt.exceptions import CommandFailedError
from gh_wt.logging_config import get_logger

logger = get_logger(__name__)

# errexit, so a failing step inside a compound command fails the whole command
SHELL = ("/bin/sh", "-e", "-c")

Stream = Optional[Union[int, IO]]


def run_command(
    command: str,
    cwd: str,
    env: Optional[Mapping[str, str]] = None,
    stdin: Stream = None,
    stdout: Stream = None,
    stderr: Stream = None,
) -> None:
    """Parse and execute ``command`` in ``cwd``.

    Args:
        command: Shell command text
        cwd: Working directory
        env: Environment; the current process environment when None
        stdin, stdout, stderr: Streams to use; inherited when None

    Raises:
        CommandFailedError: If the shell cannot start or exits non-zero
    """
    environ = dict(os.environ if env is None else env)
    logger.debug(f"Running {command!r} in {cwd}")

    try:
        completed = subprocess.run(
            [*SHELL, command],
            cwd=cwd,
            env=environ,
            stdin=stdin,
            stdout=stdout,
            stderr=stderr,
            check=False,
        )
    except OSError as e:
        raise CommandFailedError(command, message=str(e)) from e

    if completed.returncode != 0:
        logger.debug(f"Command {command!r} exited with {completed.returncode}")
        raise CommandFailedError(command, completed.returncode)
