"""Blocking invocation of external build commands."""
from __future__ import annotations

import logging
import os
import signal
import subprocess
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

TIMEOUT_EXIT_CODE = 124
NOT_EXECUTABLE_EXIT_CODE = 126
NOT_FOUND_EXIT_CODE = 127


@dataclass(slots=True)
class CommandResult:
    """Outcome of a finished child process."""

    argv: Tuple[str, ...]
    returncode: int
    stdout: Optional[str]
    elapsed: float
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        return self.returncode == 0 and not self.timed_out


def _kill_group(process: subprocess.Popen) -> None:
    # The child leads its own session, so its pid is also the group id.
    if hasattr(os, "killpg"):
        try:
            os.killpg(process.pid, signal.SIGKILL)
        except ProcessLookupError:
            pass
    else:  # pragma: no cover - non-POSIX platforms
        process.kill()


def run_command(
    argv: Sequence[str],
    *,
    cwd: Path,
    env: Mapping[str, str] | None = None,
    capture: bool = False,
    timeout: float | None = None,
) -> CommandResult:
    """Run *argv* in *cwd* and wait for it to exit.

    With *capture* set, stdout is collected as UTF-8 text (undecodable bytes
    are replaced) while stderr stays attached to the terminal. Extra *env*
    entries are layered over ``os.environ``. The command runs in its own
    process group and a timeout kills the whole group.
    """

    command = tuple(str(part) for part in argv)
    child_env = None
    if env:
        child_env = dict(os.environ)
        child_env.update(env)
    logger.debug("Executing %s in %s", " ".join(command), cwd)
    start = time.monotonic()
    try:
        process = subprocess.Popen(
            command,
            cwd=str(cwd),
            env=child_env,
            stdout=subprocess.PIPE if capture else None,
            encoding="utf-8",
            errors="replace",
            start_new_session=True,
        )
    except OSError as exc:
        logger.error("Could not start %s in %s: %s", command[0], cwd, exc)
        returncode = (
            NOT_EXECUTABLE_EXIT_CODE if isinstance(exc, PermissionError) else NOT_FOUND_EXIT_CODE
        )
        return CommandResult(
            argv=command,
            returncode=returncode,
            stdout=None,
            elapsed=time.monotonic() - start,
        )

    with process:
        try:
            stdout, _ = process.communicate(timeout=timeout)
        except subprocess.TimeoutExpired:
            logger.error("Command %s timed out after %ss", " ".join(command), timeout)
            _kill_group(process)
            stdout, _ = process.communicate()
            return CommandResult(
                argv=command,
                returncode=TIMEOUT_EXIT_CODE,
                stdout=stdout,
                elapsed=time.monotonic() - start,
                timed_out=True,
            )
        except BaseException:
            _kill_group(process)
            raise
    return CommandResult(
        argv=command,
        returncode=process.returncode,
        stdout=stdout,
        elapsed=time.monotonic() - start,
    )


__all__ = [
    "CommandResult",
    "NOT_EXECUTABLE_EXIT_CODE",
    "NOT_FOUND_EXIT_CODE",
    "TIMEOUT_EXIT_CODE",
    "run_command",
]
