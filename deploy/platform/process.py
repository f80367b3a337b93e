"""External command execution with Result-based error handling.

One call spawns exactly one process (no shell), captures stdout and stderr
in full, waits for exit and reports success or a ProcessError.

Usage:
    result = run("dotnet", ["--info"], cwd=Path("."))
    match result:
        case Ok(output):
            ...
        case Err(error):
            print(error.output)
"""

from __future__ import annotations

import subprocess
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from deploy.core.result import Err, Ok, Result

__all__ = ["CommandRunner", "ProcessError", "format_command", "run"]


def format_command(command: str, args: Sequence[str]) -> str:
    """Render a command line for display (not for execution)."""
    return " ".join([command, *args])


@dataclass(frozen=True, slots=True)
class ProcessError:
    """A command exited non-zero or could not be started.

    Attributes:
        command: The executable that was run.
        args: Arguments passed to it.
        returncode: Exit code, or -1 if the process never started or timed out.
        stdout: Captured standard output.
        stderr: Captured standard error (or the spawn error message).
    """

    command: str
    args: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    @property
    def output(self) -> str:
        """Combined captured output, stdout first."""
        return self.stdout + self.stderr

    def __str__(self) -> str:
        return f"Command {format_command(self.command, self.args)} failed!"


class CommandRunner(Protocol):
    """Signature shared by `run` and the fakes used in tests."""

    def __call__(
        self, command: str, args: Sequence[str], cwd: Path
    ) -> Result[str, ProcessError]: ...


def run(
    command: str,
    args: Sequence[str],
    cwd: Path,
    env: dict[str, str] | None = None,
    *,
    timeout: float | None = None,
) -> Result[str, ProcessError]:
    """Run a command to completion and return its combined output.

    Both pipes are drained together by `communicate()` (reader threads on
    Windows, a selector loop elsewhere) before the exit code is collected,
    so a child that fills one pipe while we wait on the other cannot
    deadlock us.

    Args:
        command: Executable name or path.
        args: Arguments, passed through without shell interpretation.
        cwd: Working directory for the process.
        env: Environment variables (uses current env if None).
        timeout: Maximum seconds to wait. None waits forever.

    Returns:
        Ok(stdout + stderr) on exit code 0, Err(ProcessError) otherwise.
    """
    argv = [command, *args]
    try:
        proc = subprocess.Popen(
            argv,
            cwd=str(cwd),
            env=env,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="replace",
        )
    except OSError as e:
        return Err(
            ProcessError(
                command=command,
                args=tuple(args),
                returncode=-1,
                stdout="",
                stderr=str(e),
            )
        )

    try:
        stdout, stderr = proc.communicate(timeout=timeout)
    except subprocess.TimeoutExpired:
        proc.kill()
        stdout, stderr = proc.communicate()
        return Err(
            ProcessError(
                command=command,
                args=tuple(args),
                returncode=-1,
                stdout=stdout or "",
                stderr=(stderr or "") + f"Command timed out after {timeout}s",
            )
        )

    if proc.returncode != 0:
        return Err(
            ProcessError(
                command=command,
                args=tuple(args),
                returncode=proc.returncode,
                stdout=stdout or "",
                stderr=stderr or "",
            )
        )

    return Ok((stdout or "") + (stderr or ""))
