"""Previous release tag lookup."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from deploy.core.result import Err, Ok, Result
from deploy.platform.process import CommandRunner
from deploy.platform.process import run as run_process

__all__ = ["GitError", "latest_tag"]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git command that failed
        message: Error message
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1

    def __str__(self) -> str:
        return f"{self.command}: {self.message}"


def latest_tag(repo: Path, runner: CommandRunner = run_process) -> Result[str | None, GitError]:
    """Return the most recent tag reachable from HEAD.

    Ok(None) means the repository has no tags yet.
    """
    args = ("describe", "--tags", "--abbrev=0")
    result = runner("git", args, repo)
    if isinstance(result, Err):
        e = result.error
        message = (e.stderr or e.stdout).strip()
        if "no names found" in message.lower() or "cannot describe" in message.lower():
            return Ok(None)
        return Err(
            GitError(
                command="git " + " ".join(args),
                message=message or f"exit {e.returncode}",
                returncode=e.returncode,
            )
        )

    tag = result.value.strip().splitlines()
    return Ok(tag[0].strip() if tag else None)
