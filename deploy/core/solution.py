"""Solution checkout detection.

The solution root is the directory holding `<solution_name>.sln`. It is
found by walking upward from the invocation directory; at every level a
known subdirectory (e.g. a checkout cloned next to the deploy tool) is
checked as well.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from .result import Err, Ok, Result

__all__ = [
    "SOLUTION_ROOT_ENV",
    "SolutionNotFound",
    "find_solution_root",
    "is_solution_root",
]

SOLUTION_ROOT_ENV = "DEPLOY_SOLUTION_ROOT"


@dataclass(frozen=True, slots=True)
class SolutionNotFound:
    """No directory holding the solution file was found."""

    solution_name: str
    searched_from: Path
    message: str = ""

    def __str__(self) -> str:
        if self.message:
            return self.message
        return f"Could not find {self.solution_name}.sln above {self.searched_from}"


def is_solution_root(path: Path, solution_name: str) -> bool:
    return (path / f"{solution_name}.sln").is_file()


def find_solution_root(
    start: Path,
    solution_name: str,
    *,
    subdir: str | None = None,
    env: Mapping[str, str] | None = None,
) -> Result[Path, SolutionNotFound]:
    """Locate the solution root.

    Detection order:
    1. $DEPLOY_SOLUTION_ROOT (must hold the solution file)
    2. start and each of its parents, checking `<dir>/<subdir>` too

    Returns:
        Ok(root) or Err(SolutionNotFound) once the filesystem root is passed.
    """
    environ = os.environ if env is None else env
    env_value = environ.get(SOLUTION_ROOT_ENV)
    if env_value:
        env_path = Path(env_value).expanduser().resolve()
        if is_solution_root(env_path, solution_name):
            return Ok(env_path)
        return Err(
            SolutionNotFound(
                solution_name=solution_name,
                searched_from=env_path,
                message=(
                    f"${SOLUTION_ROOT_ENV} is set to '{env_value}' "
                    f"but it does not contain {solution_name}.sln"
                ),
            )
        )

    search_start = start.resolve()
    for parent in (search_start, *search_start.parents):
        if is_solution_root(parent, solution_name):
            return Ok(parent)
        if subdir and is_solution_root(parent / subdir, solution_name):
            return Ok(parent / subdir)

    return Err(SolutionNotFound(solution_name=solution_name, searched_from=search_start))
