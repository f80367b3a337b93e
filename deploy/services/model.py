from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path

from deploy.output.console import Stopwatch
from deploy.platform.detection import Platform

STAGING_DIRNAME = "staging"
RELEASES_DIRNAME = "releases"


class Stage(StrEnum):
    """Pipeline states, in order. FATAL is reachable from any of them."""

    INIT = "init"
    DIRECTORY_CHECK = "directory-check"
    VERSION_RESOLVED = "version-resolved"
    STAGED = "staged"
    PLATFORM_BUILD = "platform-build"
    VERIFIED = "verified"
    DONE = "done"
    FATAL = "fatal"


@dataclass(frozen=True, slots=True)
class DeployRequest:
    """What the operator asked for."""

    invocation_dir: Path
    platform: Platform
    interactive: bool
    explicit_version: str | None = None
    last_tag: str | None = None
    dry_run: bool = False


@dataclass(frozen=True, slots=True)
class RunContext:
    """State threaded through one run.

    Created once the solution root is known; `version` is filled in after
    resolution with dataclasses.replace.
    """

    solution_root: Path
    invocation_dir: Path
    platform: Platform
    stopwatch: Stopwatch
    interactive: bool
    version: str = ""
    last_tag: str | None = None

    @property
    def staging_dir(self) -> Path:
        return self.invocation_dir / STAGING_DIRNAME

    @property
    def releases_dir(self) -> Path:
        return self.invocation_dir / RELEASES_DIRNAME
