from __future__ import annotations

from dataclasses import dataclass

from deploy.core.config import ConfigError
from deploy.core.manifest import ManifestInvalid, ManifestUnreadable, ReleaseFileMissing
from deploy.core.solution import SolutionNotFound
from deploy.core.version import VersionTagInvalid
from deploy.platform.files import FileOpError
from deploy.platform.process import ProcessError
from deploy.services.approval import ApprovalTimedOut
from deploy.services.http import HttpError
from deploy.services.plans import UnsupportedPlatform


@dataclass(frozen=True, slots=True)
class ConfigMissing:
    """Required settings are empty for the selected platform."""

    keys: tuple[str, ...]

    def __str__(self) -> str:
        return f"Missing required settings: {', '.join(self.keys)}"


DeployError = (
    ConfigError
    | ConfigMissing
    | SolutionNotFound
    | UnsupportedPlatform
    | VersionTagInvalid
    | ProcessError
    | FileOpError
    | HttpError
    | ApprovalTimedOut
    | ManifestInvalid
    | ManifestUnreadable
    | ReleaseFileMissing
)
