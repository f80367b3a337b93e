"""Error presentation utilities.

Centralized fatal-error formatting and exit code mapping.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from deploy.core.config import ConfigError
from deploy.core.errors import ErrorCode
from deploy.core.manifest import ManifestInvalid, ManifestUnreadable, ReleaseFileMissing
from deploy.core.solution import SolutionNotFound
from deploy.core.version import VersionTagInvalid
from deploy.output.console import Style
from deploy.platform.files import FileOpError
from deploy.platform.process import ProcessError
from deploy.services.approval import ApprovalTimedOut
from deploy.services.errors import ConfigMissing, DeployError
from deploy.services.http import HttpError
from deploy.services.plans import UnsupportedPlatform

if TYPE_CHECKING:
    from deploy.output.console import ConsoleProtocol

__all__ = ["deploy_error_exit_code", "print_deploy_error"]


def print_deploy_error(error: DeployError, console: ConsoleProtocol) -> None:
    """Print a fatal error with a hint where one helps."""
    console.error(str(error))
    match error:
        case ConfigMissing():
            console.print("hint: set them in deploy.toml (or DEPLOY_* variables)", Style.DIM)
        case ConfigError(path=path) if path is not None:
            console.print(f"config: {path}", Style.DIM)
        case SolutionNotFound(searched_from=searched_from):
            console.print(f"searched from: {searched_from}", Style.DIM)
        case ProcessError(returncode=-1, stderr=stderr):
            console.print(f"could not run command: {stderr.strip()}", Style.DIM)
        case _:
            pass


def deploy_error_exit_code(error: DeployError) -> int:
    """Get the exit code for a fatal error."""
    match error:
        case ConfigError() | ConfigMissing() | SolutionNotFound() | UnsupportedPlatform():
            return int(ErrorCode.ENV_ERROR)
        case ProcessError() | ApprovalTimedOut():
            return int(ErrorCode.BUILD_ERROR)
        case HttpError():
            return int(ErrorCode.NETWORK_ERROR)
        case FileOpError():
            return int(ErrorCode.IO_ERROR)
        case VersionTagInvalid() | ManifestInvalid() | ManifestUnreadable() | ReleaseFileMissing():
            return int(ErrorCode.VERIFY_ERROR)
    return int(ErrorCode.BUILD_ERROR)
