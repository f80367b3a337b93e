"""Release step descriptors.

A platform build is a fixed tuple of these plain values; StepExecutor is
the only code that gives them effect. Paths are absolute by the time a
step is built.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from deploy.platform.process import format_command
from deploy.services.hooks import HookName

__all__ = [
    "AwaitApproval",
    "CopyFile",
    "DeleteFile",
    "Download",
    "ExtractArchive",
    "InvokeHook",
    "MakeExecutable",
    "MoveFile",
    "Notice",
    "RunCommand",
    "SetMode",
    "Step",
    "VerifyManifest",
    "WorkDir",
    "describe",
]

# "solution": the checkout root. "invocation": where deploy was started.
WorkDir = Literal["solution", "invocation"]


@dataclass(frozen=True, slots=True)
class RunCommand:
    command: str
    args: tuple[str, ...]
    cwd: WorkDir = "solution"


@dataclass(frozen=True, slots=True)
class Notice:
    message: str


@dataclass(frozen=True, slots=True)
class ExtractArchive:
    archive: Path
    dest: Path


@dataclass(frozen=True, slots=True)
class CopyFile:
    src: Path
    dest: Path


@dataclass(frozen=True, slots=True)
class MoveFile:
    src: Path
    dest: Path


@dataclass(frozen=True, slots=True)
class DeleteFile:
    path: Path


@dataclass(frozen=True, slots=True)
class MakeExecutable:
    path: Path


@dataclass(frozen=True, slots=True)
class SetMode:
    path: Path
    mode: int
    recursive: bool = False


@dataclass(frozen=True, slots=True)
class Download:
    url: str
    dest: Path


@dataclass(frozen=True, slots=True)
class AwaitApproval:
    what: str
    expected_seconds: float
    timeout_seconds: float


@dataclass(frozen=True, slots=True)
class VerifyManifest:
    releases_dir: Path


@dataclass(frozen=True, slots=True)
class InvokeHook:
    hook: HookName


Step = (
    RunCommand
    | Notice
    | ExtractArchive
    | CopyFile
    | MoveFile
    | DeleteFile
    | MakeExecutable
    | SetMode
    | Download
    | AwaitApproval
    | VerifyManifest
    | InvokeHook
)


def describe(step: Step) -> str:
    """One-line human description of a step."""
    match step:
        case RunCommand(command=command, args=args):
            return f"Running {format_command(command, args)}..."
        case Notice(message=message):
            return message
        case ExtractArchive(archive=archive, dest=dest):
            return f"Extracting {archive} to {dest}..."
        case CopyFile(src=src, dest=dest):
            return f"Copying {src} to {dest}..."
        case MoveFile(src=src, dest=dest):
            return f"Moving {src} to {dest}..."
        case DeleteFile(path=path):
            return f"Deleting {path}..."
        case MakeExecutable(path=path):
            return f"Marking {path} executable..."
        case SetMode(path=path, mode=mode, recursive=recursive):
            flag = " (recursive)" if recursive else ""
            return f"Setting mode {mode:o} on {path}{flag}..."
        case Download(url=url, dest=dest):
            return f"Downloading {url} to {dest}..."
        case AwaitApproval(what=what):
            return f"Waiting for {what} to complete.."
        case VerifyManifest(releases_dir=releases_dir):
            return f"Verifying release files in {releases_dir}..."
        case InvokeHook(hook=hook):
            return f"Hook: {hook}"
