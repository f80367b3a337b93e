"""Filesystem operations used by the release steps.

Each helper wraps one copy/move/delete/extract/chmod and turns OSError into
a FileOpError so the pipeline can stop on it like any other failed step.
"""

from __future__ import annotations

import os
import shutil
import stat
import zipfile
from dataclasses import dataclass
from pathlib import Path

from deploy.core.result import Err, Ok, Result

__all__ = [
    "FileOpError",
    "copy_file",
    "delete_file",
    "ensure_directory",
    "extract_zip",
    "make_executable",
    "move_file",
    "refresh_directory",
    "set_mode",
]

_EXEC_BITS = stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH


@dataclass(frozen=True, slots=True)
class FileOpError:
    """A filesystem operation failed.

    Attributes:
        operation: Short verb ("copy", "move", "delete", ...).
        path: The path the operation was acting on.
        message: OS error text.
    """

    operation: str
    path: Path
    message: str

    def __str__(self) -> str:
        return f"{self.operation} {self.path} failed: {self.message}"


def refresh_directory(path: Path) -> Result[Path, FileOpError]:
    """Delete a directory tree if present and recreate it empty."""
    try:
        if path.exists():
            shutil.rmtree(path)
        path.mkdir(parents=True)
    except OSError as e:
        return Err(FileOpError("refresh", path, str(e)))
    return Ok(path)


def ensure_directory(path: Path) -> Result[bool, FileOpError]:
    """Create a directory if missing. Ok(True) means it was just created."""
    if path.is_dir():
        return Ok(False)
    try:
        path.mkdir(parents=True)
    except OSError as e:
        return Err(FileOpError("create", path, str(e)))
    return Ok(True)


def copy_file(src: Path, dest: Path) -> Result[Path, FileOpError]:
    if not src.is_file():
        return Err(FileOpError("copy", src, "source file not found"))
    try:
        dest.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(src, dest)
    except OSError as e:
        return Err(FileOpError("copy", src, str(e)))
    return Ok(dest)


def move_file(src: Path, dest: Path, *, overwrite: bool = True) -> Result[Path, FileOpError]:
    if not src.is_file():
        return Err(FileOpError("move", src, "source file not found"))
    if dest.exists() and not overwrite:
        return Err(FileOpError("move", dest, "destination already exists"))
    try:
        dest.parent.mkdir(parents=True, exist_ok=True)
        os.replace(src, dest)
    except OSError:
        # os.replace cannot cross filesystems
        try:
            shutil.move(str(src), str(dest))
        except OSError as e:
            return Err(FileOpError("move", src, str(e)))
    return Ok(dest)


def delete_file(path: Path) -> Result[None, FileOpError]:
    """Delete a file. A file that is already gone is not an error."""
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        return Err(FileOpError("delete", path, str(e)))
    return Ok(None)


def extract_zip(archive: Path, dest: Path) -> Result[Path, FileOpError]:
    """Extract a zip archive into dest (created if missing)."""
    if not archive.is_file():
        return Err(FileOpError("extract", archive, "archive not found"))
    try:
        dest.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(archive) as zf:
            zf.extractall(dest)
    except (OSError, zipfile.BadZipFile) as e:
        return Err(FileOpError("extract", archive, str(e)))
    return Ok(dest)


def make_executable(path: Path) -> Result[Path, FileOpError]:
    """Add execute permission for user, group and others (chmod a+x)."""
    try:
        mode = path.stat().st_mode
        path.chmod(mode | _EXEC_BITS)
    except OSError as e:
        return Err(FileOpError("chmod", path, str(e)))
    return Ok(path)


def set_mode(path: Path, mode: int, *, recursive: bool = False) -> Result[Path, FileOpError]:
    """Set an exact permission mode, optionally on a whole tree (chmod -R)."""
    targets = [path]
    if recursive and path.is_dir():
        targets += sorted(path.rglob("*"))
    try:
        if not path.exists():
            raise FileNotFoundError(f"no such file or directory: {path}")
        for target in targets:
            if target.is_symlink():
                continue
            target.chmod(mode)
    except OSError as e:
        return Err(FileOpError("chmod", path, str(e)))
    return Ok(path)
