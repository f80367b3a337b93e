"""Release manifest (`RELEASES`) parsing and verification.

Each line is `<hash> <filename> <filesize>`, separated by single spaces.
Filenames cannot contain spaces; there is no escaping.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path

from .result import Err, Ok, Result

__all__ = [
    "MANIFEST_FILENAME",
    "ManifestInvalid",
    "ManifestUnreadable",
    "ReleaseEntry",
    "ReleaseFileMissing",
    "parse_manifest",
    "parse_manifest_line",
    "read_manifest",
    "verify_manifest",
]

MANIFEST_FILENAME = "RELEASES"


@dataclass(frozen=True, slots=True)
class ReleaseEntry:
    """One artifact the release is expected to contain."""

    hash: str
    filename: str
    filesize: int

    def to_line(self) -> str:
        return f"{self.hash} {self.filename} {self.filesize}"

    def __str__(self) -> str:
        return self.to_line()


@dataclass(frozen=True, slots=True)
class ManifestInvalid:
    line_number: int
    line: str
    reason: str

    def __str__(self) -> str:
        return f"RELEASES line {self.line_number} is invalid ({self.reason}): {self.line!r}"


@dataclass(frozen=True, slots=True)
class ManifestUnreadable:
    path: Path
    message: str

    def __str__(self) -> str:
        return f"Cannot read release manifest {self.path}: {self.message}"


@dataclass(frozen=True, slots=True)
class ReleaseFileMissing:
    filename: str
    releases_dir: Path

    def __str__(self) -> str:
        return f"Local file missing {self.filename}"


def parse_manifest_line(line: str, line_number: int = 1) -> Result[ReleaseEntry, ManifestInvalid]:
    fields = line.split(" ")
    if len(fields) != 3:
        return Err(ManifestInvalid(line_number, line, f"expected 3 fields, got {len(fields)}"))

    hash_, filename, size = fields
    if not hash_ or not filename:
        return Err(ManifestInvalid(line_number, line, "empty field"))
    if not size.isdigit():
        return Err(ManifestInvalid(line_number, line, "filesize is not a non-negative integer"))

    return Ok(ReleaseEntry(hash=hash_, filename=filename, filesize=int(size)))


def parse_manifest(lines: Iterable[str]) -> Result[list[ReleaseEntry], ManifestInvalid]:
    """Parse manifest lines in order. Stops at the first bad line."""
    entries: list[ReleaseEntry] = []
    for number, line in enumerate(lines, start=1):
        parsed = parse_manifest_line(line, number)
        if isinstance(parsed, Err):
            return parsed
        entries.append(parsed.value)
    return Ok(entries)


def read_manifest(
    path: Path,
) -> Result[list[ReleaseEntry], ManifestInvalid | ManifestUnreadable]:
    """Read and parse a RELEASES file (UTF-8, optional BOM)."""
    try:
        text = path.read_text(encoding="utf-8-sig")
    except FileNotFoundError:
        return Err(ManifestUnreadable(path, "file not found"))
    except (OSError, UnicodeDecodeError) as e:
        return Err(ManifestUnreadable(path, str(e)))
    return parse_manifest(text.splitlines())


def verify_manifest(
    entries: Sequence[ReleaseEntry], releases_dir: Path
) -> Result[None, ReleaseFileMissing]:
    """Check every entry's file exists directly in releases_dir.

    Fails on the first missing file; the rest are not checked.
    """
    for entry in entries:
        if not (releases_dir / entry.filename).is_file():
            return Err(ReleaseFileMissing(entry.filename, releases_dir))
    return Ok(None)
