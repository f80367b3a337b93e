"""Release version resolution.

Versions look like `YYYY.Mdd.N`: year, month without padding followed by a
two-digit day, then an increment that restarts at 0 every new day.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from .result import Err, Ok, Result

__all__ = ["VersionTagInvalid", "resolve_version", "version_base"]


@dataclass(frozen=True, slots=True)
class VersionTagInvalid:
    """The previous tag shares today's prefix but its increment is unreadable."""

    tag: str

    def __str__(self) -> str:
        return f"Previous release tag is malformed: {self.tag}"


def version_base(now: datetime) -> str:
    """Date prefix of a version, e.g. 2024-03-15 -> "2024.315."."""
    return f"{now.year:04d}.{now.month}{now.day:02d}."


def _parse_increment(tag: str) -> int | None:
    parts = tag.split(".")
    if len(parts) != 3 or not parts[2].isdigit():
        return None
    return int(parts[2])


def resolve_version(
    now: datetime,
    last_tag: str | None,
    explicit_version: str | None = None,
    *,
    increment: bool = True,
) -> Result[str, VersionTagInvalid]:
    """Compute the version for this run.

    An explicit version is returned verbatim, without grammar checks. Otherwise
    the increment continues the previous tag when it was made the same day
    (or is reused when `increment` is False, to redeploy a failed release),
    and starts at 0 when there is no previous tag or its date differs.
    """
    if explicit_version:
        return Ok(explicit_version)

    base = version_base(now)
    number = 0
    if last_tag and last_tag.startswith(base):
        previous = _parse_increment(last_tag)
        if previous is None:
            return Err(VersionTagInvalid(last_tag))
        number = previous + 1 if increment else previous

    return Ok(f"{base}{number}")
