"""Host platform detection.

The platform is selected once per run and decides which fixed step
sequence the pipeline executes.
"""

from __future__ import annotations

import sys as _sys
from enum import Enum, auto
from functools import lru_cache

__all__ = [
    "Platform",
    "detect_platform",
    "parse_platform",
]


class Platform(Enum):
    """Operating system the release is built on."""

    WINDOWS = auto()
    MACOS = auto()
    LINUX = auto()
    UNKNOWN = auto()

    def __str__(self) -> str:
        return self.name.lower()

    @property
    def is_supported(self) -> bool:
        return self != Platform.UNKNOWN

    @property
    def runtime_id(self) -> str:
        """dotnet runtime identifier used when publishing for this platform."""
        return {
            Platform.WINDOWS: "win-x64",
            Platform.MACOS: "osx-x64",
            Platform.LINUX: "linux-x64",
            Platform.UNKNOWN: "unknown",
        }[self]


@lru_cache(maxsize=1)
def detect_platform() -> Platform:
    """Detect the current operating system (cached)."""
    # NOTE: avoid platform.system() on Windows, it may query WMI.
    system = _sys.platform.lower()
    if system.startswith("linux"):
        return Platform.LINUX
    if system.startswith("darwin"):
        return Platform.MACOS
    if system.startswith(("win32", "cygwin", "msys")):
        return Platform.WINDOWS
    return Platform.UNKNOWN


def parse_platform(name: str) -> Platform | None:
    """Parse a user-supplied platform name ("windows", "macos", "linux")."""
    aliases = {
        "windows": Platform.WINDOWS,
        "win": Platform.WINDOWS,
        "macos": Platform.MACOS,
        "osx": Platform.MACOS,
        "darwin": Platform.MACOS,
        "linux": Platform.LINUX,
    }
    return aliases.get(name.strip().lower())
