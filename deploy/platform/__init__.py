"""Platform abstraction layer."""

from .detection import Platform, detect_platform, parse_platform
from .files import FileOpError
from .process import CommandRunner, ProcessError, run

__all__ = [
    # detection
    "Platform",
    "detect_platform",
    "parse_platform",
    # files
    "FileOpError",
    # process
    "CommandRunner",
    "ProcessError",
    "run",
]
