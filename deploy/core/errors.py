"""Exit codes for the deploy CLI.

Every non-zero code is fatal: the run stopped at the first failing step.
The distinct values only tell scripts which kind of failure happened:
- 0: Success
- 1: User error (bad arguments)
- 2: Environment error (solution not found, missing settings, unknown host)
- 3: Build error (an external command failed or could not start)
- 4: Network error (tool download failed)
- 5: I/O error (copy/move/delete/extract failed)
- 6: Verification error (bad version tag, bad or incomplete release manifest)
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Process exit codes. Values are stable."""

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    BUILD_ERROR = 3
    NETWORK_ERROR = 4
    IO_ERROR = 5
    VERIFY_ERROR = 6

