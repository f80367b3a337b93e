"""Core domain types and logic."""

from .errors import ErrorCode
from .result import Err, Ok, Result

__all__ = [
    # errors
    "ErrorCode",
    # result
    "Err",
    "Ok",
    "Result",
]
