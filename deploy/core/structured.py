"""Typed reads from parsed TOML tables.

A settings value of the wrong type is treated as absent so the caller's
default applies; required values are validated later by
DeployConfig.missing_for.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TypeGuard, cast

StrDict = dict[str, object]


def is_str_dict(obj: object) -> TypeGuard[StrDict]:
    if not isinstance(obj, dict):
        return False
    keys = cast(dict[object, object], obj).keys()
    return all(isinstance(k, str) for k in keys)


def as_str_dict(obj: object) -> StrDict | None:
    return obj if is_str_dict(obj) else None


def get_str(table: Mapping[str, object], key: str) -> str | None:
    """Stripped string value; None when missing, blank or not a string."""
    match table.get(key):
        case str(value) if value.strip():
            return value.strip()
        case _:
            return None


def str_or(table: Mapping[str, object], key: str, default: str = "") -> str:
    found = get_str(table, key)
    return default if found is None else found


def get_int(table: Mapping[str, object], key: str) -> int | None:
    """Integer value; bools are rejected even though bool subclasses int."""
    match table.get(key):
        case bool():
            return None
        case int(value):
            return value
        case _:
            return None


def get_bool(table: Mapping[str, object], key: str) -> bool | None:
    match table.get(key):
        case bool(value):
            return value
        case _:
            return None


def get_table(table: Mapping[str, object], key: str) -> StrDict:
    """Nested table, or an empty one when missing."""
    return as_str_dict(table.get(key)) or {}
