"""Worktree name validation and default name derivation."""

import os
from typing import Iterable, Optional

from git_worktree_keeper.constants import DEFAULT_NAME_SUFFIX, LEGACY_NAME_SUFFIXES
from git_worktree_keeper.exceptions import InvalidNameError

_SEPARATORS = {"/", os.sep, os.altsep} - {None}


def is_valid_name(name: str) -> bool:
    """Whether ``name`` is exactly one ordinary path component.

    Only the path shape is checked; spaces and non-ASCII characters are fine.
    """
    if not name or name in (".", ".."):
        return False
    if any(ord(ch) < 0x20 or ord(ch) == 0x7f for ch in name):
        # git prints worktree paths one per line, so control characters cannot round-trip
        return False
    return not any(sep in name for sep in _SEPARATORS)


def validate_name(name: str) -> str:
    """Return ``name`` unchanged, or raise InvalidNameError."""
    if not is_valid_name(name):
        raise InvalidNameError(name)
    return name


def default_name_index(name: str) -> Optional[int]:
    """Index of a generated name such as ``3-wt``, or None for anything else."""
    for suffix in LEGACY_NAME_SUFFIXES:
        if name.endswith(suffix):
            prefix = name[: -len(suffix)]
            if prefix.isascii() and prefix.isdigit():
                return int(prefix)
    return None


def next_default_name(taken: Iterable[str]) -> str:
    """Smallest ``<N>-wt`` whose index no taken name already uses."""
    used = {index for index in map(default_name_index, taken) if index is not None}
    index = 0
    while index in used:
        index += 1
    return f"{index}{DEFAULT_NAME_SUFFIX}"
