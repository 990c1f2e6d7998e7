"""Worktree data models."""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass
class WorktreeEntry:
    """One record of ``git worktree list --porcelain``."""

    path: Path
    head: str = ""
    branch_name: str = ""  # Empty when detached
    is_main: bool = False  # Is this the main working tree?
    is_bare: bool = False
    is_detached: bool = False
    is_locked: bool = False
    lock_reason: str = ""
    is_prunable: bool = False  # git considers the directory gone

    @property
    def is_orphaned(self) -> bool:
        """Registered with git but the directory is missing."""
        return self.is_prunable or not self.path.is_dir()

    @property
    def is_initializing(self) -> bool:
        """`git worktree add` is still populating this worktree."""
        return self.is_locked and self.lock_reason == "initializing"

    def __str__(self) -> str:
        status = "orphaned" if self.is_orphaned else "active"
        main_marker = " (main)" if self.is_main else ""
        ref = self.branch_name or f"detached {self.head[:8]}"
        return f"{ref} @ {self.path}{main_marker} [{status}]"


@dataclass(frozen=True)
class Worktree:
    """A worktree managed under the repository's worktrees directory."""

    name: str
    path: Path
    registered: bool = True
    head: Optional[str] = None

    def __str__(self) -> str:
        return self.name
