"""Data models for git-worktree-keeper."""

from .worktree import Worktree, WorktreeEntry

__all__ = ["Worktree", "WorktreeEntry"]
