"""
git-worktree-keeper - Disposable git worktrees under <repo>/.worktrees
"""

from .__version__ import __version__
from .core import WorktreeKeeper

__all__ = ["WorktreeKeeper", "__version__"]
