"""Git-related services for git-worktree-keeper."""

from .repository import Repository, container_path, resolve_repo_root, resolve_repository
from .worktrees import WorktreeService, parse_worktree_list

__all__ = [
    "Repository",
    "WorktreeService",
    "container_path",
    "parse_worktree_list",
    "resolve_repo_root",
    "resolve_repository",
]
