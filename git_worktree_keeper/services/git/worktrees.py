"""Worktree operations service for git-worktree-keeper."""

import time
from pathlib import Path
from typing import Any, Dict, List, Union

import git

from git_worktree_keeper.constants import (
    GIT_RETRY_DEADLINE,
    GIT_RETRY_INITIAL_DELAY,
    GIT_RETRY_MAX_DELAY,
)
from git_worktree_keeper.exceptions import GitOperationError
from git_worktree_keeper.logging_config import get_logger
from git_worktree_keeper.models.worktree import WorktreeEntry

logger = get_logger(__name__)


def stderr_text(error: git.exc.GitCommandError) -> str:
    """Plain stderr of a failed git command, without GitPython's decoration."""
    text = (getattr(error, "stderr", "") or "").strip()
    if text.startswith("stderr: '") and text.endswith("'"):
        text = text[len("stderr: '"):-1]
    return text.strip()


def is_git_lock_error(stderr: str) -> bool:
    """Whether git failed only because another git process holds a lock."""
    s = stderr.lower()
    return (
        "index.lock" in s
        or "another git process seems to be running" in s
        or "could not write new index file" in s
        or ("unable to create" in s and "lock" in s and ".git" in s)
    )


def _entry_from(record: Dict[str, Any]) -> WorktreeEntry:
    return WorktreeEntry(
        path=Path(record["path"]),
        head=record.get("HEAD", ""),
        branch_name=record.get("branch", ""),
        is_main=record.get("is_main", False),
        is_bare=record.get("bare", False),
        is_detached=record.get("detached", False),
        is_locked="locked" in record,
        lock_reason=record.get("locked", ""),
        is_prunable="prunable" in record,
    )


def parse_worktree_list(output: str) -> List[WorktreeEntry]:
    """Parse ``git worktree list --porcelain`` output.

    Format::

        worktree /path/to/worktree
        HEAD commit_sha
        branch refs/heads/branch-name   (or "detached" / "bare")
        locked [reason]
        prunable [reason]
        (blank line between worktrees)

    The first record is always the main working tree.
    """
    entries: List[WorktreeEntry] = []
    current: Dict[str, Any] = {}

    for line in output.split("\n"):
        line = line.rstrip("\r")

        if not line.strip():
            # Empty line marks end of worktree entry
            if current.get("path"):
                entries.append(_entry_from(current))
            current = {}
            continue

        key, _, value = line.partition(" ")
        if key == "worktree":
            if current.get("path"):
                entries.append(_entry_from(current))
            current = {"path": value, "is_main": not entries}
        elif key == "HEAD":
            current["HEAD"] = value
        elif key == "branch":
            if value.startswith("refs/heads/"):
                value = value[len("refs/heads/"):]
            current["branch"] = value
        elif key in ("detached", "bare"):
            current[key] = True
        elif key in ("locked", "prunable"):
            current[key] = value  # Optional reason

    # Handle last entry if no trailing blank line
    if current.get("path"):
        entries.append(_entry_from(current))

    return entries


class WorktreeService:
    """Thin wrapper around git's worktree add/list/remove/prune commands."""

    def __init__(self, repo_path: Union[str, Path]):
        """Initialize the worktree service.

        Args:
            repo_path: Path to the main working tree of the repository
        """
        self.repo_path = Path(repo_path)

    def _get_repo(self) -> git.Repo:
        """Open the repository; a fresh instance per call, nothing is cached."""
        return git.Repo(self.repo_path)

    def _run(self, operation: str, target: str, *args: str) -> str:
        """Run ``git worktree <args>``, retrying while another git process holds a lock."""
        deadline = time.monotonic() + GIT_RETRY_DEADLINE
        delay = GIT_RETRY_INITIAL_DELAY

        while True:
            try:
                return self._get_repo().git.worktree(*args)
            except git.exc.GitCommandError as e:
                stderr = stderr_text(e)
                if is_git_lock_error(stderr) and time.monotonic() < deadline:
                    logger.debug(f"git worktree {operation} hit a lock, retrying in {delay:.2f}s")
                    time.sleep(delay)
                    delay = min(delay * 2, GIT_RETRY_MAX_DELAY)
                    continue
                raise GitOperationError(
                    f"worktree {operation}",
                    target,
                    stderr or f"exit code {e.status}",
                ) from e

    def list_entries(self) -> List[WorktreeEntry]:
        """Get every worktree registered with git, main working tree first."""
        output = self._run("list", str(self.repo_path), "list", "--porcelain")
        entries = parse_worktree_list(output)
        logger.debug(f"Found {len(entries)} worktrees")
        for entry in entries:
            logger.debug(f"  {entry}")
        return entries

    def add_detached(self, path: Path) -> None:
        """Check out HEAD at ``path`` without attaching a branch.

        git refuses a destination that exists and is not empty, so the caller
        may hand over a directory it has just created.
        """
        self._run("add", str(path), "add", "--detach", str(path))
        logger.info(f"Added worktree at {path}")

    def remove(self, path: Path, force: bool = True, locked: bool = False) -> None:
        """Remove the worktree at ``path`` and its registration.

        A locked worktree needs ``--force`` twice, so ``locked`` only has an
        effect together with ``force``.
        """
        args = ["remove", str(path)]
        if force:
            args.append("--force")
            if locked:
                args.append("--force")
        self._run("remove", str(path), *args)
        logger.info(f"Removed worktree at {path}")

    def prune(self) -> None:
        """Drop registrations whose directories are gone."""
        self._run("prune", str(self.repo_path), "prune")
        logger.debug("Pruned orphaned worktree metadata")
