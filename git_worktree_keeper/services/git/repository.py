"""Repository root resolution.

The root is whatever git reports as the main working tree, so invoking the
tool from a subdirectory or from inside one of its own worktrees lands on the
same root and the same ``.worktrees`` directory.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

import git

from git_worktree_keeper.constants import WORKTREES_DIR_NAME
from git_worktree_keeper.exceptions import NotARepositoryError
from git_worktree_keeper.logging_config import get_logger
from git_worktree_keeper.services.git.worktrees import parse_worktree_list, stderr_text

logger = get_logger(__name__)


def container_path(root: Union[str, Path]) -> Path:
    """Directory holding every managed worktree of ``root``."""
    return Path(root) / WORKTREES_DIR_NAME


@dataclass(frozen=True)
class Repository:
    """Location of the repository the tool operates on."""

    root: Path
    common_dir: Path  # git's shared directory, usually root/.git

    @property
    def worktrees_dir(self) -> Path:
        return container_path(self.root)


def resolve_repository(cwd: Optional[Union[str, Path]] = None) -> Repository:
    """Find the enclosing repository of ``cwd`` (default: the current directory).

    Raises:
        NotARepositoryError: git knows no repository here, the repository is
            bare, or git itself cannot be run.
    """
    cwd = Path(cwd) if cwd is not None else Path(os.getcwd())
    cmd = git.Git(str(cwd))

    try:
        common = cmd.rev_parse("--path-format=absolute", "--git-common-dir")
        listing = cmd.worktree("list", "--porcelain")
    except git.exc.GitCommandNotFound as e:
        raise NotARepositoryError(cwd, f"cannot run git: {e}") from e
    except git.exc.GitCommandError as e:
        logger.debug(f"git rejected {cwd}: {stderr_text(e)}")
        raise NotARepositoryError(cwd) from e

    entries = parse_worktree_list(listing)
    main = next((entry for entry in entries if entry.is_main), None)
    if main is None or main.is_bare:
        raise NotARepositoryError(cwd, "repository has no main working tree")

    repository = Repository(
        root=main.path.resolve(),
        common_dir=(cwd / common.strip()).resolve(),
    )
    logger.debug(f"Resolved {cwd} to repository root {repository.root}")
    return repository


def resolve_repo_root(cwd: Optional[Union[str, Path]] = None) -> Path:
    """Root of the main working tree enclosing ``cwd``."""
    return resolve_repository(cwd).root
