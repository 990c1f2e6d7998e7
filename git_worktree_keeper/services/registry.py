"""Registry of the worktrees kept under ``<repo-root>/.worktrees``.

Nothing is cached between calls: every operation asks git which worktrees
are registered, so concurrent invocations never act on stale state.

Creation uses an exclusive ``mkdir`` of the destination as the arbiter
between processes racing on the same name. ``git worktree add`` accepts the
empty directory the winner made; a loser sees the directory already exists
and waits for the winner's registration instead of creating a duplicate.
A crashed winner leaves at most an empty directory behind, never a lock.
"""

import os
import time
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Set, Tuple

from git_worktree_keeper.constants import (
    CREATION_WAIT_DEADLINE,
    DEFAULT_NAME_ATTEMPTS,
    GIT_RETRY_INITIAL_DELAY,
    GIT_RETRY_MAX_DELAY,
    GIT_WORKTREE_METADATA_DIRS,
)
from git_worktree_keeper.exceptions import (
    CreationFailedError,
    CreationRaceLost,
    GitOperationError,
    WorktreeNotFoundError,
)
from git_worktree_keeper.logging_config import get_logger
from git_worktree_keeper.models.worktree import Worktree, WorktreeEntry
from git_worktree_keeper.services.git.repository import Repository
from git_worktree_keeper.services.git.worktrees import WorktreeService
from git_worktree_keeper.services.names import next_default_name, validate_name

logger = get_logger(__name__)


def _is_visible(entry: WorktreeEntry) -> bool:
    return not entry.is_orphaned and not entry.is_initializing


def remove_dir_if_empty(path: Path) -> bool:
    """Remove ``path`` if it is an empty directory. Returns True if removed."""
    if not path.is_dir() or path.is_symlink():
        return False
    try:
        path.rmdir()
    except OSError:
        return False
    logger.debug(f"Removed empty directory {path}")
    return True


class WorktreeListing:
    """Lazy, restartable view of the managed worktrees.

    Each iteration queries git afresh and yields worktrees sorted by name.
    """

    def __init__(self, registry: "WorktreeRegistry"):
        self._registry = registry

    def __iter__(self) -> Iterator[Worktree]:
        return iter(self._registry._collect())

    def names(self) -> List[str]:
        return [worktree.name for worktree in self]


class WorktreeRegistry:
    """Creates, finds, lists and clears worktrees under one repository."""

    def __init__(
        self,
        repository: Repository,
        worktree_service: Optional[WorktreeService] = None,
        wait_deadline: float = CREATION_WAIT_DEADLINE,
    ):
        self.repository = repository
        self.container = repository.worktrees_dir
        self.worktree_service = worktree_service or WorktreeService(repository.root)
        self.wait_deadline = wait_deadline

    def path_for(self, name: str) -> Path:
        """Destination of the worktree called ``name``."""
        return self.container / validate_name(name)

    # Queries

    def _entries_under_container(self) -> List[Tuple[Path, WorktreeEntry]]:
        container = self.container.resolve()
        found = []
        for entry in self.worktree_service.list_entries():
            if entry.is_main or entry.is_bare:
                continue
            path = entry.path.resolve()
            if container in path.parents:
                found.append((path, entry))
        return found

    def _managed_entries(self) -> Dict[str, WorktreeEntry]:
        """Registered worktrees directly inside the container, keyed by name."""
        container = self.container.resolve()
        return {
            path.name: entry
            for path, entry in self._entries_under_container()
            if path.parent == container
        }

    def _find(self, name: str) -> Optional[WorktreeEntry]:
        return self._managed_entries().get(name)

    def _to_worktree(self, name: str, entry: WorktreeEntry) -> Worktree:
        return Worktree(name=name, path=self.container / name, registered=True, head=entry.head or None)

    def _collect(self) -> List[Worktree]:
        managed = self._managed_entries()
        return [
            self._to_worktree(name, managed[name])
            for name in sorted(managed)
            if _is_visible(managed[name])
        ]

    def _taken_names(self) -> Set[str]:
        taken = set(self._managed_entries())
        if self.container.is_dir():
            taken.update(os.listdir(self.container))
        return taken

    def lookup(self, name: str) -> Worktree:
        """Get the registered worktree called ``name``.

        Raises:
            InvalidNameError: ``name`` is not a single path component
            WorktreeNotFoundError: no registered worktree has that name
        """
        validate_name(name)
        entry = self._find(name)
        if entry is None or not _is_visible(entry):
            raise WorktreeNotFoundError(name)
        return self._to_worktree(name, entry)

    def exists(self, name: str) -> bool:
        try:
            self.lookup(name)
        except WorktreeNotFoundError:
            return False
        return True

    def list_worktrees(self) -> WorktreeListing:
        """Managed worktrees, sorted by name, re-read on every iteration."""
        return WorktreeListing(self)

    # Mutations

    def create(self, name: Optional[str] = None) -> Tuple[Worktree, bool]:
        """Create a worktree, or reuse the one that already has this name.

        Args:
            name: Worktree name; derived as ``<N>-wt`` when omitted

        Returns:
            Tuple of (worktree, already_existed)

        Raises:
            InvalidNameError: ``name`` is not a single path component
            CreationFailedError: the destination is occupied by something
                that is not a worktree, or git could not create it
        """
        if name is None:
            return self._create_default(), False

        validate_name(name)
        entry = self._find(name)
        if entry is not None and _is_visible(entry):
            logger.info(f"Worktree {name} already exists, switching to it")
            return self._to_worktree(name, entry), True

        if entry is not None and entry.is_orphaned:
            logger.info(f"Pruning stale registration of {entry.path}")
            self.worktree_service.prune()

        try:
            return self._create_new(name), False
        except CreationRaceLost as race:
            return self._await_winner(race), True

    def _create_default(self) -> Worktree:
        for _ in range(DEFAULT_NAME_ATTEMPTS):
            name = next_default_name(self._taken_names())
            try:
                return self._create_new(name)
            except CreationRaceLost:
                logger.info(f"{name} was taken by another process, picking the next name")
        raise CreationFailedError(
            next_default_name(self._taken_names()),
            f"no free default name after {DEFAULT_NAME_ATTEMPTS} attempts",
        )

    def _create_new(self, name: str) -> Worktree:
        path = self.container / name
        if os.path.lexists(path) and (path.is_symlink() or not path.is_dir()):
            raise CreationFailedError(name, f"worktree path exists and is not a directory: {path}")

        self.container.mkdir(parents=True, exist_ok=True)
        try:
            os.mkdir(path)
        except FileExistsError as e:
            raise CreationRaceLost(name, path) from e
        except OSError as e:
            raise CreationFailedError(name, f"cannot create {path}: {e.strerror or e}") from e

        logger.info(f"Creating worktree {name} at {path}")
        try:
            self.worktree_service.add_detached(path)
        except GitOperationError as e:
            if not remove_dir_if_empty(path):
                logger.warning(f"Left {path} in place after the failed creation")
            raise CreationFailedError(name, e.message or str(e)) from e

        entry = self._find(name)
        if entry is None:
            self._roll_back(path)
            raise CreationFailedError(name, f"git did not register {path}")
        return self._to_worktree(name, entry)

    def _roll_back(self, path: Path) -> None:
        """Undo an add whose result cannot be found in ``git worktree list``."""
        try:
            self.worktree_service.remove(path, force=True)
        except GitOperationError as e:
            logger.warning(f"Could not roll back {path}: {e}")
        remove_dir_if_empty(path)

    def _is_stray(self, path: Path) -> bool:
        """A populated directory git is not writing into."""
        if not path.is_dir():
            return True
        if os.path.lexists(path / ".git"):
            return False
        return any(path.iterdir())

    def _await_winner(self, race: CreationRaceLost) -> Worktree:
        """Wait for the process that owns ``race.path`` to register it."""
        deadline = time.monotonic() + self.wait_deadline
        delay = GIT_RETRY_INITIAL_DELAY

        while True:
            entry = self._find(race.name)
            if entry is not None and _is_visible(entry):
                logger.info(f"Worktree {race.name} was created concurrently, switching to it")
                return self._to_worktree(race.name, entry)
            if self._is_stray(race.path) or time.monotonic() >= deadline:
                break
            time.sleep(delay)
            delay = min(delay * 2, GIT_RETRY_MAX_DELAY)

        if os.path.lexists(race.path) and not race.path.is_dir():
            raise CreationFailedError(
                race.name, f"worktree path exists and is not a directory: {race.path}"
            )
        raise CreationFailedError(
            race.name, f"{race.path} exists but is not a registered worktree"
        )

    def clear(self) -> List[Path]:
        """Remove every registered worktree under the container.

        Worktrees elsewhere in the repository are left alone, as is any
        content of the container that git does not know about. Calling this
        without a container is a no-op.

        Returns:
            Paths of the worktrees that were removed
        """
        entries = self._entries_under_container()
        if not entries and not self.container.exists():
            logger.debug(f"{self.container} does not exist, nothing to clear")
            return []

        removed = []
        # Deepest first so nested worktrees go before their parents
        for path, entry in sorted(entries, key=lambda item: len(item[0].parts), reverse=True):
            if entry.is_orphaned:
                logger.debug(f"{path} is already gone, leaving it to prune")
                continue
            self.worktree_service.remove(entry.path, force=True, locked=entry.is_locked)
            removed.append(path)

        self._remove_empty_tree(self.container)
        if self.container.exists():
            logger.warning(f"Left {self.container} in place: it holds files that are not worktrees")

        self.worktree_service.prune()
        for relative in GIT_WORKTREE_METADATA_DIRS:
            remove_dir_if_empty(self.repository.common_dir / relative)

        logger.info(f"Cleared {len(removed)} worktree(s)")
        return removed

    def _remove_empty_tree(self, root: Path) -> None:
        if not root.is_dir() or root.is_symlink():
            return
        for dirpath, _dirnames, _filenames in os.walk(root, topdown=False):
            remove_dir_if_empty(Path(dirpath))
