"""Core functionality for git-worktree-keeper"""

import os
from pathlib import Path
from typing import Optional, Sequence, Union

from rich.console import Console

from git_worktree_keeper.config import ConfigStore, display_path
from git_worktree_keeper.logging_config import get_logger
from git_worktree_keeper.models.worktree import Worktree
from git_worktree_keeper.services.git.repository import Repository, resolve_repository
from git_worktree_keeper.services.launcher import Launcher
from git_worktree_keeper.services.registry import WorktreeRegistry

console = Console(soft_wrap=True, highlight=False, emoji=False)
logger = get_logger(__name__)


class WorktreeKeeper:
    """Main class tying the verbs of the command line to the services."""

    def __init__(
        self,
        cwd: Optional[Union[str, Path]] = None,
        config_store: Optional[ConfigStore] = None,
        launcher: Optional[Launcher] = None,
    ):
        """Initialize WorktreeKeeper.

        Args:
            cwd: Directory the command was invoked from (default: current directory)
            config_store: Source of per-tool launch arguments
            launcher: Runs the shell or command inside a worktree
        """
        self.cwd = Path(cwd) if cwd is not None else Path(os.getcwd())
        self.config_store = config_store or ConfigStore()
        self.launcher = launcher or Launcher()
        self._repository: Optional[Repository] = None
        self._registry: Optional[WorktreeRegistry] = None

    @property
    def repository(self) -> Repository:
        """The enclosing repository, resolved on first use."""
        if self._repository is None:
            self._repository = resolve_repository(self.cwd)
        return self._repository

    @property
    def registry(self) -> WorktreeRegistry:
        if self._registry is None:
            self._registry = WorktreeRegistry(self.repository)
        return self._registry

    def _console_print(self, text: str) -> None:
        console.print(text, markup=False)

    def _enter(self, worktree: Worktree, command: Optional[str], args: Sequence[str]) -> int:
        self._console_print(str(worktree.path))
        return self.launcher.run(worktree.path, command, args)

    def create(self, name: Optional[str] = None, command: Optional[str] = None,
               args: Sequence[str] = ()) -> int:
        """Create (or reuse) a worktree and run ``command`` or a shell in it."""
        worktree, already_existed = self.registry.create(name)
        if already_existed:
            logger.info(f"Reusing existing worktree {worktree.name}")
        else:
            logger.info(f"Created worktree {worktree.name}")
        return self._enter(worktree, command, args)

    def switch(self, name: str, command: Optional[str] = None, args: Sequence[str] = ()) -> int:
        """Run ``command`` or a shell in an existing worktree; never creates one."""
        worktree = self.registry.lookup(name)
        return self._enter(worktree, command, args)

    def run_tool(self, tool: str, action: str, name: Optional[str] = None,
                 user_args: Sequence[str] = ()) -> int:
        """Create or switch to a worktree and launch a named tool there.

        The tool's arguments are its configured ones followed by ``user_args``.
        """
        args = self.config_store.command_args(tool, user_args)
        if action == "create":
            return self.create(name, tool, args)
        if action == "switch":
            if name is None:
                raise ValueError("switch needs a worktree name")
            return self.switch(name, tool, args)
        raise ValueError(f"unknown action {action!r} for {tool}")

    def list_worktrees(self) -> int:
        """Print one managed worktree name per line."""
        for worktree in self.registry.list_worktrees():
            self._console_print(worktree.name)
        return 0

    def clear(self, shell: bool = False) -> int:
        """Remove every managed worktree, optionally opening a shell at the root."""
        removed = self.registry.clear()
        for path in removed:
            logger.info(f"Removed {path}")
        if shell:
            return self.launcher.run(self.repository.root)
        return 0

    def init_config(self) -> int:
        """Write the starter config unless one exists."""
        self.config_store.init()
        self._console_print(f"initialized config at {display_path(self.config_store.path)}")
        return 0
