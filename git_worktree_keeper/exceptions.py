"""Custom exceptions for git-worktree-keeper"""

from pathlib import Path
from typing import Optional, Union


class WorktreeKeeperError(Exception):
    """Base exception for all git-worktree-keeper errors."""

    exit_code = 1


class ConfigError(WorktreeKeeperError):
    """Exception raised when the user config file cannot be used."""

    def __init__(self, path: Union[str, Path], message: str):
        self.path = Path(path)
        self.message = message
        super().__init__(f"invalid config {self.path}: {message}")


class GitOperationError(WorktreeKeeperError):
    """Exception raised for errors in Git operations."""

    def __init__(self, operation: str, target: Optional[str] = None, message: Optional[str] = None):
        self.operation = operation
        self.target = target
        self.message = message

        error_msg = f"git {operation} failed"
        if target:
            error_msg += f" for {target}"
        if message:
            error_msg += f": {message}"

        super().__init__(error_msg)


class NotARepositoryError(WorktreeKeeperError):
    """Exception raised when no enclosing git repository is found."""

    exit_code = 3

    def __init__(self, path: Union[str, Path], message: Optional[str] = None):
        self.path = Path(path)
        error_msg = f"not in a git repository: {self.path}"
        if message:
            error_msg += f" ({message})"
        super().__init__(error_msg)


class InvalidNameError(WorktreeKeeperError):
    """Exception raised when a worktree name is not a single path component."""

    exit_code = 2

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"invalid worktree name '{name}'")


class WorktreeNotFoundError(WorktreeKeeperError):
    """Exception raised when switching to a worktree that does not exist."""

    exit_code = 4

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"worktree '{name}' does not exist")


class CreationFailedError(WorktreeKeeperError):
    """Exception raised when a worktree could not be created."""

    exit_code = 5

    def __init__(self, name: str, message: str):
        self.name = name
        self.message = message
        super().__init__(f"cannot create worktree '{name}': {message}")


class CreationRaceLost(WorktreeKeeperError):
    """Raised internally when another process created the same destination first.

    The registry turns this into a reuse of the winner's worktree; it only
    escapes when the winner never finishes registering.
    """

    exit_code = 5

    def __init__(self, name: str, path: Path):
        self.name = name
        self.path = path
        super().__init__(f"worktree '{name}' is being created by another process at {path}")


class LaunchFailedError(WorktreeKeeperError):
    """Exception raised when the shell or command could not be started."""

    exit_code = 127

    def __init__(self, program: str, message: Optional[str] = None):
        self.program = program
        error_msg = f"failed to run {program}"
        if message:
            error_msg += f": {message}"
        super().__init__(error_msg)
