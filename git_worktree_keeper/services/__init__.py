"""Services used by WorktreeKeeper."""

from .launcher import LaunchState, Launcher
from .registry import WorktreeListing, WorktreeRegistry

__all__ = ["LaunchState", "Launcher", "WorktreeListing", "WorktreeRegistry"]
