"""Shared constants for git-worktree-keeper."""

from typing import Dict, List


# Directory under the repository root that holds every managed worktree
WORKTREES_DIR_NAME = ".worktrees"

# Default worktree names are "<N>-wt"; "<N>-worktree" is the older spelling
DEFAULT_NAME_SUFFIX = "-wt"
LEGACY_NAME_SUFFIXES = ("-wt", "-worktree")

# Per-user config lives under ~/.worktree/
CONFIG_DIR_NAME = ".worktree"
CONFIG_FILE_NAME = "config.toml"

# Arguments baked into the named tools, before any user config
BUILTIN_TOOL_ARGS: Dict[str, List[str]] = {
    "codex": ["--dangerously-bypass-approvals-and-sandbox"],
    "claude": ["--dangerously-skip-permissions"],
}

# Help text for the tool subcommands
TOOL_DESCRIPTIONS: Dict[str, str] = {
    "codex": "Run codex inside a worktree",
    "claude": "Run claude inside a worktree",
}

# Fallback when neither SHELL nor COMSPEC is set
DEFAULT_SHELL = "/bin/sh"

# Retry window for git commands that hit another git process's lock
GIT_RETRY_DEADLINE = 3.0
GIT_RETRY_INITIAL_DELAY = 0.03
GIT_RETRY_MAX_DELAY = 0.5

# How long a losing creator waits for the winner's registration
CREATION_WAIT_DEADLINE = 3.0

# Attempts at deriving a fresh default name when racing another creator
DEFAULT_NAME_ATTEMPTS = 16

# git metadata folders that may be left empty after the last worktree goes
GIT_WORKTREE_METADATA_DIRS = (
    "worktrees",
    "refs/worktree",
    "logs/refs/worktree",
)

