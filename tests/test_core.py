"""Tests for WorktreeKeeper orchestration"""
from unittest.mock import Mock

import pytest

from git_worktree_keeper.config import ConfigStore
from git_worktree_keeper.core import WorktreeKeeper
from git_worktree_keeper.exceptions import ConfigError, NotARepositoryError


@pytest.fixture
def launcher():
    mock = Mock()
    mock.run.return_value = 0
    return mock


@pytest.fixture
def keeper(repo_root, temp_dir, launcher):
    return WorktreeKeeper(repo_root, config_store=ConfigStore(temp_dir / "config.toml"), launcher=launcher)


class TestWorktreeKeeper:
    """Test WorktreeKeeper with a mocked launcher."""

    def test_create_launches_in_worktree(self, keeper, launcher, repo_root):
        assert keeper.create("feat", "make", ["all"]) == 0
        launcher.run.assert_called_once_with(repo_root / ".worktrees" / "feat", "make", ["all"])

    def test_returns_child_status(self, keeper, launcher):
        launcher.run.return_value = 42
        assert keeper.create() == 42

    def test_run_tool_merges_args(self, keeper, launcher, repo_root):
        keeper.run_tool("claude", "create", "feat", ["-p", "hi"])
        launcher.run.assert_called_once_with(
            repo_root / ".worktrees" / "feat", "claude", ["--dangerously-skip-permissions", "-p", "hi"]
        )

    def test_config_error_before_any_creation(self, keeper, launcher, repo_root, temp_dir):
        (temp_dir / "config.toml").write_text("not = [valid\n")
        with pytest.raises(ConfigError):
            keeper.run_tool("codex", "create", "feat")
        assert not (repo_root / ".worktrees").exists()
        launcher.run.assert_not_called()

    def test_clear_shell_at_root(self, keeper, launcher, repo_root):
        keeper.create("feat")
        launcher.run.reset_mock()
        assert keeper.clear(shell=True) == 0
        launcher.run.assert_called_once_with(repo_root)

    def test_repository_resolved_lazily(self, temp_dir, launcher):
        """Test construction outside a repository only fails on use."""
        keeper = WorktreeKeeper(temp_dir, launcher=launcher)
        with pytest.raises(NotARepositoryError):
            keeper.list_worktrees()
