"""Tests for parsing `git worktree list --porcelain`"""
from pathlib import Path

from git_worktree_keeper.services.git.worktrees import (
    is_git_lock_error,
    parse_worktree_list,
)

PORCELAIN = """worktree /repo
HEAD 1111111111111111111111111111111111111111
branch refs/heads/main

worktree /repo/.worktrees/0-wt
HEAD 2222222222222222222222222222222222222222
detached

worktree /repo/.worktrees/busy
HEAD 3333333333333333333333333333333333333333
detached
locked initializing

worktree /repo/.worktrees/gone
HEAD 4444444444444444444444444444444444444444
detached
prunable gitdir file points to non-existent location
"""


class TestParseWorktreeList:
    """Test porcelain parsing."""

    def test_first_entry_is_main(self):
        entries = parse_worktree_list(PORCELAIN)
        assert [e.is_main for e in entries] == [True, False, False, False]
        assert entries[0].branch_name == "main"
        assert entries[0].path == Path("/repo")

    def test_detached_entry(self):
        entry = parse_worktree_list(PORCELAIN)[1]
        assert entry.is_detached
        assert entry.branch_name == ""
        assert entry.head.startswith("2222")

    def test_locked_with_reason(self):
        entry = parse_worktree_list(PORCELAIN)[2]
        assert entry.is_locked
        assert entry.lock_reason == "initializing"
        assert entry.is_initializing

    def test_prunable_is_orphaned(self):
        entry = parse_worktree_list(PORCELAIN)[3]
        assert entry.is_prunable
        assert entry.is_orphaned

    def test_no_trailing_blank_line(self):
        entries = parse_worktree_list("worktree /a\nHEAD abc\nbare")
        assert len(entries) == 1
        assert entries[0].is_bare

    def test_locked_without_reason(self):
        entry = parse_worktree_list("worktree /a\n\nworktree /b\nlocked\n")[1]
        assert entry.is_locked
        assert not entry.is_initializing

    def test_path_with_spaces(self):
        entry = parse_worktree_list("worktree /r\n\nworktree /r/.worktrees/spaced name\n")[1]
        assert entry.path.name == "spaced name"

    def test_empty_output(self):
        assert parse_worktree_list("") == []


class TestLockErrors:
    def test_index_lock(self):
        assert is_git_lock_error("fatal: Unable to create '/r/.git/index.lock': File exists.")

    def test_other_error(self):
        assert not is_git_lock_error("fatal: '/r/x' already exists")
