"""Pytest fixtures for git-worktree-keeper tests"""
import os
import stat
import tempfile
from pathlib import Path

import pytest
import git

from git_worktree_keeper.services.git.repository import resolve_repository
from git_worktree_keeper.services.registry import WorktreeRegistry


def write_script(path: Path, body: str) -> Path:
    """Write an executable /bin/sh script."""
    path.write_text("#!/bin/sh\n" + body)
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        # Resolve so paths compare equal to what git reports (e.g. /private/var on macOS)
        yield Path(tmpdir).resolve()


@pytest.fixture
def git_repo(temp_dir):
    """Create a real Git repository for testing."""
    repo_path = temp_dir / "test_repo"
    repo_path.mkdir()

    # Initialize repository
    repo = git.Repo.init(repo_path)

    # Configure git user for commits
    repo.config_writer().set_value("user", "name", "Test User").release()
    repo.config_writer().set_value("user", "email", "test@example.com").release()

    # Create initial commit
    test_file = repo_path / "README.md"
    test_file.write_text("# Test Repository\n")
    (repo_path / "src").mkdir()
    (repo_path / "src" / "app.py").write_text("print('hello')\n")
    repo.index.add(["README.md", "src/app.py"])
    repo.index.commit("Initial commit")

    yield repo

    # Cleanup
    repo.close()


@pytest.fixture
def repo_root(git_repo):
    """Path of the test repository's main working tree."""
    return Path(git_repo.working_dir)


@pytest.fixture
def registry(repo_root):
    """WorktreeRegistry for the test repository."""
    return WorktreeRegistry(resolve_repository(repo_root), wait_deadline=1.0)


@pytest.fixture
def home(temp_dir, monkeypatch):
    """Point HOME at an empty directory so no real user config is read."""
    home_dir = temp_dir / "home"
    home_dir.mkdir()
    monkeypatch.setenv("HOME", str(home_dir))
    return home_dir


@pytest.fixture
def bin_dir(temp_dir, monkeypatch):
    """Directory prepended to PATH for fake executables."""
    path = temp_dir / "bin"
    path.mkdir()
    monkeypatch.setenv("PATH", f"{path}{os.pathsep}{os.environ.get('PATH', os.defpath)}")
    return path


@pytest.fixture
def shell_log(temp_dir, bin_dir, monkeypatch):
    """Install a fake interactive shell that records where it was started.

    The shell writes its physical working directory to the returned file and
    exits with $FAKE_SHELL_EXIT (default 0).
    """
    log = temp_dir / "shell.log"
    shell = write_script(
        bin_dir / "fake-shell",
        'pwd -P > "$WORKTREE_SHELL_LOG"\nexit "${FAKE_SHELL_EXIT:-0}"\n',
    )
    monkeypatch.setenv("SHELL", str(shell))
    monkeypatch.setenv("WORKTREE_SHELL_LOG", str(log))
    return log


@pytest.fixture
def tool_log(temp_dir, bin_dir, monkeypatch):
    """Install fake ``codex`` and ``claude`` binaries on PATH.

    Each records its working directory on the first line of the returned
    file, then one argument per line, and exits with $FAKE_TOOL_EXIT.
    """
    log = temp_dir / "tool.log"
    body = (
        'pwd -P > "$WORKTREE_TOOL_LOG"\n'
        'for arg in "$@"; do printf \'%s\\n\' "$arg" >> "$WORKTREE_TOOL_LOG"; done\n'
        'exit "${FAKE_TOOL_EXIT:-0}"\n'
    )
    for tool in ("codex", "claude"):
        write_script(bin_dir / tool, body)
    monkeypatch.setenv("WORKTREE_TOOL_LOG", str(log))
    return log


@pytest.fixture
def read_tool_log(tool_log):
    """Return a reader splitting the fake tool log into (cwd, args)."""
    def read():
        lines = tool_log.read_text().splitlines()
        return Path(lines[0]), lines[1:]
    return read


@pytest.fixture
def make_script():
    """Return the helper writing executable /bin/sh scripts."""
    return write_script
