"""Run a shell or a command inside a worktree and report its exit status."""

import os
import shutil
import signal
import subprocess
from contextlib import contextmanager
from enum import Enum
from pathlib import Path
from typing import Dict, Iterator, Mapping, Optional, Sequence

from git_worktree_keeper.constants import DEFAULT_SHELL
from git_worktree_keeper.exceptions import LaunchFailedError
from git_worktree_keeper.logging_config import get_logger

logger = get_logger(__name__)

# Signals the terminal sends to the whole foreground process group
_FORWARDED_SIGNALS = [
    sig for sig in (getattr(signal, "SIGINT", None), getattr(signal, "SIGQUIT", None)) if sig
]


class LaunchState(Enum):
    """Lifecycle of one launch."""
    IDLE = "idle"
    SPAWNING = "spawning"
    RUNNING = "running"
    EXITED = "exited"


def user_shell(env: Optional[Mapping[str, str]] = None) -> str:
    """The interactive shell to start: $SHELL, then $COMSPEC, then /bin/sh."""
    env = os.environ if env is None else env
    return env.get("SHELL") or env.get("COMSPEC") or DEFAULT_SHELL


def exit_status(returncode: int) -> int:
    """Map a Popen return code to the status a shell would report.

    A child killed by signal N reports ``128 + N``; everything else passes through.
    """
    if returncode < 0:
        return 128 - returncode
    return returncode


@contextmanager
def _interrupts_go_to_child() -> Iterator[None]:
    """Ignore terminal interrupts in this process while a child runs.

    The child shares the terminal's process group, so it still receives them.
    """
    previous: Dict[int, object] = {}
    try:
        for sig in _FORWARDED_SIGNALS:
            previous[sig] = signal.signal(sig, signal.SIG_IGN)
    except ValueError:
        # Not the main thread; leave the handlers as they are
        previous.clear()
    try:
        yield
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)


class Launcher:
    """Starts one child process in a worktree and waits for it."""

    def __init__(self, env: Optional[Mapping[str, str]] = None):
        self.env = env
        self.state = LaunchState.IDLE
        self.returncode: Optional[int] = None

    def _set_state(self, state: LaunchState) -> None:
        logger.debug(f"Launcher {self.state.value} -> {state.value}")
        self.state = state

    def _environ(self) -> Mapping[str, str]:
        return os.environ if self.env is None else self.env

    def resolve(self, command: str, cwd: Optional[Path] = None) -> str:
        """Locate ``command`` on PATH.

        A command containing a path separator is taken relative to ``cwd``,
        the directory the child will run in, not to this process's directory.
        """
        if os.sep in command or (os.altsep and os.altsep in command):
            target = Path(cwd) / command if cwd is not None else Path(command)
            resolved = shutil.which(str(target))
        else:
            resolved = shutil.which(command, path=self._environ().get("PATH", os.defpath))
        if resolved is None:
            raise LaunchFailedError(command, "command not found")
        return resolved

    def run(self, cwd: Path, command: Optional[str] = None, args: Sequence[str] = ()) -> int:
        """Run ``command`` with ``args`` in ``cwd``, or the user's shell if no command.

        Blocks until the child exits and returns its exit status unchanged.

        Raises:
            LaunchFailedError: the program could not be found or started
        """
        if command is None:
            program = user_shell(self._environ())
            argv = [program]
            logger.info(f"Starting shell {program} in {cwd}")
        else:
            program = command
            argv = [self.resolve(command, cwd), *args]
            logger.info(f"Running {command} in {cwd}")

        self._set_state(LaunchState.SPAWNING)
        try:
            process = subprocess.Popen(argv, cwd=str(cwd), env=self.env)
        except OSError as e:
            self._set_state(LaunchState.IDLE)
            raise LaunchFailedError(program, e.strerror or str(e)) from e

        self._set_state(LaunchState.RUNNING)
        with _interrupts_go_to_child():
            returncode = process.wait()

        self.returncode = exit_status(returncode)
        self._set_state(LaunchState.EXITED)
        logger.debug(f"{program} exited with {self.returncode}")
        return self.returncode
