"""Logging configuration for git-worktree-keeper"""
import logging
import sys
from pathlib import Path
from typing import Optional, TextIO

from git_worktree_keeper.constants import CONFIG_DIR_NAME

# Every logger of this package hangs below this name
LOGGER_NAMESPACE = "worktree"


class ColoredFormatter(logging.Formatter):
    """Formatter that tints warnings and errors when writing to a terminal.

    The record itself is never modified, so other handlers (the debug log
    file) still get plain level names.
    """

    LEVEL_COLORS = {
        logging.DEBUG: '\033[2m',       # Dim
        logging.WARNING: '\033[33m',    # Yellow
        logging.ERROR: '\033[31m',      # Red
        logging.CRITICAL: '\033[1;31m', # Bold red
    }
    RESET = '\033[0m'

    def __init__(self, fmt: Optional[str] = None, datefmt: Optional[str] = None,
                 stream: Optional[TextIO] = None):
        super().__init__(fmt=fmt, datefmt=datefmt)
        stream = stream if stream is not None else sys.stderr
        isatty = getattr(stream, "isatty", None)
        self.use_color = bool(isatty and isatty())

    def format(self, record):
        text = super().format(record)
        color = self.LEVEL_COLORS.get(record.levelno)
        if self.use_color and color:
            return f"{color}{text}{self.RESET}"
        return text


def get_log_file() -> Path:
    """Location of the debug log, next to the user config."""
    return Path.home() / CONFIG_DIR_NAME / 'worktree.log'


def setup_logging(verbose: bool = False, debug: bool = False, log_file: Optional[Path] = None) -> None:
    """
    Configure logging for the application.

    Args:
        verbose: If True, show INFO level messages
        debug: If True, show DEBUG level messages and also write them to a log file
        log_file: Override for the debug log location
    """
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        if isinstance(handler, logging.FileHandler):
            handler.close()

    # GitPython logs every command it runs at DEBUG; only show that with --debug
    logging.getLogger("git").setLevel(logging.DEBUG if debug else logging.WARNING)

    if debug:
        log_file = log_file or get_log_file()
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_file, mode='w')  # Overwrite each run
        except OSError as e:
            print(f"[logging] cannot write {log_file}: {e}", file=sys.stderr)
        else:
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(logging.Formatter(
                fmt='%(asctime)s - %(process)d - %(name)s - %(levelname)s - %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            ))
            root_logger.addHandler(file_handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)

    if debug:
        formatter = ColoredFormatter(
            fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%H:%M:%S',
            stream=sys.stderr,
        )
    else:
        formatter = ColoredFormatter(fmt='worktree: %(message)s', stream=sys.stderr)

    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)


def get_logger(name: str) -> logging.Logger:
    """Logger for a module of this package, named ``worktree.<module>``.

    ``git_worktree_keeper.services.registry`` becomes
    ``worktree.services.registry``, which keeps it apart from GitPython's
    own ``git`` loggers.
    """
    _, _, module = name.partition('git_worktree_keeper.')
    return logging.getLogger(f"{LOGGER_NAMESPACE}.{module or name}")
