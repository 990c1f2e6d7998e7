"""Command-line argument parsing for git-worktree-keeper."""

import argparse
import sys
from typing import List, Optional, Sequence, Tuple

from git_worktree_keeper.__version__ import __version__
from git_worktree_keeper.constants import BUILTIN_TOOL_ARGS, TOOL_DESCRIPTIONS

# Verbs whose trailing arguments are passed through untouched
TAIL_VERBS = ("create", "switch")
TOOL_ACTIONS = ("create", "switch")


def _tail_start(argv: Sequence[str]) -> Optional[int]:
    """Index of the first token after ``create``/``switch`` (plain or under a tool)."""
    i = 0
    while i < len(argv) and argv[i].startswith("-"):
        i += 1
    if i >= len(argv):
        return None
    verb = argv[i]
    if verb in TAIL_VERBS:
        return i + 1
    if verb in BUILTIN_TOOL_ARGS and i + 1 < len(argv) and argv[i + 1] in TOOL_ACTIONS:
        return i + 2
    return None


def split_tail(argv: Sequence[str]) -> Tuple[List[str], List[str]]:
    """Separate the words argparse should see from the pass-through tail.

    After the verb, the first token is the worktree name unless it starts
    with ``-``; everything after the name is the tail. A leading ``--`` means
    no name was given and the rest is the tail.
    """
    argv = list(argv)
    start = _tail_start(argv)
    if start is None or start >= len(argv):
        return argv, []

    head, rest = argv[:start], argv[start:]
    first = rest[0]
    if first in ("-h", "--help"):
        return argv, []
    if first == "--":
        return head, rest[1:]
    if not first.startswith("-"):
        tail = rest[1:]
        if tail[:1] == ["--"]:
            tail = tail[1:]
        return head + [first], tail
    return head, rest


def _add_tail_arguments(parser: argparse.ArgumentParser, name_required: bool, tail_help: str) -> None:
    if name_required:
        parser.add_argument("name", help="Worktree name")
    else:
        parser.add_argument(
            "name", nargs="?", help="Worktree name (default: next free <N>-wt)"
        )
    # Filled in by split_tail; declared so --help shows it
    parser.add_argument("tail", nargs=argparse.REMAINDER, metavar="...", help=tail_help)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="worktree",
        description="Create, enter, list and clear git worktrees kept under <repo>/.worktrees",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show verbose output")
    parser.add_argument(
        "--debug", action="store_true", help="Show debug information for troubleshooting"
    )
    parser.add_argument("--version", action="version", version=f"git-worktree-keeper {__version__}")

    subparsers = parser.add_subparsers(dest="command", metavar="<command>")

    create = subparsers.add_parser("create", help="Create a new worktree")
    _add_tail_arguments(create, False, "Command and arguments to run (default: your shell)")

    switch = subparsers.add_parser("switch", help="Switch to an existing worktree")
    _add_tail_arguments(switch, True, "Command and arguments to run (default: your shell)")

    subparsers.add_parser("list", aliases=["ls"], help="List existing worktrees")

    clear = subparsers.add_parser("clear", help="Clear all .worktrees worktrees")
    clear.add_argument(
        "--shell", action="store_true", help="Open a shell at the repository root afterwards"
    )

    for tool, description in TOOL_DESCRIPTIONS.items():
        tool_parser = subparsers.add_parser(tool, help=description)
        actions = tool_parser.add_subparsers(dest="action", metavar="<action>")
        actions.required = True
        tool_create = actions.add_parser("create", help=f"Create a worktree and run {tool} in it")
        _add_tail_arguments(tool_create, False, f"Extra arguments for {tool}")
        tool_switch = actions.add_parser("switch", help=f"Run {tool} in an existing worktree")
        _add_tail_arguments(tool_switch, True, f"Extra arguments for {tool}")

    subparsers.add_parser("init", help="Initialize configuration")

    return parser


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments.

    The pass-through tail ends up in ``args.tail`` exactly as typed.
    """
    if argv is None:
        argv = sys.argv[1:]
    head, tail = split_tail(argv)
    args = build_parser().parse_args(head)
    if hasattr(args, "tail"):
        args.tail = tail
    return args
