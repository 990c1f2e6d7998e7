"""Command-line interface for git-worktree-keeper"""

import os
import sys
from typing import Optional, Sequence

from rich.console import Console
from rich.markup import escape

from git_worktree_keeper.cli.args import build_parser, parse_args
from git_worktree_keeper.config import ConfigStore
from git_worktree_keeper.core import WorktreeKeeper
from git_worktree_keeper.exceptions import WorktreeKeeperError
from git_worktree_keeper.logging_config import get_logger, setup_logging

console = Console(stderr=True, highlight=False, soft_wrap=True, emoji=False)
logger = get_logger(__name__)


def _dispatch(keeper: WorktreeKeeper, parsed_args) -> int:
    command = parsed_args.command
    tail = list(getattr(parsed_args, "tail", []) or [])

    if command == "create":
        program = tail[0] if tail else None
        return keeper.create(parsed_args.name, program, tail[1:])
    if command == "switch":
        program = tail[0] if tail else None
        return keeper.switch(parsed_args.name, program, tail[1:])
    if command in ("list", "ls"):
        return keeper.list_worktrees()
    if command == "clear":
        return keeper.clear(shell=parsed_args.shell)
    if command == "init":
        return keeper.init_config()
    # Named tools: codex / claude
    return keeper.run_tool(command, parsed_args.action, parsed_args.name, tail)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point for the application."""
    parsed_args = parse_args(argv)

    if parsed_args.command is None:
        build_parser().print_help(sys.stderr)
        return 2

    setup_logging(verbose=parsed_args.verbose, debug=parsed_args.debug)
    logger.debug(f"Arguments: {vars(parsed_args)}")

    try:
        keeper = WorktreeKeeper(os.getcwd(), config_store=ConfigStore())
        return _dispatch(keeper, parsed_args)
    except WorktreeKeeperError as e:
        logger.debug(f"{type(e).__name__}: {e}")
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        if parsed_args.debug:
            console.print_exception()
        return e.exit_code
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        return 1


if __name__ == "__main__":
    sys.exit(main())
