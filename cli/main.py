"""CLI entry point: interactive REPL, or one command passed on the command line."""

import os
import shlex
import sys
from typing import List, Optional

from common.logging_config import setup_logging
from cli.commands import use_config
from cli.constants import HELP_TEXT
from cli.parser import ParseError, parse_command
from cli.repl import execute_command, repl_loop
from uploader.config import Config


def _pop_option(args: List[str], name: str) -> Optional[str]:
    """Remove '<name> <value>' or '<name>=<value>' from args and return the value."""
    for i, arg in enumerate(args):
        if arg == name:
            if i + 1 >= len(args):
                raise ParseError(f"{name} requires a value")
            value = args[i + 1]
            del args[i:i + 2]
            return value
        if arg.startswith(f"{name}="):
            del args[i]
            return arg.split("=", 1)[1]
    return None


def run_once(args: List[str]) -> int:
    """
    Execute a single command, e.g. `media-upload upload clip.mp4 "Week 1"`.

    Returns:
        Process exit code: 0 on success, 1 if the command failed, 2 on bad syntax
    """
    if args == ["help"]:
        print(HELP_TEXT)
        return 0

    try:
        cmd_obj = parse_command(shlex.join(args))
    except ParseError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    succeeded, message = execute_command(cmd_obj)
    print(message)
    return 0 if succeeded else 1


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for CLI."""
    args = list(sys.argv[1:] if argv is None else argv)

    debug = '--debug' in args
    if debug:
        args.remove('--debug')
    log_level = 'DEBUG' if debug else os.getenv('LOG_LEVEL', 'WARNING')

    setup_logging('uploader', log_level=log_level)
    logger = setup_logging('cli', log_level=log_level)

    try:
        config_path = _pop_option(args, '--config')
    except ParseError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)
    if config_path:
        logger.debug(f"Using config file {config_path}")
        use_config(Config(config_path))

    if args:
        sys.exit(run_once(args))

    logger.info("CLI starting...")
    try:
        repl_loop()
    except Exception as e:
        logger.error(f"CLI error: {e}", exc_info=True)
        raise
    finally:
        logger.info("CLI exiting")


if __name__ == "__main__":
    main()
