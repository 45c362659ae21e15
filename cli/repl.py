"""REPL with prompt_toolkit for user interaction."""

import os
import sys
from typing import Callable, Dict, Tuple

from prompt_toolkit import PromptSession
from prompt_toolkit.history import FileHistory, InMemoryHistory

from cli.commands import (
    CommandFailed,
    handle_config,
    handle_delete,
    handle_info,
    handle_play,
    handle_set_key,
    handle_upload,
)
from cli.completer import MediaCompleter
from cli.constants import (
    HELP_TEXT,
    HISTORY_FILE,
    LOGO,
    PROMPT_TEXT,
    STYLE,
    WELCOME_HELP,
    WELCOME_TITLE,
)
from cli.models import (
    CommandRequest,
    ConfigCommand,
    DeleteCommand,
    InfoCommand,
    PlayCommand,
    SetKeyCommand,
    UploadCommand,
)
from cli.parser import ParseError, parse_command
from common.logging_config import get_logger

logger = get_logger(__name__)

HANDLERS: Dict[type, Callable[..., str]] = {
    UploadCommand: handle_upload,
    PlayCommand: handle_play,
    InfoCommand: handle_info,
    DeleteCommand: handle_delete,
    SetKeyCommand: handle_set_key,
    ConfigCommand: handle_config,
}


def clear_screen() -> None:
    """Clear the terminal screen (cross-platform)."""
    os.system("cls" if sys.platform == "win32" else "clear")


def show_welcome() -> None:
    """Display logo and welcome banner."""
    print(LOGO)
    print(WELCOME_TITLE)
    print(WELCOME_HELP)


def execute_command(cmd_obj: CommandRequest) -> Tuple[bool, str]:
    """
    Run the handler for a parsed command.

    Returns:
        (succeeded, message to show the user)
    """
    handler = HANDLERS.get(type(cmd_obj))
    if handler is None:
        return False, f"Unknown command type: {type(cmd_obj).__name__}"
    try:
        return True, handler(cmd_obj)
    except CommandFailed as e:
        logger.debug(f"{type(cmd_obj).__name__} failed: {e}")
        return False, str(e)


def dispatch_command(cmd_obj: CommandRequest) -> str:
    """Dispatch parsed command to appropriate handler."""
    return execute_command(cmd_obj)[1]


def _history():
    """Persist prompt history next to the config file, in memory if that is not writable."""
    history_path = os.path.expanduser(HISTORY_FILE)
    try:
        os.makedirs(os.path.dirname(history_path), exist_ok=True)
        return FileHistory(history_path)
    except OSError as e:
        logger.debug(f"Prompt history not persisted: {e}")
        return InMemoryHistory()


def repl_loop() -> None:
    """Start interactive REPL with prompt_toolkit."""
    session: PromptSession = PromptSession(
        completer=MediaCompleter(), history=_history(), style=STYLE
    )

    clear_screen()
    show_welcome()

    while True:
        try:
            user_input = session.prompt([("class:prompt", PROMPT_TEXT)]).strip()
        except KeyboardInterrupt:
            continue
        except EOFError:
            print("\nGoodbye!")
            break

        if not user_input:
            continue
        if user_input == "exit":
            print("Goodbye!")
            break
        if user_input == "help":
            print(HELP_TEXT)
            continue
        if user_input == "clear":
            clear_screen()
            show_welcome()
            continue

        try:
            print(dispatch_command(parse_command(user_input)))
        except ParseError as e:
            print(f"Error: {e}")
