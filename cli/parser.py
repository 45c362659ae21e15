"""Command parser for CLI input."""

import shlex

from cli.models import (
    CommandRequest,
    ConfigCommand,
    DeleteCommand,
    InfoCommand,
    PlayCommand,
    SetKeyCommand,
    UploadCommand,
)


class ParseError(Exception):
    """Raised when command parsing fails."""

    pass


def parse_command(input_line: str) -> CommandRequest:
    """Parse user input into a CommandRequest object.

    Args:
        input_line: Raw user input from REPL

    Returns:
        CommandRequest object (one of SetKey/Upload/Play/Info/Delete/Config)

    Raises:
        ParseError: If command syntax is invalid
    """
    if not input_line.strip():
        raise ParseError("Empty command")

    try:
        tokens = shlex.split(input_line)
    except ValueError as e:
        raise ParseError(f"Invalid syntax: {e}")

    if not tokens:
        raise ParseError("Empty command")

    command_name = tokens[0]

    if command_name == "upload":
        return _parse_upload(tokens[1:])
    elif command_name == "play":
        return _parse_play(tokens[1:])
    elif command_name == "info":
        return InfoCommand(video_id=_single_id("info", "<video_id>", tokens[1:]))
    elif command_name == "delete":
        return DeleteCommand(video_id=_single_id("delete", "<video_id>", tokens[1:]))
    elif command_name == "set-key":
        return SetKeyCommand(api_key=_single_id("set-key", "<api_key>", tokens[1:]))
    elif command_name == "config":
        if len(tokens) > 1:
            raise ParseError("config takes no arguments")
        return ConfigCommand()
    else:
        raise ParseError(f"Unknown command: {command_name}")


def _parse_upload(args: list[str]) -> UploadCommand:
    """Parse 'upload <file> <title> [description] [-- tag ...]' command."""
    separator_index = _find_separator(args)

    if separator_index == -1:
        positional = args
        tags: list[str] = []
    else:
        positional = args[:separator_index]
        tags = args[separator_index + 1:]

    if len(positional) < 2:
        raise ParseError("upload requires <file> and <title>")
    if len(positional) > 3:
        raise ParseError("upload takes <file> <title> [description]; quote values with spaces and list tags after '--'")
    if separator_index != -1 and not tags:
        raise ParseError("upload requires at least one tag after '--'")

    file_path, title = positional[0], positional[1]
    description = positional[2] if len(positional) == 3 else ""

    if not title.strip():
        raise ParseError("upload requires a non-empty title")

    return UploadCommand(file_path=file_path, title=title, description=description, tags=tuple(tags))


def _parse_play(args: list[str]) -> PlayCommand:
    """Parse 'play <video_id> <user_id>' command."""
    if len(args) != 2:
        raise ParseError("play requires exactly 2 arguments: <video_id> <user_id>")

    video_id, user_id = args
    return PlayCommand(video_id=video_id, user_id=user_id)


def _single_id(command_name: str, placeholder: str, args: list[str]) -> str:
    if len(args) != 1:
        raise ParseError(f"{command_name} requires exactly 1 argument: {placeholder}")
    return args[0]


def _find_separator(args: list[str]) -> int:
    """Find separator '--' in args, return index or -1."""
    try:
        return args.index("--")
    except ValueError:
        return -1
