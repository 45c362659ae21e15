"""Custom completer for the media upload CLI with video file autocompletion."""

from pathlib import Path
from typing import Iterable

from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.document import Document

from cli.constants import COMMANDS, SUPPORTED_VIDEO_EXTENSIONS


class MediaCompleter(Completer):
    """
    Custom completer that provides:
    - Command name completion for the first token
    - Video file path completion for the <file> argument of 'upload'
    """

    def get_completions(
        self, document: Document, complete_event
    ) -> Iterable[Completion]:
        """
        Generate completions based on cursor position and context.

        For the first token, completes command names.
        For the first 'upload' argument, completes directories and video files.
        """
        text = document.text_before_cursor
        tokens = text.split()

        is_typing_new_token = text.endswith(" ") or not tokens

        if not tokens or (len(tokens) == 1 and not is_typing_new_token):
            yield from self._complete_commands(tokens[0] if tokens else "")
            return

        if tokens[0].lower() != "upload":
            return

        argument_index = len(tokens) if is_typing_new_token else len(tokens) - 1
        if argument_index != 1:
            return

        current_word = "" if is_typing_new_token else tokens[-1]
        yield from self._complete_video_files(current_word)

    def _complete_commands(self, partial: str) -> Iterable[Completion]:
        """Complete command names matching the partial input."""
        partial_lower = partial.lower()
        for cmd in COMMANDS:
            if cmd.startswith(partial_lower):
                yield Completion(cmd, start_position=-len(partial))

    def _complete_video_files(self, partial: str) -> Iterable[Completion]:
        """
        Complete paths relative to the current directory.

        Directories are offered with a trailing slash so the user can descend;
        files are offered only when their extension is a supported video type.
        """
        if partial.endswith("/"):
            directory_part, name_part = partial, ""
        else:
            directory_part = partial.rsplit("/", 1)[0] + "/" if "/" in partial else ""
            name_part = partial.rsplit("/", 1)[-1]

        search_dir = Path(directory_part).expanduser() if directory_part else Path.cwd()
        if not search_dir.is_dir():
            return

        entries = []
        for item in search_dir.iterdir():
            if item.name.startswith(".") or not item.name.lower().startswith(name_part.lower()):
                continue
            if item.is_dir():
                entries.append(f"{directory_part}{item.name}/")
            elif item.suffix.lower() in SUPPORTED_VIDEO_EXTENSIONS:
                entries.append(f"{directory_part}{item.name}")

        for entry in sorted(entries):
            yield Completion(entry, start_position=-len(partial))
