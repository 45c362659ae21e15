"""CLI constants and configuration."""

from prompt_toolkit.styles import Style

COMMANDS = ["set-key", "upload", "play", "info", "delete", "config", "clear", "exit", "help"]

STYLE = Style.from_dict(
    {
        "prompt": "#2F80ED bold",
        "command": "#0088ff bold",
    }
)

BLUE = "\033[38;2;47;128;237m"
GREEN = "\033[32m"
RESET = "\033[0m"

LOGO = f"""{BLUE}
  __  __          _ _         _   _       _                 _
 |  \\/  | ___  __| (_) __ _  | | | |_ __ | | ___   __ _  __| |
 | |\\/| |/ _ \\/ _` | |/ _` | | | | | '_ \\| |/ _ \\ / _` |/ _` |
 | |  | |  __/ (_| | | (_| | | |_| | |_) | | (_) | (_| | (_| |
 |_|  |_|\\___|\\__,_|_|\\__,_|  \\___/| .__/|_|\\___/ \\__,_|\\__,_|
                                   |_|
{RESET}"""

WELCOME_TITLE = "Media Upload CLI - chunked video ingestion"
WELCOME_HELP = "Type 'help' for commands or 'exit' to quit.\n"

PROMPT_TEXT = "media> "

HELP_TEXT = """Available commands:
  set-key <api_key>                              Save the ingestion API key to the config file
  upload <file> <title> [description] [-- tags]  Upload a video in chunks
  play <video_id> <user_id>                      Get a playback URL for a viewer
  info <video_id>                                Show metadata of an uploaded video
  delete <video_id>                              Delete an uploaded video
  config                                         Show the active configuration
  clear                                          Clear screen and redisplay welcome message
  help                                           Show this help
  exit                                           Exit REPL

Quote titles and descriptions that contain spaces.
Examples:
  set-key 3f7c9a...
  upload lectures/week1.mp4 "Week 1 - Intro" "Course overview" -- physics intro
  play 7d1e2f40 user-42
  info 7d1e2f40
  delete 7d1e2f40

Any command can also be run once from the shell:
  media-upload [--debug] [--config PATH] upload week1.mp4 "Week 1"
"""

SUPPORTED_VIDEO_EXTENSIONS = (".mp4", ".mov", ".mkv", ".avi", ".webm", ".m4v", ".mpeg", ".mpg")

HISTORY_FILE = "~/.media-uploader/history"
