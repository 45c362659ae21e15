"""Interactive command-line client for the media uploader."""
