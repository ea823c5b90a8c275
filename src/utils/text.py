"""Text utility functions."""

from constants import TITLE_MAX_LENGTH


def derive_title(message: str, max_length: int = TITLE_MAX_LENGTH) -> str:
    """Build a conversation title from the first user message.

    The message is cut at ``max_length`` characters and ``...`` is appended
    only when something was cut.
    """
    if not message:
        return ""

    if len(message) <= max_length:
        return message

    return f"{message[:max_length]}..."


def safe_filename_part(value: str) -> str:
    """Replace characters that are not allowed in a download filename."""
    return "".join("_" if c in '\\/:*?"<>|\r\n' else c for c in value)
