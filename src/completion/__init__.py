"""Client for the external chat-completion API."""

from completion.client import CompletionClient, TranscriptEntry
from completion.exceptions import CompletionError

__all__ = ["CompletionClient", "CompletionError", "TranscriptEntry"]
