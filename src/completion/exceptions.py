"""Exceptions for the completion client."""

from typing import Optional


class CompletionError(Exception):
    """Raised when the completion service does not return a reply."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
