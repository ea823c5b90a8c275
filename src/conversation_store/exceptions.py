"""Exceptions for conversation store operations."""


class PersistenceError(Exception):
    """Base exception for conversation store errors."""

    pass


class ConversationNotFoundError(PersistenceError):
    """Raised when a conversation is not found."""

    pass


class InvalidConversationError(PersistenceError):
    """Raised when a conversation operation fails."""

    pass


class InvalidMessageError(PersistenceError):
    """Raised when a message operation fails."""

    pass


class InvalidProfileError(PersistenceError):
    """Raised when profile data is invalid or a profile operation fails."""

    pass


class UnknownModelError(InvalidProfileError):
    """Raised when a profile update selects a model that is not offered."""

    pass
