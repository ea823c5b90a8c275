"""Shared model primitives."""

from models.base import BaseDocument, PydanticUUID, utc_now

__all__ = ["BaseDocument", "PydanticUUID", "utc_now"]
