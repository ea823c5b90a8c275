"""Profile model for per-user settings."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from constants import DEFAULT_MODEL
from models.base import utc_now


class Theme(str, Enum):
    """UI theme preference."""

    LIGHT = "light"
    DARK = "dark"

    def toggled(self) -> "Theme":
        return Theme.DARK if self is Theme.LIGHT else Theme.LIGHT


class Profile(BaseModel):
    """Per-user settings: completion credential, model and theme."""

    user_id: str = Field(..., alias="_id", description="Owning user identifier")
    api_key: Optional[str] = Field(default=None, description="Completion service credential")
    selected_model: str = Field(default=DEFAULT_MODEL, description="Model used for completions")
    theme: Theme = Field(default=Theme.LIGHT, description="UI theme preference")
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    model_config = {"populate_by_name": True, "from_attributes": True}

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key)
