"""Explicit per-request context objects."""

from dataclasses import dataclass

from conversation_store.models.profile import Profile


@dataclass(frozen=True)
class UserContext:
    """The authenticated caller and their settings for one request."""

    user_id: str
    profile: Profile

    @property
    def api_key(self):
        return self.profile.api_key

    @property
    def model(self) -> str:
        return self.profile.selected_model

    @property
    def theme(self):
        return self.profile.theme
