"""Profile store: free-text identity fields persisted across sessions."""

from local_storage import LocalStorage
from services.models import ProfilePreferences

from .base import PersistedStore

PROFILE_STORAGE_KEY = "profile-preferences"


class ProfileStore(PersistedStore[ProfilePreferences]):
    """Holds display name, job title, north star and headline."""

    storage_key = PROFILE_STORAGE_KEY

    def __init__(self, storage: LocalStorage):
        super().__init__(storage, ProfilePreferences)

    @property
    def profile(self) -> ProfilePreferences:
        return self.state

    def update_profile(self, partial: dict) -> ProfilePreferences:
        self._set(self._merge(partial))
        return self.state

    def reset_profile(self) -> ProfilePreferences:
        self._set(ProfilePreferences())
        return self.state
