"""Settings store: generation options persisted across sessions."""

from local_storage import LocalStorage
from services.models import Settings

from .base import PersistedStore

SETTINGS_STORAGE_KEY = "app-settings-storage"


class SettingsStore(PersistedStore[Settings]):
    """Holds mode, voice, format and the table/proofread toggles.

    Partial updates are merged against the current settings, so the record
    is always fully populated.
    """

    storage_key = SETTINGS_STORAGE_KEY

    def __init__(self, storage: LocalStorage):
        super().__init__(storage, Settings)

    @property
    def settings(self) -> Settings:
        return self.state

    def update_settings(self, partial: dict) -> Settings:
        """Merge a partial update and persist the result."""
        new_settings = self._merge(partial)
        self._set(new_settings)
        return self.state

    def reset_settings(self) -> Settings:
        """Restore the defaults."""
        self._set(Settings())
        return self.state
