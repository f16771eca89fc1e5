"""Per-user onboarding-completion flag."""

from local_storage import LocalStorage

ONBOARDING_STORAGE_KEY = "bestdarnresume_onboarding_completed"


class OnboardingStore:
    """Remembers which users finished (or skipped) the onboarding tour."""

    def __init__(self, storage: LocalStorage):
        self.storage = storage

    @staticmethod
    def _key(user_id: str) -> str:
        return f"{ONBOARDING_STORAGE_KEY}_{user_id}"

    def is_completed(self, user_id: str) -> bool:
        return self.storage.get_item(self._key(user_id)) == "true"

    def complete(self, user_id: str) -> None:
        self.storage.set_item(self._key(user_id), "true")

    def reset(self, user_id: str) -> None:
        self.storage.remove_item(self._key(user_id))
