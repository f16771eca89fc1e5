"""Client-side state containers persisted to local storage."""

from .app_data import AppDataStore, select_generated_resume
from .auth_store import AuthStore
from .onboarding import OnboardingStore
from .profile_store import ProfileStore
from .settings_store import SettingsStore
from .usage_tracker import UsageTracker

__all__ = [
    "AppDataStore",
    "AuthStore",
    "OnboardingStore",
    "ProfileStore",
    "SettingsStore",
    "UsageTracker",
    "select_generated_resume",
]
