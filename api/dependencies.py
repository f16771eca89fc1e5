"""FastAPI dependency injection providers.

Singleton instances shared across all requests. This module is the
composition root for the API: stores, services and clients are built here
and handed to routers.
"""

from functools import lru_cache

from backend_client import BackendClient
from config_loader import (
    get_export_dir,
    get_generation_time_scale,
    get_min_input_chars,
    get_retention_months,
    get_storage_path,
    load_config,
)
from flow_router import ReturnToStore
from local_storage import LocalStorage
from services import (
    AdminService,
    BillingService,
    ErrorHandler,
    ExportService,
    GenerationService,
    VersionService,
)
from services.exceptions import ConfigurationError
from services.task_manager import TaskManager
from stores import (
    AppDataStore,
    AuthStore,
    OnboardingStore,
    ProfileStore,
    SettingsStore,
    UsageTracker,
)


@lru_cache()
def get_config() -> dict:
    """Cached config singleton."""
    return load_config()


# Module-level singletons
_storage: LocalStorage | None = None
_settings_store: SettingsStore | None = None
_profile_store: ProfileStore | None = None
_app_data_store: AppDataStore | None = None
_usage_tracker: UsageTracker | None = None
_backend: BackendClient | None = None
_auth_store: AuthStore | None = None
_task_manager: TaskManager | None = None
_error_handler: ErrorHandler | None = None


def get_storage() -> LocalStorage:
    """LocalStorage singleton."""
    global _storage
    if _storage is None:
        _storage = LocalStorage(get_storage_path(get_config()))
    return _storage


def get_settings_store() -> SettingsStore:
    global _settings_store
    if _settings_store is None:
        _settings_store = SettingsStore(get_storage())
    return _settings_store


def get_profile_store() -> ProfileStore:
    global _profile_store
    if _profile_store is None:
        _profile_store = ProfileStore(get_storage())
    return _profile_store


def get_generation_service() -> GenerationService:
    return GenerationService(config=get_config())


def get_app_data_store() -> AppDataStore:
    """AppDataStore singleton wired to the generation service."""
    global _app_data_store
    if _app_data_store is None:
        config = get_config()
        _app_data_store = AppDataStore(
            get_storage(),
            generator=get_generation_service().generate,
            settings_store=get_settings_store(),
            time_scale=get_generation_time_scale(config),
            min_input_chars=get_min_input_chars(config),
        )
    return _app_data_store


def get_usage_tracker() -> UsageTracker:
    global _usage_tracker
    if _usage_tracker is None:
        _usage_tracker = UsageTracker(
            get_storage(), retention_months=get_retention_months(get_config())
        )
    return _usage_tracker


def get_onboarding_store() -> OnboardingStore:
    return OnboardingStore(get_storage())


def get_return_to_store() -> ReturnToStore:
    return ReturnToStore(get_storage())


def get_backend_client() -> BackendClient:
    """Anon-key backend client singleton.

    Raises:
        ConfigurationError: If Supabase is not configured.
    """
    global _backend
    if _backend is None:
        try:
            _backend = BackendClient.from_config(get_config())
        except ValueError as e:
            raise ConfigurationError(str(e)) from e
    return _backend


def get_auth_store() -> AuthStore:
    """AuthStore singleton, bootstrapped on first use."""
    global _auth_store
    if _auth_store is None:
        _auth_store = AuthStore(get_backend_client())
        _auth_store.bootstrap()
    return _auth_store


def get_task_manager() -> TaskManager:
    """TaskManager singleton."""
    global _task_manager
    if _task_manager is None:
        _task_manager = TaskManager()
    return _task_manager


def get_error_handler() -> ErrorHandler:
    global _error_handler
    if _error_handler is None:
        _error_handler = ErrorHandler()
    return _error_handler


def get_admin_service() -> AdminService:
    # Admin RPCs run as the signed-in user, so share the session's client.
    return AdminService(config=get_config(), backend=get_backend_client())


def get_billing_service() -> BillingService:
    return BillingService(config=get_config())


def get_export_service() -> ExportService:
    return ExportService(get_export_dir(get_config()))


def get_version_service() -> VersionService:
    # Résumé tables are read and written as the signed-in user.
    return VersionService(config=get_config(), backend=get_backend_client())


def reset_singletons() -> None:
    """Reset all singletons (for testing)."""
    global _storage, _settings_store, _profile_store, _app_data_store
    global _usage_tracker, _backend, _auth_store, _task_manager, _error_handler
    if _auth_store is not None:
        _auth_store.close()
    _storage = None
    _settings_store = None
    _profile_store = None
    _app_data_store = None
    _usage_tracker = None
    _backend = None
    _auth_store = None
    _task_manager = None
    _error_handler = None
    get_config.cache_clear()
