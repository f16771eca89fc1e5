"""Shared fixtures for API tests."""

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from api import dependencies as deps
from api.app import create_app
from api.auth import get_current_profile, verify_api_key
from flow_router import ReturnToStore
from services import AdminService, BillingService, ExportService, VersionService
from services.task_manager import TaskManager
from stores import (
    AppDataStore,
    AuthStore,
    OnboardingStore,
    ProfileStore,
    SettingsStore,
    UsageTracker,
)


@pytest.fixture
def api_key():
    """Fixed API key for testing."""
    return "test-api-key-12345"


@pytest.fixture
def settings_store(storage):
    return SettingsStore(storage)


@pytest.fixture
def app_data_store(storage, settings_store, sample_result):
    return AppDataStore(
        storage,
        generator=lambda params: sample_result,
        settings_store=settings_store,
        time_scale=0,
        min_input_chars=50,
    )


@pytest.fixture
def usage_tracker(storage):
    return UsageTracker(storage)


@pytest.fixture
def task_manager():
    tm = TaskManager()
    yield tm
    tm.shutdown()


@pytest.fixture
def auth_store(mock_backend):
    return AuthStore(mock_backend)


@pytest.fixture
def current_profile():
    """Mutable holder for the profile the API sees for the caller."""
    return {"profile": None}


@pytest.fixture
def export_dir(tmp_path) -> Path:
    return tmp_path / "exports"


@pytest.fixture
def app(
    test_config,
    storage,
    settings_store,
    app_data_store,
    usage_tracker,
    task_manager,
    auth_store,
    mock_backend,
    current_profile,
    export_dir,
    api_key,
):
    """Create a FastAPI test app with injected dependencies."""
    deps.reset_singletons()
    application = create_app()

    overrides = {
        deps.get_config: lambda: test_config,
        deps.get_storage: lambda: storage,
        deps.get_settings_store: lambda: settings_store,
        deps.get_profile_store: lambda: ProfileStore(storage),
        deps.get_app_data_store: lambda: app_data_store,
        deps.get_usage_tracker: lambda: usage_tracker,
        deps.get_onboarding_store: lambda: OnboardingStore(storage),
        deps.get_return_to_store: lambda: ReturnToStore(storage),
        deps.get_task_manager: lambda: task_manager,
        deps.get_backend_client: lambda: mock_backend,
        deps.get_auth_store: lambda: auth_store,
        deps.get_admin_service: lambda: AdminService(config=test_config, backend=mock_backend),
        deps.get_billing_service: lambda: BillingService(config=test_config, backend=mock_backend),
        deps.get_export_service: lambda: ExportService(export_dir),
        deps.get_version_service: lambda: VersionService(config=test_config, backend=mock_backend),
        get_current_profile: lambda: current_profile["profile"],
    }
    application.dependency_overrides.update(overrides)

    # Override auth to accept test key
    async def _verify_test_key():
        return api_key

    application.dependency_overrides[verify_api_key] = _verify_test_key

    yield application
    deps.reset_singletons()


@pytest.fixture
def client(app):
    """Create a test client."""
    return TestClient(app)


@pytest.fixture
def auth_headers(api_key):
    """Headers with API key."""
    return {"X-API-Key": api_key}


@pytest.fixture
def ready_inputs(client, auth_headers, sample_resume, sample_job_description):
    """Builder inputs long enough to generate."""
    resp = client.patch(
        "/api/v1/inputs",
        json={"resume_text": sample_resume, "job_text": sample_job_description},
        headers=auth_headers,
    )
    assert resp.status_code == 200
    return resp.json()
