"""Shared test fixtures for Resume Builder tests."""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from config_loader import get_storage_path
from local_storage import LocalStorage
from services.models import (
    InterviewToolkit,
    OutputMetadata,
    Plan,
    ResumeGenerationResult,
    SubscriptionProfile,
)


SAMPLE_RESUME = """# Jane Doe
Senior Software Engineer

## Experience
- Led migration of payments platform to Kubernetes, cutting deploy time by 60%
- Mentored six engineers across two product teams
"""

SAMPLE_JOB = """Staff Engineer, Payments
We are hiring a staff engineer to own the reliability of our payments platform.
Requirements: Kubernetes, Python, distributed systems, mentoring.
"""


@pytest.fixture
def tmp_data_dir(tmp_path):
    """Create a temporary data directory."""
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    return data_dir


@pytest.fixture
def test_config(tmp_data_dir):
    """Create a test configuration dictionary."""
    return {
        "app": {"name": "Resume Builder", "site_url": "https://resume.example.com"},
        "storage": {"data_dir": str(tmp_data_dir), "file": "local-storage.json"},
        "generation": {"time_scale": 0, "min_input_chars": 50, "model": "test-model"},
        "usage": {
            "retention_months": 3,
            "free_limits": {
                "resumeGenerations": 3,
                "coverLetterGenerations": 3,
                "highlightGenerations": 3,
                "interviewToolkitGenerations": 1,
            },
        },
        "supabase": {
            "url": "https://test.supabase.co",
            "anon_key": "anon-key",
            "service_role_key": "service-role-key",
        },
        "stripe": {
            "secret_key": "sk_test_123",
            "webhook_secret": "whsec_test",
            "price_pro": "",
            "api_version": "2023-10-16",
            "product_name": "Resume Builder Pro",
            "product_description": "Unlimited resumes",
            "unit_amount": 2000,
            "currency": "usd",
        },
        "logging": {"level": "DEBUG"},
    }


@pytest.fixture
def storage(test_config):
    """LocalStorage backed by a file in the temporary data directory."""
    return LocalStorage(get_storage_path(test_config))


@pytest.fixture
def fixed_now():
    return datetime(2026, 10, 19, 12, 0, 0)


@pytest.fixture
def clock(fixed_now):
    return lambda: fixed_now


@pytest.fixture
def sample_resume():
    return SAMPLE_RESUME


@pytest.fixture
def sample_job_description():
    return SAMPLE_JOB


@pytest.fixture
def sample_result():
    """A complete generation result."""
    return ResumeGenerationResult(
        final_resume="# Jane Doe\n\nStaff-ready payments engineer.",
        cover_letter="Dear hiring manager, ...",
        recruiter_highlights=["Cut deploy time 60%", "Mentored six engineers"],
        interview_toolkit=InterviewToolkit(
            questions=["Tell me about the payments migration"],
            follow_up_email="Thank you for your time.",
            skill_gaps=["PCI compliance"],
        ),
        weekly_kpi_tracker="Applications Sent: ___ / 5",
        grammar_score=88,
        metadata=OutputMetadata(
            phase="Complete", optimization_score=4, keywords_matched=12, word_count=7
        ),
    )


@pytest.fixture
def mock_claude_client():
    """Create a mock Claude client that returns predictable responses."""
    client = MagicMock()
    client.complete.return_value = "Mock response"
    client.get_token_usage.return_value = {
        "input_tokens": 100,
        "output_tokens": 50,
        "total_tokens": 150,
    }
    return client


@pytest.fixture
def mock_backend():
    """A MagicMock standing in for BackendClient."""
    backend = MagicMock()
    backend.on_auth_state_change.return_value = MagicMock()
    return backend


@pytest.fixture
def pro_profile():
    return SubscriptionProfile(
        id="p-1",
        user_id="user-1",
        email="jane@example.com",
        stripe_customer_id="cus_123",
        plan=Plan.PRO,
        sub_status="active",
        current_period_end=datetime(2030, 1, 1, tzinfo=timezone.utc),
    )


@pytest.fixture
def free_profile():
    return SubscriptionProfile(id="p-2", user_id="user-2", email="sam@example.com")
