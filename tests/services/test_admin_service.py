"""Tests for AdminService."""

import pytest

from services.admin_service import AdminService
from services.exceptions import BackendError
from services.models import AdminAnalyticsResponse, AdminUser

ANALYTICS = {
    "totals": {"users": 10, "pro": 3, "free": 7, "toolkits_7d": 4, "toolkits_30d": 9, "active_7d": 5},
    "series": {
        "new_users_by_day": [{"day": "2026-10-18", "count": 2}],
        "toolkits_by_day": [{"day": "2026-10-18", "count": 1}],
    },
}

USER_ROW = {
    "id": "user-1",
    "email": "jane@example.com",
    "plan": "pro",
    "sub_status": "active",
    "created_at": "2026-01-01T00:00:00Z",
    "toolkits_count": 4,
}


@pytest.fixture
def admin(test_config, mock_backend):
    return AdminService(config=test_config, backend=mock_backend)


class TestIsAdmin:

    def test_true(self, admin, mock_backend):
        mock_backend.rpc.return_value = True
        assert admin.is_admin()
        mock_backend.rpc.assert_called_once_with("admin_me_is_admin")

    def test_failure_is_false(self, admin, mock_backend):
        mock_backend.rpc.side_effect = BackendError("admin_me_is_admin", "permission denied")
        assert admin.is_admin() is False


class TestAnalytics:

    def test_summary(self, admin, mock_backend):
        mock_backend.rpc.return_value = ANALYTICS

        summary = admin.get_analytics_summary(days=7)

        assert isinstance(summary, AdminAnalyticsResponse)
        assert summary.totals.pro == 3
        assert summary.series.new_users_by_day[0].count == 2
        mock_backend.rpc.assert_called_once_with("admin_analytics_summary", {"days": 7})

    def test_bad_shape(self, admin, mock_backend):
        mock_backend.rpc.return_value = {"totals": {}}
        with pytest.raises(BackendError):
            admin.get_analytics_summary()


class TestListings:

    def test_users(self, admin, mock_backend):
        mock_backend.rpc.return_value = [USER_ROW]

        users = admin.get_users_list(search="jane", plan_filter="pro", limit=10, offset=20)

        assert users == [AdminUser.model_validate(USER_ROW)]
        mock_backend.rpc.assert_called_once_with(
            "admin_users_list",
            {"search": "jane", "plan_filter": "pro", "limit_param": 10, "offset_param": 20},
        )

    def test_empty_response(self, admin, mock_backend):
        mock_backend.rpc.return_value = None
        assert admin.get_toolkits_list() == []

    def test_toolkits_bad_row(self, admin, mock_backend):
        mock_backend.rpc.return_value = [{"id": "t-1"}]
        with pytest.raises(BackendError):
            admin.get_toolkits_list()
