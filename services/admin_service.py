"""Admin service - admin check, analytics and paginated listings.

All data comes from admin-only database functions; the backend enforces
who may call them.
"""

import logging

from pydantic import ValidationError as PydanticValidationError

from .base_service import BaseService
from .exceptions import BackendError, ResumeBuilderError
from .models import AdminAnalyticsResponse, AdminToolkit, AdminUser

logger = logging.getLogger(__name__)


class AdminService(BaseService):
    """Wraps the admin RPCs with response validation."""

    def is_admin(self) -> bool:
        """Whether the signed-in user is an admin.

        Failures are logged and reported as False.
        """
        try:
            return bool(self.backend.rpc("admin_me_is_admin"))
        except ResumeBuilderError as e:
            logger.error("Error checking admin status: %s", e)
            return False

    def get_analytics_summary(self, days: int = 30) -> AdminAnalyticsResponse:
        """Totals and day-bucketed series for the admin dashboard.

        Raises:
            BackendError: If the call fails or returns an unexpected shape.
        """
        data = self.backend.rpc("admin_analytics_summary", {"days": days})
        try:
            return AdminAnalyticsResponse.model_validate(data)
        except PydanticValidationError as e:
            logger.error("Unexpected analytics payload: %s", e)
            raise BackendError("admin_analytics_summary", "unexpected response shape") from e

    def get_users_list(
        self,
        search: str = "",
        plan_filter: str = "",
        limit: int = 25,
        offset: int = 0,
    ) -> list[AdminUser]:
        """One page of users, optionally filtered by text and plan."""
        data = self.backend.rpc(
            "admin_users_list",
            {
                "search": search,
                "plan_filter": plan_filter,
                "limit_param": limit,
                "offset_param": offset,
            },
        )
        return self._validate_rows("admin_users_list", data, AdminUser)

    def get_toolkits_list(
        self, search: str = "", limit: int = 25, offset: int = 0
    ) -> list[AdminToolkit]:
        """One page of saved toolkits, optionally filtered by text."""
        data = self.backend.rpc(
            "admin_toolkits_list",
            {"search": search, "limit_param": limit, "offset_param": offset},
        )
        return self._validate_rows("admin_toolkits_list", data, AdminToolkit)

    @staticmethod
    def _validate_rows(operation: str, data, model) -> list:
        try:
            return [model.model_validate(row) for row in data or []]
        except PydanticValidationError as e:
            logger.error("Unexpected %s payload: %s", operation, e)
            raise BackendError(operation, "unexpected response shape") from e
