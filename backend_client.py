"""Supabase client wrapper for auth, RPC and table calls.

Every call goes through the official supabase client. Failures are logged
and re-raised as typed exceptions so callers never see library-specific
errors.
"""

import logging
from typing import Any, Callable

from supabase import Client, create_client

from config_loader import get_supabase_settings, load_config
from services.exceptions import AuthenticationError, BackendError, ProfileNotFoundError
from services.models import SubscriptionProfile

logger = logging.getLogger(__name__)

PROFILES_TABLE = "profiles"


class BackendClient:
    """Thin typed facade over a supabase Client."""

    def __init__(self, url: str = "", key: str = "", client: Client | None = None):
        """Initialize the backend client.

        Args:
            url: Supabase project URL.
            key: Anon or service-role key.
            client: Pre-built supabase Client (tests pass a mock).
        """
        self._client = client or create_client(url, key)

    @classmethod
    def from_config(cls, config: dict | None = None, service_role: bool = False) -> "BackendClient":
        """Build a client from config.json / environment settings.

        Raises:
            ValueError: If Supabase is not configured.
        """
        url, key = get_supabase_settings(config or load_config(), service_role=service_role)
        return cls(url, key)

    @property
    def client(self) -> Client:
        return self._client

    # =========================================================================
    # Auth
    # =========================================================================

    def get_session(self) -> Any | None:
        """Current session, or None when signed out.

        Raises:
            BackendError: If the session cannot be read.
        """
        try:
            return self._client.auth.get_session()
        except Exception as e:
            logger.error("get_session failed: %s", e)
            raise BackendError("auth.get_session", str(e)) from e

    def sign_in(self, email: str, password: str) -> Any:
        """Sign in with email and password.

        Returns:
            The new session.

        Raises:
            AuthenticationError: If the credentials are rejected.
        """
        try:
            response = self._client.auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        except Exception as e:
            logger.warning("Sign-in failed for %s: %s", email, e)
            raise AuthenticationError(f"Sign-in failed: {e}") from e
        return response.session

    def sign_up(self, email: str, password: str) -> Any:
        """Create an account. Returns the session (None until confirmed)."""
        try:
            response = self._client.auth.sign_up({"email": email, "password": password})
        except Exception as e:
            logger.warning("Sign-up failed for %s: %s", email, e)
            raise AuthenticationError(f"Sign-up failed: {e}") from e
        return response.session

    def sign_out(self) -> None:
        try:
            self._client.auth.sign_out()
        except Exception as e:
            logger.error("sign_out failed: %s", e)
            raise BackendError("auth.sign_out", str(e)) from e

    def get_user(self, access_token: str) -> Any:
        """Resolve the user behind an access token.

        Raises:
            AuthenticationError: If the token is invalid or has no user.
        """
        try:
            response = self._client.auth.get_user(access_token)
        except Exception as e:
            raise AuthenticationError(f"Authentication error: {e}") from e

        user = getattr(response, "user", None)
        if user is None:
            raise AuthenticationError("User not authenticated")
        return user

    def on_auth_state_change(self, callback: Callable[[str, Any], None]) -> Callable[[], None]:
        """Subscribe to auth events. Returns a function that unsubscribes."""
        subscription = self._client.auth.on_auth_state_change(callback)
        return subscription.unsubscribe

    def set_access_token(self, access_token: str) -> None:
        """Run table queries as the user behind access_token."""
        self._client.postgrest.auth(access_token)

    # =========================================================================
    # RPC
    # =========================================================================

    def rpc(self, name: str, params: dict | None = None) -> Any:
        """Call a database function and return its data.

        Raises:
            BackendError: If the call fails.
        """
        try:
            response = self._client.rpc(name, params or {}).execute()
        except Exception as e:
            logger.error("RPC %s failed: %s", name, e)
            raise BackendError(name, str(e)) from e
        return response.data

    # =========================================================================
    # Profiles
    # =========================================================================

    def find_profile(self, column: str, value: str) -> dict | None:
        """First profile row where column == value, or None."""
        try:
            response = (
                self._client.table(PROFILES_TABLE)
                .select("*")
                .eq(column, value)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.error("Profile lookup by %s failed: %s", column, e)
            raise BackendError(f"{PROFILES_TABLE}.select", str(e)) from e
        return response.data[0] if response.data else None

    def get_profile(self, user_id: str) -> SubscriptionProfile:
        """Load a user's subscription profile.

        Raises:
            ProfileNotFoundError: If the user has no profile row.
        """
        row = self.find_profile("user_id", user_id)
        if row is None:
            raise ProfileNotFoundError(user_id)
        return SubscriptionProfile.model_validate(row)

    def update_profiles(self, column: str, value: str, values: dict) -> list[dict]:
        """Update every profile row where column == value.

        Returns:
            The updated rows (empty when nothing matched).
        """
        try:
            response = (
                self._client.table(PROFILES_TABLE)
                .update(values)
                .eq(column, value)
                .execute()
            )
        except Exception as e:
            logger.error("Profile update by %s failed: %s", column, e)
            raise BackendError(f"{PROFILES_TABLE}.update", str(e)) from e
        return response.data or []

    # =========================================================================
    # Tables
    # =========================================================================

    def select_rows(
        self,
        table: str,
        filters: dict[str, str],
        order_by: str | None = None,
        descending: bool = True,
    ) -> list[dict]:
        """Rows of a table matching every column == value filter.

        Raises:
            BackendError: If the query fails.
        """
        try:
            query = self._client.table(table).select("*")
            for column, value in filters.items():
                query = query.eq(column, value)
            if order_by:
                query = query.order(order_by, desc=descending)
            response = query.execute()
        except Exception as e:
            logger.error("Select on %s failed: %s", table, e)
            raise BackendError(f"{table}.select", str(e)) from e
        return response.data or []

    def insert_row(self, table: str, values: dict) -> dict:
        """Insert one row and return it as stored.

        Raises:
            BackendError: If the insert fails or returns nothing.
        """
        try:
            response = self._client.table(table).insert(values).execute()
        except Exception as e:
            logger.error("Insert into %s failed: %s", table, e)
            raise BackendError(f"{table}.insert", str(e)) from e
        if not response.data:
            raise BackendError(f"{table}.insert", "no row returned")
        return response.data[0]
