"""Auth store: the current session as an explicit state machine.

A failed session check lands in `error`, which is distinct from
`unauthenticated` so callers can offer a retry instead of a sign-in form.
"""

import logging
from enum import Enum
from typing import Any, Callable

from pydantic import BaseModel

from backend_client import BackendClient
from services.exceptions import ResumeBuilderError

from .base import Store

logger = logging.getLogger(__name__)


class AuthStatus(str, Enum):
    LOADING = "loading"
    AUTHENTICATED = "authenticated"
    UNAUTHENTICATED = "unauthenticated"
    ERROR = "error"


class AuthState(BaseModel):
    status: AuthStatus = AuthStatus.LOADING
    user_id: str | None = None
    email: str | None = None
    access_token: str | None = None
    error: str | None = None


def _state_from_session(session: Any | None) -> AuthState:
    user = getattr(session, "user", None) if session is not None else None
    if user is None:
        return AuthState(status=AuthStatus.UNAUTHENTICATED)
    return AuthState(
        status=AuthStatus.AUTHENTICATED,
        user_id=str(getattr(user, "id", "") or "") or None,
        email=getattr(user, "email", None),
        access_token=getattr(session, "access_token", None),
    )


class AuthStore(Store[AuthState]):
    """Tracks the session reported by the backend client."""

    def __init__(self, backend: BackendClient):
        super().__init__(AuthState())
        self.backend = backend
        self._unsubscribe_backend: Callable[[], None] | None = None

    @property
    def is_authenticated(self) -> bool:
        return self._state.status == AuthStatus.AUTHENTICATED

    def bootstrap(self) -> AuthState:
        """Read the current session and start listening for auth events.

        Returns:
            The resulting state. Failures are recorded, not raised.
        """
        self._set(AuthState(status=AuthStatus.LOADING))

        if self._unsubscribe_backend is None:
            try:
                self._unsubscribe_backend = self.backend.on_auth_state_change(
                    self._on_auth_event
                )
            except Exception as e:
                logger.warning("Could not subscribe to auth events: %s", e)

        try:
            session = self.backend.get_session()
        except ResumeBuilderError as e:
            logger.error("Session check failed: %s", e)
            self._set(AuthState(status=AuthStatus.ERROR, error=str(e)))
            return self.state

        self._set(_state_from_session(session))
        return self.state

    def refresh(self) -> AuthState:
        """Retry the session check after an error."""
        return self.bootstrap()

    def sign_in(self, email: str, password: str) -> AuthState:
        """Sign in and record the new session.

        Raises:
            AuthenticationError: If the credentials are rejected.
        """
        try:
            session = self.backend.sign_in(email, password)
        except ResumeBuilderError as e:
            self._set(AuthState(status=AuthStatus.UNAUTHENTICATED, error=str(e)))
            raise
        self._set(_state_from_session(session))
        return self.state

    def sign_out(self) -> AuthState:
        self.backend.sign_out()
        self._set(AuthState(status=AuthStatus.UNAUTHENTICATED))
        return self.state

    def close(self) -> None:
        """Stop listening for auth events."""
        if self._unsubscribe_backend is not None:
            self._unsubscribe_backend()
            self._unsubscribe_backend = None

    def _on_auth_event(self, event: str, session: Any | None) -> None:
        logger.debug("Auth event: %s", event)
        self._set(_state_from_session(session))
