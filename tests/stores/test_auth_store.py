"""Tests for AuthStore."""

from types import SimpleNamespace

import pytest

from services.exceptions import AuthenticationError, BackendError
from stores import AuthStore
from stores.auth_store import AuthStatus


def _session(user_id="user-1", email="jane@example.com", token="tok-1"):
    return SimpleNamespace(
        user=SimpleNamespace(id=user_id, email=email),
        access_token=token,
    )


class TestBootstrap:

    def test_starts_loading(self, mock_backend):
        assert AuthStore(mock_backend).state.status == AuthStatus.LOADING

    def test_authenticated_session(self, mock_backend):
        mock_backend.get_session.return_value = _session()
        store = AuthStore(mock_backend)

        state = store.bootstrap()

        assert state.status == AuthStatus.AUTHENTICATED
        assert state.user_id == "user-1"
        assert state.email == "jane@example.com"
        assert state.access_token == "tok-1"
        assert store.is_authenticated

    def test_no_session(self, mock_backend):
        mock_backend.get_session.return_value = None
        assert AuthStore(mock_backend).bootstrap().status == AuthStatus.UNAUTHENTICATED

    def test_failure_is_error_not_unauthenticated(self, mock_backend):
        mock_backend.get_session.side_effect = BackendError("auth.get_session", "network down")
        store = AuthStore(mock_backend)

        state = store.bootstrap()

        assert state.status == AuthStatus.ERROR
        assert "network down" in state.error
        assert not store.is_authenticated

    def test_refresh_recovers(self, mock_backend):
        mock_backend.get_session.side_effect = [
            BackendError("auth.get_session", "network down"),
            _session(),
        ]
        store = AuthStore(mock_backend)
        store.bootstrap()

        assert store.refresh().status == AuthStatus.AUTHENTICATED

    def test_subscribes_once(self, mock_backend):
        mock_backend.get_session.return_value = None
        store = AuthStore(mock_backend)
        store.bootstrap()
        store.refresh()
        assert mock_backend.on_auth_state_change.call_count == 1


class TestSignInOut:

    def test_sign_in(self, mock_backend):
        mock_backend.sign_in.return_value = _session(user_id="user-9")
        state = AuthStore(mock_backend).sign_in("jane@example.com", "pw")
        assert state.status == AuthStatus.AUTHENTICATED
        assert state.user_id == "user-9"

    def test_sign_in_rejected(self, mock_backend):
        mock_backend.sign_in.side_effect = AuthenticationError("Invalid login credentials")
        store = AuthStore(mock_backend)

        with pytest.raises(AuthenticationError):
            store.sign_in("jane@example.com", "wrong")

        assert store.state.status == AuthStatus.UNAUTHENTICATED
        assert "Invalid login" in store.state.error

    def test_sign_out(self, mock_backend):
        mock_backend.get_session.return_value = _session()
        store = AuthStore(mock_backend)
        store.bootstrap()

        assert store.sign_out().status == AuthStatus.UNAUTHENTICATED
        mock_backend.sign_out.assert_called_once()


class TestAuthEvents:

    def test_backend_events_update_state(self, mock_backend):
        mock_backend.get_session.return_value = None
        store = AuthStore(mock_backend)
        store.bootstrap()
        callback = mock_backend.on_auth_state_change.call_args[0][0]

        callback("SIGNED_IN", _session(user_id="user-5"))
        assert store.state.user_id == "user-5"

        callback("SIGNED_OUT", None)
        assert store.state.status == AuthStatus.UNAUTHENTICATED

    def test_close_unsubscribes(self, mock_backend):
        unsubscribe = mock_backend.on_auth_state_change.return_value
        mock_backend.get_session.return_value = None
        store = AuthStore(mock_backend)
        store.bootstrap()

        store.close()

        unsubscribe.assert_called_once()
