"""Base service class with shared functionality.

No Rich imports, no console output. Services return structured data and
raise typed exceptions; clients are created on first use so a service
only needs configuration for the collaborators it actually calls.
"""

from __future__ import annotations

import logging

import backend_client
from claude_client import ClaudeClient
from config_loader import load_config

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class BaseService:
    """Base class for all services with shared functionality."""

    # Server-side services (billing webhooks) write profiles for any user.
    uses_service_role = False

    def __init__(
        self,
        config: dict | None = None,
        backend: backend_client.BackendClient | None = None,
        client: ClaudeClient | None = None,
    ):
        """Initialize the service.

        Args:
            config: Configuration dictionary. If None, loads from config.json.
            backend: BackendClient instance. If None, built from config on
                first use.
            client: ClaudeClient instance. If None, created on first use.
        """
        self.config = config or load_config()
        self._backend = backend
        self._client = client

    @property
    def backend(self) -> backend_client.BackendClient:
        """Supabase facade.

        Raises:
            ConfigurationError: If Supabase is not configured.
        """
        if self._backend is None:
            try:
                self._backend = backend_client.BackendClient.from_config(
                    self.config, service_role=self.uses_service_role
                )
            except ValueError as e:
                raise ConfigurationError(str(e)) from e
            logger.debug("Created backend client for %s", type(self).__name__)
        return self._backend

    @property
    def client(self) -> ClaudeClient:
        """Claude client.

        Raises:
            ConfigurationError: If ANTHROPIC_API_KEY is not set.
        """
        if self._client is None:
            model = self.config.get("generation", {}).get("model")
            try:
                self._client = ClaudeClient(model=model) if model else ClaudeClient()
            except ValueError as e:
                raise ConfigurationError(str(e)) from e
        return self._client
