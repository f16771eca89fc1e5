"""API authentication.

Local endpoints use an API key that is generated on first server start,
stored in <data_dir>/.api-key and passed via the X-API-Key header.
Endpoints that act for a signed-in backend user additionally read a
Supabase access token from the Authorization: Bearer header.
"""

import logging
import secrets
from pathlib import Path

from fastapi import Depends, HTTPException, Security
from fastapi.security import APIKeyHeader, HTTPAuthorizationCredentials, HTTPBearer

from config_loader import get_data_dir
from services.exceptions import ProfileNotFoundError
from services.models import SubscriptionProfile

from .dependencies import get_backend_client, get_config

logger = logging.getLogger(__name__)

API_KEY_FILENAME = ".api-key"

api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)
bearer_scheme = HTTPBearer(auto_error=False)


def get_api_key_path(config: dict) -> Path:
    return get_data_dir(config) / API_KEY_FILENAME


def get_or_create_api_key(path: Path) -> str:
    """Get existing API key or generate a new one."""
    if path.exists():
        return path.read_text().strip()

    path.parent.mkdir(parents=True, exist_ok=True)
    key = secrets.token_urlsafe(32)
    path.write_text(key)
    return key


async def verify_api_key(
    api_key: str | None = Security(api_key_header),
    config: dict = Depends(get_config),
) -> str:
    """FastAPI dependency that verifies the X-API-Key header."""
    if not api_key:
        raise HTTPException(status_code=401, detail="Missing X-API-Key header")

    expected = get_or_create_api_key(get_api_key_path(config))
    if not secrets.compare_digest(api_key, expected):
        raise HTTPException(status_code=403, detail="Invalid API key")

    return api_key


async def optional_bearer_token(
    credentials: HTTPAuthorizationCredentials | None = Security(bearer_scheme),
) -> str | None:
    """The bearer token if one was sent."""
    return credentials.credentials if credentials else None


async def require_bearer_token(token: str | None = Depends(optional_bearer_token)) -> str:
    """The bearer token; 401 when it is missing."""
    if not token:
        raise HTTPException(status_code=401, detail="Missing bearer token")
    return token


def get_current_profile(
    token: str | None = Depends(optional_bearer_token),
) -> SubscriptionProfile | None:
    """Subscription profile of the bearer-token user.

    Requests without a token, and users without a profile row, are
    treated as free.

    Raises:
        AuthenticationError: If a token is sent but rejected.
    """
    if token is None:
        return None

    backend = get_backend_client()
    user = backend.get_user(token)
    try:
        return backend.get_profile(str(user.id))
    except ProfileNotFoundError:
        logger.info("No profile for user %s, treating as free", user.id)
        return None
