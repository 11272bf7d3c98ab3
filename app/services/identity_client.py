import logging
from typing import Optional

import httpx

from app.core.config import settings
from app.core.exceptions import AuthenticationError, UpstreamError
from app.core.roles import Role
from app.schemas.auth import Principal

logger = logging.getLogger(__name__)


class IdentityClient:
    """Client for the Supabase-compatible identity provider."""

    def __init__(self, base_url: Optional[str] = None, api_key: Optional[str] = None, timeout: Optional[float] = None):
        self.base_url = (base_url or settings.AUTH_PROVIDER_URL).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.AUTH_PROVIDER_API_KEY
        self.timeout = timeout or settings.AUTH_TIMEOUT_SECONDS

    def get_user(self, token: str) -> Principal:
        """Verify a bearer token and return the caller."""
        headers = {"Authorization": f"Bearer {token}"}
        if self.api_key:
            headers["apikey"] = self.api_key
        try:
            response = httpx.get(f"{self.base_url}/auth/v1/user", headers=headers, timeout=self.timeout)
        except httpx.HTTPError as e:
            logger.error("Identity provider unreachable: %s", e)
            raise UpstreamError("Authentication failed", detail=str(e)) from e

        if response.status_code in (401, 403):
            raise AuthenticationError("Invalid or expired token")
        if response.status_code != 200:
            logger.error("Identity provider returned %s", response.status_code)
            raise UpstreamError("Authentication failed", detail=f"Identity provider returned {response.status_code}")

        try:
            user = response.json()
        except ValueError as e:
            raise UpstreamError("Authentication failed", detail="Malformed identity response") from e
        if not isinstance(user, dict) or not user.get("id"):
            raise AuthenticationError("Invalid or expired token")

        metadata = user.get("user_metadata") or {}
        return Principal(
            id=str(user["id"]),
            email=user.get("email") or "",
            role=Role.parse(metadata.get("role")),
            metadata=metadata,
        )


# Singleton instance
identity_client = IdentityClient()
