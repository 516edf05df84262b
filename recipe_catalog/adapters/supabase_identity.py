"""
Supabase Auth (GoTrue) adapter for the identity gateway.
Verifies bearer tokens and manages users through the GoTrue REST API.
"""

import logging
from typing import Any, Optional

import httpx

from recipe_catalog.core.errors import AuthenticationError, CatalogError, ValidationError
from recipe_catalog.models import Principal, Role

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


def principal_from_user(user: dict[str, Any]) -> Principal:
    """
    Map a GoTrue user object to a Principal.
    Display name is user_metadata.name, falling back to email; role defaults to user.
    """
    user_id = user.get("id")
    if not user_id:
        raise AuthenticationError()
    metadata = user.get("user_metadata") or {}
    display_name = metadata.get("name") or user.get("email") or str(user_id)
    try:
        role = Role(metadata.get("role") or Role.USER.value)
    except ValueError:
        logger.warning("Unknown role claim %r for user %s", metadata.get("role"), user_id)
        role = Role.USER
    return Principal(user_id=str(user_id), display_name=display_name, role=role)


def _upstream_message(response: httpx.Response) -> str:
    """Best-effort error text from a GoTrue error body."""
    try:
        body = response.json()
    except ValueError:
        return response.text or f"identity provider returned {response.status_code}"
    if isinstance(body, dict):
        for field in ("msg", "message", "error_description", "error"):
            if body.get(field):
                return str(body[field])
    return f"identity provider returned {response.status_code}"


class SupabaseIdentityGateway:
    """Identity gateway backed by Supabase Auth."""

    def __init__(
        self,
        base_url: str,
        service_role_key: str,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.base_url = base_url.rstrip("/")
        self.service_role_key = service_role_key
        self.timeout = timeout

    def _headers(self, bearer: Optional[str] = None) -> dict[str, str]:
        return {
            "apikey": self.service_role_key,
            "Authorization": f"Bearer {bearer or self.service_role_key}",
        }

    def verify(self, token: str) -> Principal:
        """Resolve a user access token. Any failure is an AuthenticationError."""
        if not token:
            raise AuthenticationError()

        try:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.get(
                    f"{self.base_url}/auth/v1/user", headers=self._headers(token)
                )
                response.raise_for_status()
                user = response.json()
        except httpx.HTTPStatusError as e:
            logger.warning("Token rejected by identity provider: %s", e.response.status_code)
            raise AuthenticationError() from e
        except httpx.HTTPError as e:
            logger.error("Identity provider unreachable during token check: %s", e)
            raise AuthenticationError() from e
        except ValueError as e:
            logger.error("Identity provider returned invalid JSON: %s", e)
            raise AuthenticationError() from e

        if not isinstance(user, dict):
            raise AuthenticationError()
        return principal_from_user(user)

    def _admin_request(self, method: str, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        try:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.request(
                    method,
                    f"{self.base_url}/auth/v1/admin/{path}",
                    headers=self._headers(),
                    json=payload,
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            message = _upstream_message(e.response)
            logger.warning("Identity provider rejected %s %s: %s", method, path, message)
            raise ValidationError(message) from e
        except httpx.HTTPError as e:
            logger.error("Identity provider unreachable: %s", e)
            raise CatalogError("identity provider unavailable") from e
        except ValueError as e:
            logger.error("Identity provider returned invalid JSON: %s", e)
            raise CatalogError("identity provider unavailable") from e

        # Some GoTrue versions wrap the user object
        if isinstance(data, dict) and isinstance(data.get("user"), dict):
            return data["user"]
        return data

    def create_user(
        self, email: str, password: str, name: Optional[str], role: str
    ) -> dict[str, Any]:
        """Create a user with the email already confirmed."""
        return self._admin_request(
            "POST",
            "users",
            {
                "email": email,
                "password": password,
                "email_confirm": True,
                "user_metadata": {"name": name, "role": role},
            },
        )

    def update_user_role(self, user_id: str, role: str) -> dict[str, Any]:
        return self._admin_request(
            "PUT", f"users/{user_id}", {"user_metadata": {"role": role}}
        )
