"""
Abstractions for persistence and identity.
Enables component swapping and testability via dependency injection.
"""

from typing import Any, List, Optional, Protocol, Tuple

from recipe_catalog.models import Principal


class KeyValueStore(Protocol):
    """Ordered key -> JSON object map with prefix scan. Knows nothing about entity kinds."""

    def get(self, key: str) -> Optional[dict[str, Any]]:
        """Return the value stored under key, or None."""
        ...

    def set(self, key: str, value: dict[str, Any]) -> None:
        """Insert or overwrite a value."""
        ...

    def delete(self, key: str) -> bool:
        """Delete a key. Returns False if it did not exist."""
        ...

    def scan_prefix(self, prefix: str) -> List[Tuple[str, dict[str, Any]]]:
        """Return (key, value) pairs whose key starts with prefix, ordered by key."""
        ...

    def get_by_prefix(self, prefix: str) -> List[dict[str, Any]]:
        """Return values whose key starts with prefix."""
        ...

    def close(self) -> None:
        ...


class IdentityGateway(Protocol):
    """External identity provider: token verification and user management."""

    def verify(self, token: str) -> Principal:
        """Resolve a bearer token. Raises AuthenticationError on failure."""
        ...

    def create_user(
        self, email: str, password: str, name: Optional[str], role: str
    ) -> dict[str, Any]:
        """Create a confirmed user. Raises ValidationError if the provider rejects it."""
        ...

    def update_user_role(self, user_id: str, role: str) -> dict[str, Any]:
        """Set the role claim of an existing user."""
        ...
