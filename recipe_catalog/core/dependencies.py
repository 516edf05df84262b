"""
FastAPI dependency injection providers.
Use Depends(get_catalog_service), Depends(require_admin), etc. in route handlers.
"""

import logging
from typing import Callable, Optional

from fastapi import Depends, Header

from recipe_catalog.adapters.supabase_identity import SupabaseIdentityGateway
from recipe_catalog.config import get_settings
from recipe_catalog.core.abstractions import IdentityGateway, KeyValueStore
from recipe_catalog.core.errors import AuthenticationError, AuthorizationError
from recipe_catalog.models import Principal, Role
from recipe_catalog.services.catalog import CatalogService
from recipe_catalog.services.prometheus_metrics import record_auth_failure
from recipe_catalog.services.redis_store import RedisKeyValueStore
from recipe_catalog.services.storage import SQLiteKeyValueStore

logger = logging.getLogger(__name__)

# --- Singletons (lazy-initialized) ---

_kv_store: Optional[KeyValueStore] = None
_identity_gateway: Optional[IdentityGateway] = None


def create_kv_store() -> KeyValueStore:
    """Build the store selected by settings.kv_backend."""
    settings = get_settings()
    if settings.kv_backend == "redis":
        logger.info("Using Redis KV store at %s", settings.redis_url)
        return RedisKeyValueStore(settings.redis_url, namespace=settings.redis_namespace)
    if settings.kv_backend != "sqlite":
        raise ValueError(f"unknown kv_backend {settings.kv_backend!r}")
    logger.info("Using SQLite KV store at %s", settings.sqlite_path)
    return SQLiteKeyValueStore(settings.sqlite_path)


def get_kv_store() -> KeyValueStore:
    """Provide KeyValueStore. Used as Depends(get_kv_store)."""
    global _kv_store
    if _kv_store is None:
        _kv_store = create_kv_store()
    return _kv_store


def close_kv_store() -> None:
    global _kv_store
    if _kv_store is not None:
        _kv_store.close()
        _kv_store = None


def get_identity_gateway() -> IdentityGateway:
    """Provide IdentityGateway (Supabase Auth). Used as Depends(get_identity_gateway)."""
    global _identity_gateway
    if _identity_gateway is None:
        settings = get_settings()
        _identity_gateway = SupabaseIdentityGateway(
            settings.supabase_url,
            settings.supabase_service_role_key,
            timeout=settings.identity_timeout,
        )
    return _identity_gateway


def get_catalog_service(store: KeyValueStore = Depends(get_kv_store)) -> CatalogService:
    return CatalogService(store)


# --- Authentication and authorization ---


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Extract the token from an ``Authorization: Bearer <token>`` header."""
    if not authorization:
        return None
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def get_current_principal(
    authorization: Optional[str] = Header(None),
    identity: IdentityGateway = Depends(get_identity_gateway),
) -> Principal:
    """Resolve the caller. Raises AuthenticationError (401) on any failure."""
    token = bearer_token(authorization)
    if token is None:
        record_auth_failure("missing_token")
        raise AuthenticationError()
    try:
        return identity.verify(token)
    except AuthenticationError:
        record_auth_failure("invalid_token")
        logger.warning("Rejected bearer token")
        raise


def get_optional_principal(
    authorization: Optional[str] = Header(None),
    identity: IdentityGateway = Depends(get_identity_gateway),
) -> Optional[Principal]:
    """Like get_current_principal, but None instead of 401."""
    token = bearer_token(authorization)
    if token is None:
        return None
    try:
        return identity.verify(token)
    except AuthenticationError:
        return None


def require_role(role: Role) -> Callable[..., Principal]:
    """Build a dependency that admits only principals holding ``role``."""

    def guard(principal: Principal = Depends(get_current_principal)) -> Principal:
        if principal.role != role:
            record_auth_failure("forbidden")
            logger.warning(
                "User %s with role %s denied, %s required",
                principal.user_id,
                principal.role.value,
                role.value,
            )
            raise AuthorizationError()
        return principal

    return guard


require_admin = require_role(Role.ADMIN)
