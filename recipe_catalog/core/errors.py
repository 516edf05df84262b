"""
Error taxonomy for the catalog service.
Each error carries the HTTP status it maps to at the API boundary.
"""


class CatalogError(Exception):
    """Base class for errors shaped into ``{"error": ...}`` responses."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(CatalogError):
    """Missing or malformed input."""

    status_code = 400


class AuthenticationError(CatalogError):
    """Missing or invalid bearer token."""

    status_code = 401

    def __init__(self, message: str = "unauthorized") -> None:
        super().__init__(message)


class AuthorizationError(CatalogError):
    """Valid token, insufficient role."""

    status_code = 403

    def __init__(self, message: str = "access denied") -> None:
        super().__init__(message)


class NotFoundError(CatalogError):
    status_code = 404


class StorageError(CatalogError):
    """Underlying KV store failure."""

    status_code = 500
