"""Service settings, loaded from CATALOG_* environment variables or .env."""

from typing import List, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "Recipe Catalog"
    version: str = "1.0.0"
    api_prefix: str = "/api"
    log_level: str = "INFO"
    cors_origins: List[str] = ["*"]

    # KV store: "sqlite" or "redis"
    kv_backend: str = "sqlite"
    sqlite_path: str = ":memory:"
    redis_url: str = "redis://localhost:6379/0"
    redis_namespace: str = "catalog:"

    # Identity gateway (Supabase Auth)
    supabase_url: str = ""
    supabase_service_role_key: str = ""
    identity_timeout: float = 10.0
    allow_admin_signup: bool = True

    class Config:
        env_prefix = "CATALOG_"
        env_file = ".env"


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
