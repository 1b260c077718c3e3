"""Application configuration."""

import os
from urllib.parse import quote_plus

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    mongodb_uri: str | None = None
    db_user: str | None = None
    db_pass: str | None = None
    db_cluster_host: str = "cluster0.klnjmif.mongodb.net"
    db_app_name: str = "Cluster0"
    mongodb_database: str = "foodDB"
    mongodb_collection: str = "foods"
    mongodb_timeout_ms: int = 5000
    host: str = "0.0.0.0"  # noqa: S104
    port: int = 5000
    cors_origins: str = "*"
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def build_mongodb_uri(settings: Settings) -> str:
    """Return the MongoDB connection string for the configured cluster."""
    if settings.mongodb_uri:
        return settings.mongodb_uri
    if not settings.db_user or not settings.db_pass:
        raise ValueError("Set MONGODB_URI or both DB_USER and DB_PASS")
    user = quote_plus(settings.db_user)
    password = quote_plus(settings.db_pass)
    return (
        f"mongodb+srv://{user}:{password}@{settings.db_cluster_host}/"
        f"?retryWrites=true&w=majority&appName={settings.db_app_name}"
    )


def parse_cors_origins(raw: str | None) -> list[str]:
    """Parse allowed CORS origins from env."""
    if raw is None:
        return ["*"]
    origins = [chunk.strip() for chunk in raw.split(",") if chunk.strip()]
    if not origins or "*" in origins:
        return ["*"]
    return origins
