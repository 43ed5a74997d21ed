"""Application settings and configuration.

This module defines all configuration options for the Asirnet application.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    This class defines all configuration options for the Asirnet application.
    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="Asirnet", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")

    # Security and authentication
    secret_key: str = Field(default="asirnet-development-secret", alias="SECRET_KEY")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # JWT authentication settings
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(
        default=60 * 24 * 7,
        alias="ACCESS_TOKEN_EXPIRE_MINUTES",
    )

    # Storage: "sql", "memory" or "json"
    storage_backend: str = Field(default="sql", alias="STORAGE_BACKEND")
    database_url: str = Field(default="sqlite:///./asirnet.db", alias="DATABASE_URL")
    users_database_url: str | None = Field(default=None, alias="USERS_DATABASE_URL")
    posts_database_url: str | None = Field(default=None, alias="POSTS_DATABASE_URL")
    interactions_database_url: str | None = Field(
        default=None,
        alias="INTERACTIONS_DATABASE_URL",
    )
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")
    json_store_path: str = Field(default="./asirnet.json", alias="JSON_STORE_PATH")

    # Keep-alive pinger for sibling deployments
    keepalive_enabled: bool = Field(default=False, alias="KEEPALIVE_ENABLED")
    keepalive_urls: list[str] = Field(default=[], alias="KEEPALIVE_URLS")
    keepalive_interval_seconds: float = Field(
        default=600.0,
        alias="KEEPALIVE_INTERVAL_SECONDS",
    )
    keepalive_timeout_seconds: float = Field(
        default=10.0,
        alias="KEEPALIVE_TIMEOUT_SECONDS",
    )

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(
        default=["*"],
        alias="CORS_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(
        default=["*"],
        alias="CORS_ALLOW_HEADERS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def collection_database_urls(self) -> dict[str, str]:
        """Return the database URL backing each collection.

        Collections without a dedicated URL fall back to ``DATABASE_URL``, so a
        default deployment keeps users, posts and interactions in one database.

        Returns:
            Mapping of collection name to database URL
        """
        return {
            "users": self.users_database_url or self.database_url,
            "posts": self.posts_database_url or self.database_url,
            "interactions": self.interactions_database_url or self.database_url,
        }


settings = Settings()
