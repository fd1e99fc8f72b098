"""Application settings and configuration.

This module defines all configuration options for the Denominator Stage
application. Settings are loaded from environment variables with sensible
defaults.
"""

from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="Denominator Stage", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Security and authentication
    secret_key: str = Field(alias="SECRET_KEY")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(
        default=60 * 24 * 30,
        alias="ACCESS_TOKEN_EXPIRE_MINUTES",
    )
    blog_admin_secret: str | None = Field(default=None, alias="BLOG_ADMIN_SECRET")
    admin_password: str | None = Field(default=None, alias="ADMIN_PASSWORD")
    site_admin_user_ids: Annotated[list[str], NoDecode] = Field(
        default_factory=list,
        alias="SITE_ADMIN_USER_IDS",
    )

    # Database configuration
    database_url: str = Field(default="sqlite:///./denominator.db", alias="DATABASE_URL")
    test_database_url: str | None = Field(default=None, alias="TEST_DATABASE_URL")
    use_testing_database: bool = Field(default=False, alias="USE_TEST_DATABASE")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # Rate limiting
    redis_url: str = Field(default="redis://localhost:6379", alias="REDIS_URL")
    rate_limit_backend: str = Field(default="memory", alias="RATE_LIMIT_BACKEND")
    rate_limit_sweep_interval_seconds: float = Field(
        default=60.0,
        alias="RATE_LIMIT_SWEEP_INTERVAL_SECONDS",
    )
    chat_rate_limit_max_requests: int = Field(default=10, alias="CHAT_RATE_LIMIT_MAX_REQUESTS")
    chat_rate_limit_window_seconds: float = Field(
        default=60.0,
        alias="CHAT_RATE_LIMIT_WINDOW_SECONDS",
    )
    comment_rate_limit_max_requests: int = Field(
        default=10,
        alias="COMMENT_RATE_LIMIT_MAX_REQUESTS",
    )
    comment_rate_limit_window_seconds: float = Field(
        default=60.0,
        alias="COMMENT_RATE_LIMIT_WINDOW_SECONDS",
    )
    subscribe_rate_limit_max_requests: int = Field(
        default=10,
        alias="SUBSCRIBE_RATE_LIMIT_MAX_REQUESTS",
    )
    subscribe_rate_limit_window_seconds: float = Field(
        default=600.0,
        alias="SUBSCRIBE_RATE_LIMIT_WINDOW_SECONDS",
    )

    # Content moderation settings
    moderation_max_length: int = Field(default=2000, alias="MODERATION_MAX_LENGTH")
    moderation_caps_ratio: float = Field(default=0.7, alias="MODERATION_CAPS_RATIO")
    moderation_caps_min_length: int = Field(default=10, alias="MODERATION_CAPS_MIN_LENGTH")
    moderation_max_repeat: int = Field(default=10, alias="MODERATION_MAX_REPEAT")
    moderation_denylist: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: ["spam", "fuck", "shit", "bitch"],
        alias="MODERATION_DENYLIST",
    )

    # Comment and chat limits
    comment_max_length: int = Field(default=1000, alias="COMMENT_MAX_LENGTH")
    comment_nickname_max_length: int = Field(default=64, alias="COMMENT_NICKNAME_MAX_LENGTH")
    chat_nickname_min_length: int = Field(default=2, alias="CHAT_NICKNAME_MIN_LENGTH")
    chat_nickname_max_length: int = Field(default=30, alias="CHAT_NICKNAME_MAX_LENGTH")
    # Seconds since the last heartbeat during which a chat user counts as online
    chat_presence_window_seconds: float = Field(
        default=300.0, alias="CHAT_PRESENCE_WINDOW_SECONDS"
    )

    # Scheduled publishing
    publish_sweep_enabled: bool = Field(default=True, alias="PUBLISH_SWEEP_ENABLED")
    publish_sweep_interval_seconds: float = Field(
        default=60.0,
        alias="PUBLISH_SWEEP_INTERVAL_SECONDS",
    )

    # Cache invalidation webhook for the rendering frontend
    cache_revalidate_url: str | None = Field(default=None, alias="CACHE_REVALIDATE_URL")
    cache_revalidate_timeout_seconds: float = Field(
        default=5.0,
        alias="CACHE_REVALIDATE_TIMEOUT_SECONDS",
    )

    # Mailing list
    phone_subscriptions_enabled: bool = Field(default=True, alias="PHONE_SUBSCRIPTIONS_ENABLED")

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(
        default=["*"],
        alias="CORS_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "PATCH", "PUT", "DELETE", "OPTIONS"],
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
    )

    @field_validator("site_admin_user_ids", "moderation_denylist", mode="before")
    @classmethod
    def _split_csv(cls, value: object) -> object:
        """Accept comma-separated strings for list options."""
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value

    @property
    def database_url_sync(self) -> str:
        """Return a sync-compatible database URL for tooling.

        Converts asyncpg URLs to psycopg for synchronous database operations
        like Alembic migrations.
        """
        url = self.effective_database_url
        if url.startswith("postgresql+asyncpg"):
            return url.replace("postgresql+asyncpg", "postgresql+psycopg", 1)
        return url

    @property
    def effective_database_url(self) -> str:
        """Return the database URL respecting testing overrides."""
        if self.use_testing_database and self.test_database_url:
            return self.test_database_url
        return self.database_url


settings = Settings()  # type: ignore[call-arg]
