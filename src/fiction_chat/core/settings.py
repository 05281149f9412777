"""Application settings and configuration.

This module defines all configuration options for the Fiction Chat service.
Settings are loaded from environment variables with sensible defaults and are
read once at startup; nothing mutates them afterwards.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="Fiction Chat", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Shared signing secret and claim layout of the host application's tokens
    jwt_secret: str = Field(alias="JWT_SECRET")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    jwt_user_id_claim: str = Field(default="id", alias="JWT_USER_ID_CLAIM")
    access_token_expire_minutes: int = Field(default=60, alias="ACCESS_TOKEN_EXPIRE_MINUTES")

    # Database configuration
    database_url: str = Field(default="sqlite:///./fictionchat.db", alias="DATABASE_URL")
    test_database_url: str | None = Field(default=None, alias="TEST_DATABASE_URL")
    use_testing_database: bool = Field(default=False, alias="USE_TEST_DATABASE")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # Host application user table mirrored into fictionchat_user
    host_user_table: str | None = Field(default=None, alias="HOST_USER_TABLE")
    host_user_id_column: str = Field(default="id", alias="HOST_USER_ID_COLUMN")
    host_user_fullname_column: str = Field(default="fullname", alias="HOST_USER_FULLNAME_COLUMN")
    host_user_picture_column: str | None = Field(
        default="profile_picture_url",
        alias="HOST_USER_PICTURE_COLUMN",
    )

    # Startup behaviour
    create_tables_on_startup: bool = Field(default=True, alias="CREATE_TABLES_ON_STARTUP")
    sync_users_on_startup: bool = Field(default=False, alias="SYNC_USERS_ON_STARTUP")

    # Destructive administration (test/staging only)
    allow_reset: bool = Field(default=False, alias="ALLOW_RESET")
    admin_token: str | None = Field(default=None, alias="ADMIN_TOKEN")

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(default=["*"], alias="CORS_ORIGINS")
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(default=["*"], alias="CORS_ALLOW_HEADERS")

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @property
    def effective_database_url(self) -> str:
        """Return the database URL respecting testing overrides.

        Returns:
            The active database URL (test database if in testing mode, otherwise production)
        """
        if self.use_testing_database and self.test_database_url:
            return self.test_database_url
        return self.database_url

    @property
    def database_url_sync(self) -> str:
        """Return a sync-compatible database URL for tooling such as Alembic."""
        url = self.effective_database_url
        if url.startswith("postgresql+asyncpg"):
            return url.replace("postgresql+asyncpg", "postgresql+psycopg", 1)
        return url

    @property
    def host_user_table_config(self) -> dict[str, str | None] | None:
        """Return the host user table mapping, or None when mirroring is not configured."""
        if not self.host_user_table:
            return None
        return {
            "table_name": self.host_user_table,
            "id_column": self.host_user_id_column,
            "fullname_column": self.host_user_fullname_column,
            "picture_column": self.host_user_picture_column,
        }


settings = Settings()  # type: ignore[call-arg]
