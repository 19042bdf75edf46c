"""Application settings and configuration.

This module defines all configuration options for the HIMS sequencing service.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="HIMS Sequencing", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")

    # Database configuration
    database_url: str = Field(default="sqlite:///./hims.db", alias="DATABASE_URL")
    test_database_url: str | None = Field(default=None, alias="TEST_DATABASE_URL")
    use_testing_database: bool = Field(default=False, alias="USE_TEST_DATABASE")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # Calendar used to decide when a daily/monthly/yearly sequence rolls over
    sequence_timezone: str = Field(default="UTC", alias="SEQUENCE_TIMEZONE")
    # Optimistic check-and-set attempts per commit
    sequence_commit_max_attempts: int = Field(
        default=5,
        alias="SEQUENCE_COMMIT_MAX_ATTEMPTS",
    )

    # Medical-record number defaults
    mr_prefix: str = Field(default="MR", alias="MR_PREFIX")
    mr_separator: str = Field(default="-", alias="MR_SEPARATOR")
    mr_number_length: int = Field(default=5, alias="MR_NUMBER_LENGTH")
    mr_reset_period: str = Field(default="never", alias="MR_RESET_PERIOD")
    mr_start_value: int = Field(default=1, alias="MR_START_VALUE")

    # Visit token defaults
    token_prefix: str = Field(default="T", alias="TOKEN_PREFIX")
    token_separator: str = Field(default="-", alias="TOKEN_SEPARATOR")
    token_number_length: int = Field(default=3, alias="TOKEN_NUMBER_LENGTH")
    token_reset_period: str = Field(default="daily", alias="TOKEN_RESET_PERIOD")
    token_start_value: int = Field(default=1, alias="TOKEN_START_VALUE")

    # CORS configuration for the front end
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
    def default_sequences(self) -> dict[str, dict[str, object]]:
        """Return the built-in sequence configurations keyed by sequence name.

        Returns:
            Raw configuration values for the ``mrNumber`` and ``token`` sequences
        """
        return {
            "mrNumber": {
                "prefix": self.mr_prefix,
                "separator": self.mr_separator,
                "number_length": self.mr_number_length,
                "reset_period": self.mr_reset_period,
                "start_value": self.mr_start_value,
            },
            "token": {
                "prefix": self.token_prefix,
                "separator": self.token_separator,
                "number_length": self.token_number_length,
                "reset_period": self.token_reset_period,
                "start_value": self.token_start_value,
            },
        }


settings = Settings()
