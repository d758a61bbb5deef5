"""Settings loaded from the environment."""

from typing import Optional

from pydantic import PostgresDsn, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict

from canopy.core.config.enums import Environment, LogLevel


class Settings(BaseSettings):
    """Process-wide settings.

    Every field can be overridden by an environment variable of the same name.
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", case_sensitive=False)

    ENVIRONMENT: Environment = Environment.LOCAL
    LOG_LEVEL: LogLevel = LogLevel.INFO
    TESTING: bool = False

    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "canopy"
    POSTGRES_PASSWORD: str = "canopy"
    POSTGRES_DB: str = "canopy"
    POSTGRES_SSLMODE: Optional[str] = None

    db_pool_size: int = 20
    db_pool_max_overflow: int = 40

    @computed_field  # type: ignore[prop-decorator]
    @property
    def SQLALCHEMY_ASYNC_DATABASE_URI(self) -> PostgresDsn:
        """Async driver URI assembled from the POSTGRES_* fields."""
        return PostgresDsn.build(
            scheme="postgresql+asyncpg",
            username=self.POSTGRES_USER,
            password=self.POSTGRES_PASSWORD,
            host=self.POSTGRES_HOST,
            port=self.POSTGRES_PORT,
            path=self.POSTGRES_DB,
        )
