from typing import List, Literal
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import computed_field


class Settings(BaseSettings):
    # App Config
    PROJECT_NAME: str = "OrderDesk"
    ENVIRONMENT: Literal["dev", "prod"] = "dev"
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = ["http://localhost:4200", "http://127.0.0.1:4200"]

    # Database Settings
    POSTGRES_USER: str = "orderdesk_user"
    POSTGRES_PASSWORD: str = "orderdesk_password"
    POSTGRES_DB: str = "orderdesk_db"
    POSTGRES_HOST: str = "127.0.0.1"
    POSTGRES_PORT: str = "5432"
    DATABASE_URL: str | None = None
    SQL_ECHO: bool = False

    # Orders
    ORDER_NUMBER_START: int = 1000

    @computed_field
    @property
    def ASYNC_DATABASE_URL(self) -> str:
        """Returns the PostgreSQL connection string if DATABASE_URL is not set."""
        if self.DATABASE_URL:
            # Ensure it uses the asyncpg driver if it's a PG URL
            if self.DATABASE_URL.startswith("postgresql://"):
                return self.DATABASE_URL.replace("postgresql://", "postgresql+asyncpg://", 1)
            return self.DATABASE_URL

        return f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )


# Globally accessible settings instance
settings = Settings()
