from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve .env from the project root so it loads regardless of cwd
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=(str(_ENV_FILE), ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_url: str = "postgresql+asyncpg://localhost/booking"
    database_ssl: bool = False

    # JWT (tokens are issued elsewhere; we only verify them)
    secret_key: str = "change-me"
    algorithm: str = "HS256"

    # CORS
    cors_origins: str = "http://localhost:3000"

    # Booking rules
    cancel_min_hours: float = 24
    # Largest range the availability endpoint accepts
    availability_max_days: int = 31
    # Dev convenience; Alembic owns the schema otherwise
    create_tables_on_startup: bool = False

    # Env
    env: str = "development"
    log_level: str = "INFO"

    @property
    def cors_origins_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def is_production(self) -> bool:
        return self.env == "production"


settings = Settings()
