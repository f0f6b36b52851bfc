from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    All config comes from .env file.
    Change values in .env — they automatically apply everywhere.
    """

    # ── Database ──────────────────────────────────────────
    DATABASE_URL: str                    # asyncpg (prod) / aiosqlite (local + tests)
    DATABASE_SYNC_URL: str | None = None  # psycopg2 — used only by Alembic

    # ── Secrets ───────────────────────────────────────────
    SECRET_KEY: str  # signs visual-password challenge tokens

    # ── Sessions ──────────────────────────────────────────
    SESSION_COOKIE_NAME: str = "session-id"
    SESSION_TTL_DAYS: int = 7
    COOKIE_SECURE: bool | None = None  # None → secure only in production

    # ── Passwords ─────────────────────────────────────────
    BCRYPT_ROUNDS: int = 12

    # ── Visual passwords (student login) ──────────────────
    VISUAL_PASSWORD_MAX_ATTEMPTS: int = 3
    VISUAL_PASSWORD_CHALLENGE_MINUTES: int = 10

    # ── Authorization policy ──────────────────────────────
    # False → "not logged in" and "wrong role" are both 401.
    # True  → wrong role is reported as 403.
    AUTH_DISTINGUISH_FORBIDDEN: bool = False

    # ── CORS ──────────────────────────────────────────────
    ALLOWED_ORIGINS: str = "http://localhost:3000"

    # ── App ───────────────────────────────────────────────
    APP_ENV: str = "production"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def origins_list(self) -> list[str]:
        """Splits comma-separated ALLOWED_ORIGINS into a list."""
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",") if o.strip()]

    @property
    def is_production(self) -> bool:
        return self.APP_ENV.strip().lower() == "production"

    @property
    def cookie_secure(self) -> bool:
        if self.COOKIE_SECURE is not None:
            return self.COOKIE_SECURE
        return self.is_production

    @property
    def session_max_age_seconds(self) -> int:
        return self.SESSION_TTL_DAYS * 24 * 60 * 60

    def validate_runtime(self) -> None:
        if self.is_production and self.SECRET_KEY == "change-me":
            raise RuntimeError("SECRET_KEY must be set in production.")


@lru_cache()
def get_settings() -> Settings:
    return Settings()


# Single instance used across the entire app
settings = get_settings()
