# console_api/config/settings.py
import os
from urllib.parse import quote_plus

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    environment: str = "development"
    debug: bool = False

    # PostgreSQL by default; DB_URL wins when set.
    db_url: str | None = None
    db_host: str = "localhost"
    db_port: int = 5432
    db_name: str = "console"
    db_user: str = "console"
    db_password: str = ""
    db_statement_timeout_ms: int = 5000

    jwt_secret: str = os.getenv("JWT_SECRET", "dev-secret-change-me")
    jwt_issuer: str = os.getenv("JWT_ISSUER", "garage-console-api")
    jwt_audience: str = os.getenv("JWT_AUDIENCE", "garage-console-web")
    jwt_access_minutes: int = int(os.getenv("JWT_ACCESS_MINUTES", "15"))
    jwt_refresh_minutes: int = int(os.getenv("JWT_REFRESH_MINUTES", "120"))
    session_lifetime_minutes: int = int(os.getenv("SESSION_LIFETIME_MINUTES", str(60 * 24 * 7)))

    revoke_session_on_refresh_reuse: bool = True
    session_activity_tracking: bool = True

    password_min_length: int = 6
    password_hash_iterations: int = 600_000
    password_reset_minutes: int = 60
    email_change_minutes: int = 60 * 24

    cookie_secure: bool = True
    cookie_samesite: str = "Lax"
    cookie_domain: str | None = None

    api_prefix: str = "/api"
    public_base_url: str = "http://localhost:3980"
    cors_origins_raw: str = os.getenv("CORS_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173")

    mailer_smtp_host: str | None = None
    mailer_smtp_port: int = 1025
    mailer_smtp_username: str | None = None
    mailer_smtp_password: str | None = None
    mailer_smtp_starttls: bool = False
    mailer_from_email: str = "no-reply@localhost"
    mailer_from_name: str = "Garage Console"

    log_level: str = "INFO"
    log_json: bool = False

    bootstrap_admin_email: str = "admin@example.com"
    bootstrap_admin_name: str = "Admin System"
    bootstrap_admin_password: str | None = None

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("db_host", "db_name", "db_user", "db_password", mode="before")
    @classmethod
    def strip_strings(cls, v):
        if isinstance(v, str):
            return v.strip().strip('"').strip("'")
        return v

    @field_validator("api_prefix")
    @classmethod
    def normalize_prefix(cls, v: str) -> str:
        v = v.strip().rstrip("/")
        if v and not v.startswith("/"):
            v = f"/{v}"
        return v

    @property
    def database_url(self) -> str:
        if self.db_url:
            return self.db_url

        user = quote_plus(self.db_user)
        password = quote_plus(self.db_password)
        return f"postgresql+psycopg2://{user}:{password}@{self.db_host}:{self.db_port}/{self.db_name}"

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip().rstrip("/") for o in self.cors_origins_raw.split(",") if o.strip()]

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"


settings = Settings()
