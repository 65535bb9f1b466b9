"""
Process configuration read from environment variables.

`.env` is loaded once (python-dotenv) so local development works without
exporting variables by hand. Everything else reads a `Settings` instance that
`main.create_app()` builds and stores on `app.state.settings`.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv
from fastapi import Request

load_dotenv()

DEFAULT_ALLOWED_FILE_TYPES = ("image/jpeg", "image/png", "image/webp", "image/jpg")


def _env_str(name: str, default: str = "") -> str:
    return os.environ.get(name, default).strip() or default


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name, "").strip().lower()
    if not raw:
        return default
    return raw not in {"0", "false", "no", "off"}


def _env_list(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    items = tuple(part.strip() for part in raw.split(",") if part.strip())
    return items or default


@dataclass(frozen=True)
class EmailSettings:
    host: str = "smtp.gmail.com"
    port: int = 465
    secure: bool = True
    user: str = ""
    password: str = ""
    from_address: str = ""
    from_name: str = "LPRES Administration"
    timeout_s: float = 30.0


@dataclass(frozen=True)
class Settings:
    node_env: str = "development"
    port: int = 5000
    api_version: str = "v1"
    server_url: str = "http://localhost:5000"

    database_url: str = ""
    db_pool_min_size: int = 1
    db_pool_max_size: int = 5

    supabase_url: str = ""
    anon_key: str = ""
    service_role_key: str = ""
    admin_secret_key: str = ""
    public_access_mode: str = "open"
    storage_bucket: str = "images"

    cors_origins: tuple[str, ...] = ("*",)
    rate_limit_window_ms: int = 900_000
    rate_limit_max_requests: int = 100
    max_body_bytes: int = 10 * 1024 * 1024

    max_file_size: int = 5 * 1024 * 1024
    allowed_file_types: tuple[str, ...] = DEFAULT_ALLOWED_FILE_TYPES
    max_files_per_upload: int = 6

    email: EmailSettings = field(default_factory=EmailSettings)
    newsletter_batch_size: int = 50
    newsletter_batch_delay_s: float = 1.0
    newsletter_unsubscribe_url: str = ""

    keep_alive_enabled: bool = True
    keep_alive_interval_minutes: int = 14
    keep_alive_initial_delay_s: int = 60

    log_level: str = "INFO"
    log_format: str = "text"

    @property
    def is_production(self) -> bool:
        return self.node_env.lower() == "production"

    @property
    def api_prefix(self) -> str:
        return f"/api/{self.api_version}"

    @property
    def max_multipart_bytes(self) -> int:
        # Every allowed file at full size, plus 1 MiB for part headers and form fields.
        return self.max_files_per_upload * self.max_file_size + 1024 * 1024

    @property
    def rate_limit(self) -> str:
        # slowapi / limits notation, e.g. "100/900 seconds"
        window_s = max(1, self.rate_limit_window_ms // 1000)
        return f"{self.rate_limit_max_requests}/{window_s} seconds"

    @classmethod
    def from_env(cls) -> "Settings":
        port = _env_int("PORT", 5000)
        email_port = _env_int("EMAIL_PORT", 465)
        email_user = _env_str("EMAIL_USER")
        secure_raw = os.environ.get("EMAIL_SECURE", "").strip().lower()

        return cls(
            node_env=_env_str("NODE_ENV", "development"),
            port=port,
            api_version=_env_str("API_VERSION", "v1"),
            server_url=_env_str("SERVER_URL", f"http://localhost:{port}").rstrip("/"),
            database_url=_env_str("DATABASE_URL"),
            db_pool_min_size=_env_int("DB_POOL_MIN_SIZE", 1),
            db_pool_max_size=_env_int("DB_POOL_MAX_SIZE", 5),
            supabase_url=_env_str("SUPABASE_URL").rstrip("/"),
            anon_key=_env_str("SUPABASE_ANON_KEY"),
            service_role_key=_env_str("SUPABASE_SERVICE_ROLE_KEY"),
            admin_secret_key=_env_str("ADMIN_SECRET_KEY"),
            public_access_mode=_env_str("PUBLIC_ACCESS_MODE", "open").lower(),
            storage_bucket=_env_str("STORAGE_BUCKET", "images"),
            cors_origins=_env_list("CORS_ORIGIN", ("*",)),
            rate_limit_window_ms=_env_int("RATE_LIMIT_WINDOW_MS", 900_000),
            rate_limit_max_requests=_env_int("RATE_LIMIT_MAX_REQUESTS", 100),
            max_file_size=_env_int("MAX_FILE_SIZE", 5 * 1024 * 1024),
            allowed_file_types=_env_list("ALLOWED_FILE_TYPES", DEFAULT_ALLOWED_FILE_TYPES),
            email=EmailSettings(
                host=_env_str("EMAIL_HOST", "smtp.gmail.com"),
                port=email_port,
                secure=secure_raw == "true" or (not secure_raw and email_port == 465),
                user=email_user,
                password=_env_str("EMAIL_PASSWORD"),
                from_address=_env_str("EMAIL_FROM", email_user),
                from_name=_env_str("EMAIL_FROM_NAME", "LPRES Administration"),
                timeout_s=_env_float("EMAIL_TIMEOUT_S", 30.0),
            ),
            newsletter_batch_size=_env_int("NEWSLETTER_BATCH_SIZE", 50),
            newsletter_batch_delay_s=_env_float("NEWSLETTER_BATCH_DELAY_S", 1.0),
            newsletter_unsubscribe_url=_env_str("NEWSLETTER_UNSUBSCRIBE_URL"),
            keep_alive_enabled=_env_bool("KEEP_ALIVE_ENABLED", True),
            keep_alive_interval_minutes=_env_int("KEEP_ALIVE_INTERVAL_MINUTES", 14),
            keep_alive_initial_delay_s=_env_int("KEEP_ALIVE_INITIAL_DELAY_SECONDS", 60),
            log_level=_env_str("LOG_LEVEL", "INFO").upper(),
            log_format=_env_str("LOG_FORMAT", "text").lower(),
        )


def get_settings(request: Request) -> Settings:
    return request.app.state.settings
