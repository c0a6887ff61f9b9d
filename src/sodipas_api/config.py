"""SODIPAS API — configuration loaded from environment."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application-wide settings, loaded from .env or environment variables."""

    # ── Database ──────────────────────────────────────────
    database_url: str = "sqlite+aiosqlite:///./sodipas.db"

    # ── Authentication ────────────────────────────────────
    otp_ttl_minutes: int = 10
    session_ttl_hours: int = 24
    # Demo only: echoes the OTP back in ``_debug_otp``. Never enable in production.
    dev_mode: bool = False

    # ── OTP e-mail (code is only logged when smtp_host is empty) ─
    smtp_host: str = ""
    smtp_port: int = 587
    smtp_username: str = ""
    smtp_password: str = ""
    email_from: str = "no-reply@sodipas.sn"

    # ── Logistics ─────────────────────────────────────────
    hangars: list[str] = ["Hangar 1", "Hangar 2", "Hangar 3"]
    default_stock_threshold: int = 50

    # ── App ───────────────────────────────────────────────
    app_name: str = "SODIPAS API"
    debug: bool = False
    cors_origins: list[str] = ["*"]

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


# Singleton settings instance
settings = Settings()
