from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


class Settings(BaseSettings):
    # Application settings
    app_name: str = "Syncora"
    app_version: str = "1.0.0"
    debug: bool = False
    environment: str = "development"

    # Database settings
    database_url: str = "sqlite+aiosqlite:///./syncora.db"

    # Session settings
    session_cookie_name: str = "syncora_session"
    session_expire_seconds: int = 7 * 24 * 60 * 60
    session_cookie_secure: bool | None = None
    redis_url: str | None = None

    # Two-factor settings
    pending_auth_ttl_seconds: int = 5 * 60
    pending_auth_sweep_seconds: int = 5 * 60
    totp_issuer: str = "Syncora"
    totp_valid_window: int = 2

    # Rate limiting
    rate_limit_enabled: bool = True
    login_rate_limit: str = "10/minute"

    # Google OAuth
    google_client_id: str | None = None
    google_client_secret: str | None = None
    google_redirect_uri: str = "http://localhost:8000/auth/google/callback"

    # Generative-language API
    gemini_api_key: str | None = None
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    gemini_fast_model: str = "gemini-2.5-flash"
    gemini_pro_model: str = "gemini-2.5-pro"
    gemini_timeout_seconds: float = 30.0

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    # CORS settings
    allowed_origins: list[str] = ["http://localhost:5173", "http://localhost:8000"]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def cookie_secure(self) -> bool:
        """Secure cookies follow the environment unless explicitly overridden."""
        if self.session_cookie_secure is not None:
            return self.session_cookie_secure
        return self.is_production


settings = Settings()
