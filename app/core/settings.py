"""Application settings with environment validation."""

import os
from typing import List, Optional


class Settings:
    """Application settings with environment validation."""

    def __init__(self) -> None:
        # Database (unset means the in-memory fallback is used)
        self.database_url: Optional[str] = os.getenv("DATABASE_URL") or None

        # Authentication
        self.firebase_cert_path = os.getenv("FIREBASE_CERT_PATH", "firebase_key.json")
        self.session_cookie_name = os.getenv("SESSION_COOKIE_NAME", "reform_session")
        self.session_cookie_days = int(os.getenv("SESSION_COOKIE_DAYS", "5"))
        self.session_refresh_hours = int(os.getenv("SESSION_REFRESH_HOURS", "24"))

        # Email
        self.sendgrid_api_key = os.getenv(
            "SENDGRID_API_KEY", "your_sendgrid_api_key_here"
        )
        self.email_from_address = os.getenv(
            "EMAIL_FROM_ADDRESS", "no-reply@reform-agenda.org"
        )
        self.admin_notification_emails = self._parse_list(
            os.getenv("ADMIN_NOTIFICATION_EMAILS", "")
        )
        self.email_internal_secret = os.getenv("EMAIL_INTERNAL_SECRET", "")

        # Application / site
        self.site_url = os.getenv("SITE_URL", "http://localhost:3000")
        self.environment = os.getenv("ENV", "development")
        self.log_level = os.getenv("LOG_LEVEL", "INFO")
        self.log_format = os.getenv("LOG_FORMAT", "text")
        self.locales_dir = os.getenv(
            "LOCALES_DIR",
            os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "..", "locales")),
        )

        # Security
        self.cors_origins = self._parse_cors_origins(os.getenv("CORS_ORIGINS", "*"))
        self.rate_limit_enabled = self._parse_bool(
            os.getenv("RATE_LIMIT_ENABLED", "true")
        )
        self.rate_limit_per_minute = int(os.getenv("RATE_LIMIT_PER_MINUTE", "120"))
        # Proxies in front of the app that append to X-Forwarded-For; 0 ignores the header
        self.trusted_proxy_count = int(os.getenv("TRUSTED_PROXY_COUNT", "0"))

        # Diagnostics
        self.sql_debug = self._parse_bool(os.getenv("SQL_DEBUG", "false"))

    def _parse_cors_origins(self, v: str) -> List[str]:
        if v == "*":
            return ["*"]
        return [origin.strip() for origin in v.split(",") if origin.strip()]

    def _parse_list(self, v: str) -> List[str]:
        return [item.strip() for item in v.split(",") if item.strip()]

    def _parse_bool(self, v: str) -> bool:
        return v.lower() in ("true", "1", "yes", "on")

    @property
    def is_production(self) -> bool:  # convenience flag
        return self.environment.lower() == "production"

    @property
    def is_development(self) -> bool:  # convenience flag
        return self.environment.lower() == "development"

    @property
    def is_test(self) -> bool:
        return self.environment.lower() == "test"

    @property
    def database_configured(self) -> bool:
        return bool(self.database_url) and "placeholder" not in self.database_url

    @property
    def allowed_origins(self) -> List[str]:
        """Origins accepted for state-changing browser requests."""
        origins = [self.site_url.rstrip("/")]
        origins.extend(o.rstrip("/") for o in self.cors_origins if o != "*")
        return origins


settings = Settings()
