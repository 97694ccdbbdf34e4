"""Environment-based configuration."""

import os
from dotenv import load_dotenv

load_dotenv()

DEFAULT_CSP = (
    "default-src 'self'; script-src 'self'; style-src 'self' https: 'unsafe-inline'; "
    "img-src 'self' data: https:; font-src 'self' https: data:; object-src 'none'; "
    "base-uri 'self'; frame-ancestors 'self'"
)


class Settings:
    """Application settings loaded from environment variables.

    Keyword overrides take precedence over the environment, which keeps
    tests independent of the developer's ``.env`` file.
    """

    def __init__(self, **overrides):
        env = {key.upper(): value for key, value in overrides.items()}

        def get(name, default=None):
            if name in env:
                return env[name]
            return os.getenv(name, default)

        self.environment = get("APP_ENV", "development")
        self.host = get("HOST", "0.0.0.0")
        self.port = int(get("PORT", 3000))
        self.log_level = str(get("LOG_LEVEL", "INFO")).upper()

        # Database
        self.database_url = get("DATABASE_URL", "sqlite:///./analytics.db")

        # Email
        self.sendgrid_api_key = get("SENDGRID_API_KEY")
        self.from_email = get("FROM_EMAIL", "noreply@docucloudsolutions.com")
        self.notification_email = get("NOTIFICATION_EMAIL", "info@docucloudsolutions.com")

        # CORS
        self.cors_origin = get("CORS_ORIGIN", "https://docucloudsolutions.com")

        # Rate limiting on /api/ routes
        self.rate_limit_max = int(get("RATE_LIMIT_MAX", 100))
        self.rate_limit_window_seconds = int(get("RATE_LIMIT_WINDOW_SECONDS", 15 * 60))

        # Security headers; the CSP is only applied in production
        self.security_headers_enabled = str(get("SECURITY_HEADERS_ENABLED", "true")).lower() == "true"
        self.x_frame_options = get("X_FRAME_OPTIONS", "SAMEORIGIN")
        self.referrer_policy = get("REFERRER_POLICY", "no-referrer")
        self.content_security_policy = get("CONTENT_SECURITY_POLICY", DEFAULT_CSP)
        self.hsts_max_age = int(get("HSTS_MAX_AGE", 180 * 24 * 3600))
        self.hsts_include_subdomains = str(get("HSTS_INCLUDE_SUBDOMAINS", "true")).lower() == "true"

        # Public site files, mounted at "/" when present
        self.static_dir = get("STATIC_DIR")

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def cors_origins(self):
        if self.is_production:
            return [self.cors_origin]
        return ["http://localhost:3000", "http://127.0.0.1:3000"]
