"""Application configuration with environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Environment
    ENV: str = "dev"

    # App Version (format: a.bc.de - major.feature.patch)
    VERSION: str = "0.01.00"

    # Database
    DATABASE_URL: str = "sqlite+pysqlite:///./pattern_analysis.db"

    # Session Token (supports key rotation)
    JWT_SECRET: str = "change-this-in-production"
    JWT_SECRET_PREVIOUS: str = ""  # Set during rotation, clear after
    JWT_EXPIRES_HOURS: int = 4

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000"

    # Error Tracking (optional, set in production)
    SENTRY_DSN: str = ""

    # Rate Limiting (requests per minute)
    RATE_LIMIT_API: int = 60
    RATE_LIMIT_WEBHOOK: int = 100

    # Payment processor webhook
    PAYMENT_WEBHOOK_SECRET: str = ""  # HMAC key for X-Payment-Signature
    PAYMENT_TEST_MODE: bool = False  # Skip signature check, local testing only
    PAYMENT_WEBHOOK_MAX_PAYLOAD_BYTES: int = 100000

    # Analysis requests
    DEFAULT_AMOUNT_CENTS: int = 9700  # $97.00
    CANCELLATION_GRACE_DAYS: int = 30  # Purge window for cancelled requests

    # Narrative composition: patterns below this share are left out of the
    # complaint-answer block (the primary pattern is always kept)
    DIAGNOSIS_PATTERN_FLOOR: int = 20

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS_ORIGINS into a list."""
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    @property
    def jwt_secrets(self) -> list[str]:
        """Returns list of valid secrets (current first, then previous if set)."""
        secrets = [self.JWT_SECRET]
        if self.JWT_SECRET_PREVIOUS:
            secrets.append(self.JWT_SECRET_PREVIOUS)
        return secrets


settings = Settings()
