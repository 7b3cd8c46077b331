"""
Application configuration settings loaded from environment variables.
Uses pydantic_settings for validation and type conversion.
"""
from pydantic import validator
from pydantic_settings import BaseSettings
from typing import List, Optional
import logging

# Set up logging
logger = logging.getLogger(__name__)

# Placeholder signing secret. Must be overridden with SECRET_KEY in production.
DEFAULT_SECRET_KEY = "clinic_api_insecure_dev_secret"

PRODUCTION = "production"
DEVELOPMENT = "development"


class ConfigurationError(RuntimeError):
    """Raised when the loaded settings are unsafe for the current environment."""


class Settings(BaseSettings):
    """
    Application settings class with environment variable validation.

    Attributes:
        database_url: SQLAlchemy connection string
        environment: Deployment profile ("development", "test" or "production")
        secret_key: Secret key for JWT token signing
        algorithm: Algorithm used for JWT signing (typically HS256)
        access_token_expire_minutes: Token lifetime; empty, None or 0 issues tokens without expiry

        # Credential settings
        bcrypt_rounds: bcrypt cost factor for password hashing
        password_min_length: Minimum accepted password length

        # Phone / OTP settings
        default_country_code: Prefix added to bare 10-digit phone numbers
        otp_expire_minutes: Lifetime of a locally issued OTP
        twilio_account_sid: Twilio account SID (external OTP mode)
        twilio_auth_token: Twilio auth token (external OTP mode)
        twilio_service_sid: Twilio Verify service SID (external OTP mode)

        # Bootstrap admin settings (optional)
        admin_bootstrap_token: One-time token allowing the first admin registration
        bootstrap_admin_email: Optional admin email for first admin creation at startup
        bootstrap_admin_password: Optional admin password for first admin creation at startup
        bootstrap_admin_name: Display name for the startup admin

        # Frontend settings
        cors_origins: Comma-separated list of allowed origins
    """
    # Database settings
    database_url: str = "sqlite:///./clinic.db"
    environment: str = DEVELOPMENT

    # JWT settings
    secret_key: str = DEFAULT_SECRET_KEY
    algorithm: str = "HS256"
    access_token_expire_minutes: Optional[int] = 60 * 24 * 7

    # Credential settings
    bcrypt_rounds: int = 10
    password_min_length: int = 6

    # Phone / OTP settings
    default_country_code: str = "+91"
    otp_expire_minutes: int = 10
    twilio_account_sid: Optional[str] = None
    twilio_auth_token: Optional[str] = None
    twilio_service_sid: Optional[str] = None

    # Bootstrap admin settings (optional - only used for first admin creation)
    admin_bootstrap_token: Optional[str] = None
    bootstrap_admin_email: Optional[str] = None
    bootstrap_admin_password: Optional[str] = None
    bootstrap_admin_name: str = "System Administrator"

    # Frontend settings
    cors_origins: str = "http://localhost:3000,http://localhost:5173"

    class Config:
        """Configuration for environment variables loading"""
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"

    @validator("access_token_expire_minutes", pre=True)
    def empty_expiry_means_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == PRODUCTION

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == DEVELOPMENT

    @property
    def twilio_configured(self) -> bool:
        return bool(self.twilio_account_sid and self.twilio_auth_token and self.twilio_service_sid)

    @property
    def allowed_origins(self) -> List[str]:
        """Return CORS origins as a list, parsing the comma-separated setting."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


def validate_settings(config: Settings) -> None:
    """
    Refuse unsafe settings before the application starts serving.

    Args:
        config: Settings instance to check

    Raises:
        ConfigurationError: If production runs with the placeholder signing secret
    """
    if config.secret_key == DEFAULT_SECRET_KEY:
        if config.is_production:
            raise ConfigurationError(
                "SECRET_KEY must be set to a private value when ENVIRONMENT=production"
            )
        logger.warning("⚠️  Using the default SECRET_KEY. Tokens are forgeable; set SECRET_KEY before deploying.")

    if config.is_production and not config.twilio_configured:
        logger.warning("Twilio Verify is not configured; OTP codes will be issued locally and not delivered")


# Create settings instance
settings = Settings()
