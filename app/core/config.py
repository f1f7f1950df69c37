"""Application configuration loaded from environment variables.

Settings for the database, API, session tokens, the password-reset OTP
flow and email delivery. Uses pydantic-settings for validation and .env
file support.
"""

from typing import Literal

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Known insecure defaults that must not be used in production
# Security: Runtime check in check_production_security() prevents use in production
_INSECURE_DEFAULT_PASSWORD = "s2design_dev_password"  # nosec B105
_INSECURE_DEFAULT_AUTH_SECRET = "change-this-session-secret-in-production"  # nosec B105
_INSECURE_DEFAULT_ADMIN_PASSWORD = "admin123"  # nosec B105

# Minimum length for AUTH_SECRET in production (256 bits = 32 bytes)
_MIN_AUTH_SECRET_LENGTH = 32

# bcrypt cost floor used when the default admin is provisioned
_MIN_BCRYPT_ROUNDS = 10

_OTP_MIN_LENGTH = 4
_OTP_MAX_LENGTH = 10


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Database
    database_host: str = "localhost"
    database_port: int = 5432
    database_name: str = "s2design"
    database_user: str = "s2design_user"
    database_password: str = _INSECURE_DEFAULT_PASSWORD

    # API
    # 0.0.0.0 binds to all network interfaces (required for Docker containers)
    api_host: str = "0.0.0.0"  # nosec B104
    api_port: int = 3001

    # CORS (Security)
    # Default allows the Vite dev server used by the marketing site
    allowed_origins: list[str] = ["http://localhost:5173"]

    # Application
    environment: str = "development"
    log_level: str = "INFO"

    # Session tokens (stateless, HS256). Rotating auth_secret invalidates
    # every issued token; there is no other revocation mechanism.
    auth_secret: SecretStr = SecretStr(_INSECURE_DEFAULT_AUTH_SECRET)
    auth_issuer: str = "s2design-backend"
    auth_audience: str = "s2design-admin"
    session_token_lifetime_hours: int = 24

    # Password reset OTP
    otp_length: int = 6
    otp_expires_in_minutes: int = 10
    # Preserves the historical "No account found" response on forgot-password.
    # Set to false to answer unknown emails with the generic success message.
    forgot_password_reveals_unknown_email: bool = True

    # Password hashing
    bcrypt_rounds: int = 12
    admin_bootstrap_bcrypt_rounds: int = _MIN_BCRYPT_ROUNDS

    # Default admin, created at startup if the username is absent
    admin_username: str = "admin"
    admin_password: SecretStr = SecretStr(_INSECURE_DEFAULT_ADMIN_PASSWORD)
    admin_email: str = ""

    # Email
    email_provider: Literal["resend", "mock"] = "resend"
    email_from: str = "noreply@s2design.com"
    resend_api_key: SecretStr = SecretStr("")
    resend_api_url: str = "https://api.resend.com/emails"
    site_name: str = "S2 Design Interior"

    # Rate Limiting (Security)
    # Format: "count/period" (e.g., "5/15minute")
    rate_limit_auth: str = "5/15minute"  # login, forgot-password, reset-password
    rate_limit_enabled: bool = True  # Disable for testing

    @property
    def database_url(self) -> str:
        """Async database URL for SQLAlchemy."""
        return (
            f"postgresql+asyncpg://{self.database_user}:{self.database_password}"
            f"@{self.database_host}:{self.database_port}/{self.database_name}"
        )

    @model_validator(mode="after")
    def check_production_security(self) -> "Settings":
        """Validate configuration invariants and production security.

        Security: Prevents deployment with known insecure defaults.
        Checks:
        - CORS must not use wildcard origin (all environments)
        - OTP length and validity window must be sane (all environments)
        - bcrypt cost factors must not drop below the bootstrap floor
        - Database password, admin password and AUTH_SECRET must not be
          the defaults in production; AUTH_SECRET must be >= 32 chars
        """
        if "*" in self.allowed_origins:
            msg = (
                "ALLOWED_ORIGINS must not contain '*' (wildcard). "
                "List the site origins explicitly."
            )
            raise ValueError(msg)

        if not _OTP_MIN_LENGTH <= self.otp_length <= _OTP_MAX_LENGTH:
            msg = (
                f"OTP_LENGTH must be between {_OTP_MIN_LENGTH} and "
                f"{_OTP_MAX_LENGTH}. Got: {self.otp_length}"
            )
            raise ValueError(msg)
        if self.otp_expires_in_minutes <= 0:
            msg = (
                "OTP_EXPIRES_IN_MINUTES must be positive. "
                f"Got: {self.otp_expires_in_minutes}"
            )
            raise ValueError(msg)
        if self.session_token_lifetime_hours <= 0:
            msg = (
                "SESSION_TOKEN_LIFETIME_HOURS must be positive. "
                f"Got: {self.session_token_lifetime_hours}"
            )
            raise ValueError(msg)

        if self.admin_bootstrap_bcrypt_rounds < _MIN_BCRYPT_ROUNDS:
            msg = (
                f"ADMIN_BOOTSTRAP_BCRYPT_ROUNDS must be at least {_MIN_BCRYPT_ROUNDS}. "
                f"Got: {self.admin_bootstrap_bcrypt_rounds}"
            )
            raise ValueError(msg)
        if self.bcrypt_rounds < self.admin_bootstrap_bcrypt_rounds:
            msg = (
                "BCRYPT_ROUNDS must not be lower than ADMIN_BOOTSTRAP_BCRYPT_ROUNDS. "
                f"Got: {self.bcrypt_rounds} < {self.admin_bootstrap_bcrypt_rounds}"
            )
            raise ValueError(msg)

        if self.environment == "production":
            if self.database_password == _INSECURE_DEFAULT_PASSWORD:
                msg = (
                    "Cannot use default database password in production. "
                    "Set DATABASE_PASSWORD environment variable to a secure value."
                )
                raise ValueError(msg)

            if (
                self.admin_password.get_secret_value()
                == _INSECURE_DEFAULT_ADMIN_PASSWORD
            ):
                msg = (
                    "Cannot use default admin password in production. "
                    "Set ADMIN_PASSWORD environment variable to a secure value."
                )
                raise ValueError(msg)

            secret_value = self.auth_secret.get_secret_value()
            if secret_value == _INSECURE_DEFAULT_AUTH_SECRET:
                msg = (
                    "AUTH_SECRET must be set in production. "
                    'Generate with: python -c "import secrets; '
                    'print(secrets.token_hex(32))"'
                )
                raise ValueError(msg)
            if len(secret_value) < _MIN_AUTH_SECRET_LENGTH:
                msg = (
                    f"AUTH_SECRET must be at least {_MIN_AUTH_SECRET_LENGTH} "
                    "characters for adequate security."
                )
                raise ValueError(msg)

        return self


settings = Settings()
