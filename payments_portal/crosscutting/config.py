"""
Name: Application Configuration (Settings)

Responsibilities:
  - Centralized, typed configuration using pydantic-settings
  - Validate environment variables at startup
  - Provide defaults that match the portal's security policy (lockout, token TTLs, Argon2 costs)

Collaborators:
  - api/main.py: reads settings for CORS, DB pool and startup validation
  - container.py: builds the password hasher, token issuer and stores from settings
  - identity/employee_auth.py: cookie name for token extraction

Constraints:
  - Lives in crosscutting layer, NOT in domain/application
  - No business logic, pure configuration

Notes:
  - Uses pydantic-settings for env parsing and validation
  - Singleton via lru_cache
  - Security limits are configurable but production refuses insecure secrets
"""

from decimal import Decimal
from functools import lru_cache

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_JWT_ISSUER = "secure-payments-portal"
DEFAULT_JWT_AUDIENCE = "banking-employees"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        database_url: PostgreSQL connection string (required outside test envs)
        app_env: Application environment (local/test/production)
        log_level: Logging level name (default: INFO)
        log_json: Emit JSON logs (default: True)
        allowed_origins: Comma-separated CORS origins
        jwt_secret: Secret for signing access tokens
        jwt_refresh_secret: Secret for refresh tokens (falls back to jwt_secret)
        jwt_access_ttl_minutes: Access token TTL (default: 24h)
        jwt_refresh_ttl_days: Refresh token TTL (default: 7d)
        jwt_issuer / jwt_audience: Fixed claim pair checked on issue and validate
        jwt_cookie_name: Cookie consulted when no Authorization header is sent
        jwt_cookie_secure: Mark the access cookie as Secure (HTTPS only)
        argon2_memory_cost: Argon2id memory cost in KiB (default: 65536)
        argon2_parallelism: Argon2id lanes (default: 2)
        argon2_time_cost: Argon2id iterations (default: 3)
        argon2_max_concurrency: Max concurrent hashes on the worker pool
        lockout_max_attempts: Failed logins before lockout (default: 5)
        lockout_minutes: Lockout window (default: 15)
        default_verification_limit: Limit for employees created without one
        batch_max_size: Max transactions per settlement batch (default: 50)
        rejection_reason_max_chars: Max chars for verification notes (default: 500)
        request_timeout_seconds: Deadline applied to auth/authorization calls
    """

    database_url: str = ""

    # Environment
    app_env: str = "development"

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    # CORS configuration
    allowed_origins: str = "http://localhost:3000"

    # Security - JWT
    jwt_secret: str = "dev-secret"
    jwt_refresh_secret: str = ""
    jwt_access_ttl_minutes: int = 24 * 60
    jwt_refresh_ttl_days: int = 7
    jwt_issuer: str = DEFAULT_JWT_ISSUER
    jwt_audience: str = DEFAULT_JWT_AUDIENCE
    jwt_cookie_name: str = "access_token"
    jwt_cookie_secure: bool = False

    # Security - Argon2id
    argon2_memory_cost: int = 65536
    argon2_parallelism: int = 2
    argon2_time_cost: int = 3
    argon2_max_concurrency: int = 4

    # Security - Lockout
    lockout_max_attempts: int = 5
    lockout_minutes: int = 15

    # Transaction authorization
    default_verification_limit: Decimal = Decimal("100000")
    batch_max_size: int = 50
    rejection_reason_max_chars: int = 500

    # Deadlines
    request_timeout_seconds: float = 10.0

    # Database - Connection Pool
    db_pool_min_size: int = 2
    db_pool_max_size: int = 10
    db_statement_timeout_ms: int = 30000
    db_lock_timeout_ms: int = 5000

    # Dev Tools (demo employee seed)
    dev_seed_demo_employee: bool = False
    dev_seed_employee_id: str = "EMP001"
    dev_seed_username: str = "jsmith"
    dev_seed_password: str = "Demo123!@#"
    dev_seed_full_name: str = "John Smith"
    dev_seed_email: str = "john.smith@bank.com"
    dev_seed_department: str = "International Payments"

    @field_validator(
        "argon2_memory_cost",
        "argon2_parallelism",
        "argon2_time_cost",
        "argon2_max_concurrency",
        "lockout_max_attempts",
        "lockout_minutes",
        "batch_max_size",
        "rejection_reason_max_chars",
        "jwt_access_ttl_minutes",
        "jwt_refresh_ttl_days",
    )
    @classmethod
    def must_be_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("value must be greater than 0")
        return v

    @field_validator("default_verification_limit")
    @classmethod
    def limit_must_be_non_negative(cls, v: Decimal) -> Decimal:
        if v < 0:
            raise ValueError("default_verification_limit must be >= 0")
        return v

    @field_validator("request_timeout_seconds")
    @classmethod
    def timeout_must_be_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("request_timeout_seconds must be greater than 0")
        return v

    def get_allowed_origins_list(self) -> list[str]:
        """Parse comma-separated origins into a list."""
        return [
            origin.strip()
            for origin in self.allowed_origins.split(",")
            if origin.strip()
        ]

    def get_refresh_secret(self) -> str:
        """Refresh tokens use their own secret when configured."""
        return (self.jwt_refresh_secret or "").strip() or self.jwt_secret

    @model_validator(mode="after")
    def validate_argon2_memory(self):
        # argon2 requires at least 8 KiB per lane
        if self.argon2_memory_cost < 8 * self.argon2_parallelism:
            raise ValueError(
                "argon2_memory_cost must be at least 8 * argon2_parallelism KiB"
            )
        return self

    @model_validator(mode="after")
    def validate_security_requirements(self):
        if not self.is_production():
            return self

        insecure_secrets = {"dev-secret", "changeme", "change-me", "password"}
        jwt_secret = (self.jwt_secret or "").strip()
        if not jwt_secret or jwt_secret in insecure_secrets:
            raise ValueError(
                "JWT_SECRET must be set to a strong, non-default value in production"
            )
        if len(jwt_secret) < 32:
            raise ValueError("JWT_SECRET must be at least 32 characters in production")
        if not self.database_url.strip():
            raise ValueError("DATABASE_URL is required in production")
        if self.dev_seed_demo_employee:
            raise ValueError("DEV_SEED_DEMO_EMPLOYEE must be disabled in production")

        return self

    def is_production(self) -> bool:
        return self.app_env.strip().lower() == "production"

    def is_test(self) -> bool:
        return self.app_env.strip().lower() in {"test", "testing", "ci"}

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore unknown env vars
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get singleton Settings instance.

    Raises:
        ValidationError: If env vars are missing or invalid
    """
    return Settings()
