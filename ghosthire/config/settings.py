"""
Settings Module
===============

Pydantic-based configuration with environment variable loading.

Version: 0.1.0
"""

from enum import Enum
from functools import lru_cache
from pathlib import Path

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Deployment environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class ProvingBackendKind(str, Enum):
    """Which proving backend the proof orchestrator talks to."""

    NONE = "none"
    SNARKJS = "snarkjs"
    REMOTE = "remote"


class LedgerMode(str, Enum):
    """Ledger / verification service operation mode."""

    MOCK = "mock"
    HTTP = "http"
    DISABLED = "disabled"


class VerificationMode(str, Enum):
    """
    How verification behaves when the ledger cannot be reached.

    STRICT fails closed. INSECURE accepts a structural check instead and
    must be opted into explicitly.
    """

    STRICT = "strict"
    INSECURE = "insecure"


class ProvingSettings(BaseSettings):
    """Proving backend configuration."""

    model_config = SettingsConfigDict(env_prefix="ZK_")

    backend: ProvingBackendKind = ProvingBackendKind.SNARKJS
    build_dir: Path = Field(
        default_factory=lambda: Path(__file__).parent.parent.parent / "circuits" / "build"
    )
    circuit_name: str = "eligibility"
    prover_url: str = ""
    timeout_seconds: float = 30.0


class LedgerSettings(BaseSettings):
    """Ledger / verification service configuration."""

    model_config = SettingsConfigDict(env_prefix="LEDGER_")

    mode: LedgerMode = LedgerMode.MOCK
    url: str = "http://localhost:6565"
    api_key: SecretStr = SecretStr("")
    timeout_seconds: float = 10.0
    max_retries: int = 3
    network_id: str = "ghosthire-testnet"


class NullifierSettings(BaseSettings):
    """Nullifier derivation key."""

    model_config = SettingsConfigDict(env_prefix="NULLIFIER_")

    secret: SecretStr = SecretStr("default-secret-change-in-production")


class VerificationSettings(BaseSettings):
    """Proof verification policy."""

    model_config = SettingsConfigDict(env_prefix="VERIFICATION_")

    mode: VerificationMode = VerificationMode.STRICT
    max_proof_age_seconds: int = 3600
    clock_skew_seconds: int = 300
    # Run `snarkjs groth16 verify` when the circuit verification key is present
    local_check: bool = True


class CORSSettings(BaseSettings):
    """CORS configuration."""

    model_config = SettingsConfigDict(env_prefix="CORS_")

    origins: str = "http://localhost:3000,http://localhost:5173"
    allow_credentials: bool = True

    @property
    def origins_list(self) -> list[str]:
        """Parse origins string into list."""
        return [o.strip() for o in self.origins.split(",") if o.strip()]


class ServicePorts(BaseSettings):
    """Service port configuration."""

    eligibility: int = Field(default=8010, alias="ELIGIBILITY_PORT")


class Settings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables with sensible defaults.
    Use the global `settings` singleton or call `get_settings()`.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # General
    environment: Environment = Environment.DEVELOPMENT
    debug: bool = True
    log_level: LogLevel = LogLevel.INFO

    # Service ports
    ports: ServicePorts = Field(default_factory=ServicePorts)

    # Proof engine
    proving: ProvingSettings = Field(default_factory=ProvingSettings)
    ledger: LedgerSettings = Field(default_factory=LedgerSettings)
    nullifier: NullifierSettings = Field(default_factory=NullifierSettings)
    verification: VerificationSettings = Field(default_factory=VerificationSettings)

    # Security
    cors: CORSSettings = Field(default_factory=CORSSettings)

    @field_validator("log_level", mode="before")
    @classmethod
    def uppercase_log_level(cls, v: str | LogLevel) -> LogLevel:
        """Ensure log level is uppercase."""
        if isinstance(v, str):
            return LogLevel(v.upper())
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == Environment.DEVELOPMENT

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == Environment.PRODUCTION

    @property
    def is_testing(self) -> bool:
        """Check if running in test mode."""
        return self.environment == Environment.TESTING


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings: Application settings singleton.
    """
    return Settings()
