"""
Guichet configuration with hybrid YAML + ENV support.

Priority: Environment variables > YAML config > Pydantic defaults
"""

import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import Field, computed_field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_RPC_URLS = {
    "devnet": "https://api.devnet.solana.com",
    "testnet": "https://api.testnet.solana.com",
    "mainnet-beta": "https://api.mainnet-beta.solana.com",
    "localnet": "http://127.0.0.1:8899",
}


class CircuitBreakerConfig(BaseSettings):
    """Circuit breaker configuration for the ledger RPC."""

    failure_threshold: int = Field(default=5, ge=1, le=100)
    success_threshold: int = Field(default=2, ge=1, le=10)
    timeout: float = Field(default=30.0, ge=1.0, le=600.0)


class RetryConfig(BaseSettings):
    """Retry configuration for transient RPC failures."""

    max_attempts: int = Field(default=3, ge=1, le=10)
    initial_delay: float = Field(default=0.5, ge=0.0, le=10.0)
    max_delay: float = Field(default=5.0, ge=0.1, le=300.0)
    backoff_multiplier: float = Field(default=2.0, ge=1.0, le=10.0)
    jitter: bool = Field(default=True)


class TimeoutConfig(BaseSettings):
    """Timeout configuration for RPC calls."""

    rpc_call: float = Field(default=10.0, ge=1.0, le=60.0)
    connect: float = Field(default=3.0, ge=0.5, le=30.0)


class ConfirmationConfig(BaseSettings):
    """Confirmation polling configuration."""

    poll_interval: float = Field(default=1.0, gt=0.0, le=10.0)
    deadline: float = Field(default=30.0, gt=0.0, le=300.0)
    late_check_delay: float = Field(default=30.0, ge=0.0, le=600.0)
    outcome_cache_size: int = Field(default=256, ge=1, le=100_000)

    @model_validator(mode="after")
    def check_interval_within_deadline(self) -> "ConfirmationConfig":
        """Deadline must leave room for at least one poll cycle."""
        if self.poll_interval > self.deadline:
            raise ValueError("poll_interval cannot exceed deadline")
        return self


class ResilienceConfig(BaseSettings):
    """Resilience patterns configuration."""

    circuit_breaker: CircuitBreakerConfig = Field(
        default_factory=CircuitBreakerConfig
    )
    retry: RetryConfig = Field(default_factory=RetryConfig)
    timeouts: TimeoutConfig = Field(default_factory=TimeoutConfig)


class GuichetConfig(BaseSettings):
    """Guichet configuration schema."""

    model_config = SettingsConfigDict(
        env_prefix="GUICHET_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    # Blockchain configuration
    network: str = Field(default="devnet")
    rpc_url: Optional[str] = Field(default=None)
    commitment: str = Field(default="confirmed")
    keypair_path: Optional[str] = Field(default=None)

    # Logging
    log_level: str = Field(default="info")
    json_logs: bool = Field(default=False)

    confirmation: ConfirmationConfig = Field(default_factory=ConfirmationConfig)
    resilience: ResilienceConfig = Field(default_factory=ResilienceConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        """Environment variables win over values loaded from YAML."""
        return env_settings, init_settings, dotenv_settings, file_secret_settings

    @computed_field
    @property
    def resolved_rpc_url(self) -> str:
        """Explicit RPC URL, or the public endpoint for the network."""
        return self.rpc_url or DEFAULT_RPC_URLS[self.network]

    @computed_field
    @property
    def airdrop_enabled(self) -> bool:
        """Airdrops only exist on test networks."""
        return self.network != "mainnet-beta"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        allowed = ["debug", "info", "warning", "error", "critical"]
        v_lower = v.lower()
        if v_lower not in allowed:
            raise ValueError(f"Invalid log_level. Must be one of: {allowed}")
        return v_lower

    @field_validator("network")
    @classmethod
    def validate_network(cls, v: str) -> str:
        """Validate Solana network."""
        v_lower = v.lower()
        if v_lower not in DEFAULT_RPC_URLS:
            raise ValueError(
                f"Invalid network. Must be one of: {list(DEFAULT_RPC_URLS)}"
            )
        return v_lower

    @field_validator("commitment")
    @classmethod
    def validate_commitment(cls, v: str) -> str:
        """Only confirmed and finalized are meaningful confirmation targets."""
        allowed = ["confirmed", "finalized"]
        v_lower = v.lower()
        if v_lower not in allowed:
            raise ValueError(f"Invalid commitment. Must be one of: {allowed}")
        return v_lower

    @field_validator("keypair_path")
    @classmethod
    def expand_keypair_path(cls, v: Optional[str]) -> Optional[str]:
        """Expand home directory in keypair path."""
        if v:
            return os.path.expanduser(v)
        return v


def _read_yaml(path: Path) -> dict:
    if not path.exists():
        return {}
    with open(path, "r") as f:
        loaded = yaml.safe_load(f)
    return loaded or {}


def _deep_merge(base: dict, override: dict) -> dict:
    """Merge override into base, recursing into nested sections."""
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(
    config_file: Optional[str] = None,
    config_dir: Optional[Path] = None,
) -> GuichetConfig:
    """
    Load configuration from YAML files.

    Priority: Environment variables > environment-specific YAML > default YAML

    Args:
        config_file: Optional YAML filename (or path) override
        config_dir: Optional config directory (defaults to <project>/config)

    Returns:
        GuichetConfig instance
    """
    env = os.getenv("ENV", "development")

    config_map = {
        "production": "production.yaml",
        "development": "development.yaml",
        "test": "test.yaml",
    }

    if config_dir is None:
        project_root = Path(__file__).resolve().parents[3]
        config_dir = project_root / "config"

    merged_config = _read_yaml(config_dir / "default.yaml")

    if config_file is None:
        config_file = os.getenv("GUICHET_CONFIG") or config_map.get(
            env, "development.yaml"
        )

    env_config_path = Path(config_file)
    if not env_config_path.is_absolute():
        env_config_path = config_dir / config_file

    merged_config = _deep_merge(merged_config, _read_yaml(env_config_path))

    return GuichetConfig(**merged_config)


# Global settings instance
_settings: Optional[GuichetConfig] = None


def get_settings() -> GuichetConfig:
    """
    Get singleton settings instance.

    Returns:
        GuichetConfig instance
    """
    global _settings
    if _settings is None:
        _settings = load_config()
    return _settings


def override_settings(settings: GuichetConfig) -> None:
    """Replace the singleton (tests, CLI overrides)."""
    global _settings
    _settings = settings


def reset_settings() -> None:
    """Drop the singleton so the next get_settings() reloads."""
    global _settings
    _settings = None
