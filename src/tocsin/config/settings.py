"""
Configuration management for Tocsin.

Hybrid configuration system using YAML files and environment variables.
Priority: Environment variables > YAML config > Pydantic defaults
"""

import os
from pathlib import Path
from typing import Optional

import yaml
from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Tocsin configuration schema.

    Loads configuration from:
    1. Environment variables (highest priority)
    2. YAML configuration files
    3. Pydantic defaults (lowest priority)

    Configuration files:
        - config/default.yaml: Base defaults
        - config/production.yaml: Production overrides
        - config/development.yaml: Development overrides
        - config/test.yaml: Test overrides
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="allow",
    )

    # Application
    APP_NAME: str = "Tocsin"
    APP_VERSION: str = "0.1.0"
    ENV: str = Field(default="production", description="Environment name")
    DEBUG: bool = Field(default=False, description="Debug mode")

    # Server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8080, ge=1024, le=65535)

    # WebSocket endpoint
    ws_path: str = Field(default="/ws", description="WebSocket endpoint path")
    greeting_message: str = Field(
        default="Connected to Tocsin realtime server",
        description="Text of the CONNECTED greeting",
    )

    # JWT Authentication (tokens are issued by the auth service)
    jwt_secret: Optional[str] = Field(
        default=None, description="JWT secret key (from environment)"
    )
    jwt_algorithm: str = Field(default="HS256", description="JWT algorithm")

    # Publish API
    publish_api_key: Optional[str] = Field(
        default=None,
        description="Shared key required in X-API-Key for POST /publish",
    )

    # Graceful Shutdown
    shutdown_timeout: int = Field(
        default=30,
        ge=1,
        description="Maximum seconds to wait for graceful shutdown",
    )
    shutdown_grace_period: int = Field(
        default=5,
        ge=0,
        description="Seconds to wait for WebSocket clients to close",
    )

    # Metrics
    METRICS_ENABLED: bool = Field(default=False)
    METRICS_HOST: str = Field(default="0.0.0.0")
    METRICS_PORT: int = Field(default=9090, ge=1024, le=65535)

    # Logging
    log_level: str = Field(default="info")
    log_file: Optional[str] = Field(default=None)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        allowed = ["debug", "info", "warning", "error", "critical"]
        v_lower = v.lower()
        if v_lower not in allowed:
            raise ValueError(f"Invalid log_level. Must be one of: {allowed}")
        return v_lower

    @field_validator("ws_path")
    @classmethod
    def validate_ws_path(cls, v: str) -> str:
        """Ensure WebSocket path is absolute."""
        if not v.startswith("/"):
            raise ValueError("ws_path must start with '/'")
        return v


def load_config(
    config_file: Optional[str] = None,
    env_file: Optional[str] = None,
    env: Optional[str] = None,
) -> Settings:
    """
    Load configuration from YAML files and environment variables.

    Priority: ENV vars > environment-specific YAML > default YAML > defaults

    Args:
        config_file: Optional YAML config filename override
        env_file: Optional .env filename (e.g., ".env.development")
        env: Optional environment name override

    Returns:
        Settings instance

    Raises:
        ValidationError: If a configured value is invalid
    """
    # Project root is four levels up: src/tocsin/config/settings.py
    current_file = Path(__file__).resolve()
    project_root = current_file.parent.parent.parent.parent
    config_dir = project_root / "config"

    environment = env or os.getenv("ENV", "production")

    env_map = {
        "production": (".env.production", "production.yaml"),
        "development": (".env.development", "development.yaml"),
        "test": (".env.development", "test.yaml"),
    }

    default_env_file, default_config_file = env_map.get(
        environment, (".env.production", "production.yaml")
    )
    if env_file is None:
        env_file = default_env_file
    if config_file is None:
        config_file = default_config_file

    # Load .env file FIRST (before Settings initialization)
    env_file_path = project_root / env_file
    if env_file_path.exists():
        load_dotenv(env_file_path, override=True)

    merged_config = {}

    default_config_path = config_dir / "default.yaml"
    if default_config_path.exists():
        with open(default_config_path, "r") as f:
            loaded = yaml.safe_load(f)
            if loaded:
                merged_config = loaded

    env_config_path = config_dir / config_file
    if env_config_path.exists():
        with open(env_config_path, "r") as f:
            loaded = yaml.safe_load(f)
            if loaded:
                for key, value in loaded.items():
                    merged_config[key] = value

    # Environment variables win over YAML values
    for key in list(merged_config.keys()):
        if key in os.environ:
            del merged_config[key]

    return Settings(**merged_config)


# Global settings singleton (lazy initialization)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get or initialize global settings singleton.

    Returns:
        Settings instance
    """
    global _settings
    if _settings is None:
        _settings = load_config()
    return _settings


def override_settings(new_settings: Settings) -> None:
    """
    Override global settings (for testing).

    Args:
        new_settings: New Settings instance to use
    """
    global _settings
    _settings = new_settings


def reset_settings() -> None:
    """
    Reset settings to force re-initialization (for testing).

    This allows tests to change environment variables and reload config.
    """
    global _settings
    _settings = None
