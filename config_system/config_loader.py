"""
Configuration loading and validation for the curation registry.
"""
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError


DATA_DIR_ENV_VAR = "EDEN_REGISTRY_DATA_DIR"


class ServerConfig(BaseModel):
    """HTTP server bind settings."""
    host: str = "127.0.0.1"
    port: int = Field(default=8000, ge=1, le=65535)


class VotingConfig(BaseModel):
    """Policy switches for collaborative voting."""
    # When true, GET voting status recomputes outcomes against the current
    # participant list instead of reporting the stored outcome.
    recompute_outcome_on_read: bool = False


class RegistryConfig(BaseModel):
    """Configuration for the whole registry service."""
    data_directory: str = "./data"
    log_level: str = "INFO"
    api_prefix: str = "/api/v1"
    server: ServerConfig = Field(default_factory=ServerConfig)
    voting: VotingConfig = Field(default_factory=VotingConfig)

    @property
    def data_path(self) -> Path:
        return Path(self.data_directory)


class ConfigValidationError(Exception):
    """Raised when configuration validation fails."""
    pass


class ConfigLoader:
    """Loads and validates the registry configuration file."""

    CONFIG_FILENAME = "registry.yaml"

    def __init__(self, config_root: str = "./config"):
        self.config_root = Path(config_root)
        self._config_cache: Optional[RegistryConfig] = None

    @property
    def config_path(self) -> Path:
        return self.config_root / self.CONFIG_FILENAME

    def _read_raw(self) -> Dict[str, Any]:
        if not self.config_path.exists():
            return {}

        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                config_data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigValidationError(f"Invalid YAML in {self.config_path}: {e}")

        if not isinstance(config_data, dict):
            raise ConfigValidationError(f"{self.config_path} must contain a mapping")

        if 'registry' not in config_data:
            raise ConfigValidationError("Registry config must have a 'registry' section")

        return config_data['registry'] or {}

    def load_registry_config(self) -> RegistryConfig:
        """Load and validate the registry configuration, applying env overrides."""
        if self._config_cache is not None:
            return self._config_cache

        registry_data = self._read_raw()

        env_data_dir = os.getenv(DATA_DIR_ENV_VAR)
        if env_data_dir:
            registry_data = {**registry_data, "data_directory": env_data_dir}

        try:
            registry_config = RegistryConfig(**registry_data)
        except ValidationError as e:
            raise ConfigValidationError(f"Invalid registry config in {self.config_path}: {e}")

        if registry_config.log_level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR"):
            raise ConfigValidationError(
                f"Unsupported log_level '{registry_config.log_level}' in {self.config_path}"
            )
        if not registry_config.api_prefix.startswith("/"):
            raise ConfigValidationError("api_prefix must start with '/'")

        self._config_cache = registry_config
        return registry_config

    def validate_all_configs(self) -> bool:
        """Validate configuration files."""
        try:
            self.load_registry_config()
            return True
        except ConfigValidationError:
            raise
        except Exception as e:
            raise ConfigValidationError(f"Unexpected error during validation: {e}")


def validate_config(config_root: str = "./config") -> bool:
    """Validate configuration and raise exception if invalid."""
    loader = ConfigLoader(config_root)
    return loader.validate_all_configs()
