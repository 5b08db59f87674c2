"""Configuration loading (ConfigLoader)."""

import toml
from typing import Dict, Any, Optional, Literal
from pydantic import BaseModel, Field, ValidationError, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
import logging

from .registry import DEFAULT_DEVELOPMENT_PREFIX, DEFAULT_DEVELOPMENT_SUBPATH

# Standard logging for the config phase; structlog is configured from the
# values loaded here.
config_logger = logging.getLogger(__name__)

# --- Pydantic Models for Config Structure ---

class ProviderSpec(BaseModel):
    """One resource provider to build and register at startup."""
    type: Literal["directory", "package"] = Field(..., description="Provider implementation to use.")
    path: Optional[str] = Field(None, description="Resource directory, for 'directory' providers.")
    package: Optional[str] = Field(None, description="Importable package holding bundled resources, for 'package' providers.")
    subdirectory: Optional[str] = Field("resources", description="Folder inside the package that holds the resources.")

    @model_validator(mode='after')
    def check_location(self):
        if self.type == "directory" and not self.path:
            raise ValueError("'directory' providers require 'path'")
        if self.type == "package" and not self.package:
            raise ValueError("'package' providers require 'package'")
        return self

class DevelopmentConfig(BaseModel):
    prefix: str = Field(DEFAULT_DEVELOPMENT_PREFIX, description="Prefix of the per-provider development flag ('<prefix>.<name>').")
    subpath: str = Field(DEFAULT_DEVELOPMENT_SUBPATH, description="Resource folder relative to the working copy named by the flag.")

class AppConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_file='.env',
        env_nested_delimiter='__',
        extra='ignore' # Ignore extra fields from files/env
    )

    # Top-level settings
    log_level: str = "INFO" # LOG_LEVEL
    log_json: bool = False # LOG_JSON; set to true for JSON logs
    host: str = "127.0.0.1"
    port: int = 8000
    reload: bool = False # Set True for Uvicorn auto-reload (dev only)

    development: DevelopmentConfig = Field(default_factory=DevelopmentConfig)

    # Registration order follows the order of the TOML tables
    providers: Dict[str, ProviderSpec] = Field(default_factory=dict)

# --- Config Loader Class ---

class ConfigError(Exception):
    """Custom exception for configuration loading errors."""
    pass

class ConfigLoader:
    def __init__(self, config_path: str = "config.toml"):
        self.config_path = config_path
        self._config: Optional[AppConfig] = None
        self._raw_config: Optional[Dict[str, Any]] = None
        self.load_config()

    def load_config(self):
        """Loads configuration from the TOML file and validates it."""
        config_logger.info(f"Loading configuration from: {self.config_path}")
        try:
            with open(self.config_path, 'r') as f:
                self._raw_config = toml.load(f)

            # Environment values still apply for anything the file leaves out
            self._config = AppConfig(**self._raw_config)

            config = self._config
            config_logger.info(f"Configuration loaded successfully: {len(config.providers)} resource provider(s), log_level={config.log_level}")

        except FileNotFoundError:
            config_logger.error(f"Configuration file not found at {self.config_path}")
            raise ConfigError(f"Config file not found: {self.config_path}")
        except toml.TomlDecodeError as e:
            config_logger.error(f"Error decoding TOML file {self.config_path}: {e}")
            raise ConfigError(f"Invalid TOML format: {e}")
        except ValidationError as e:
            config_logger.error(f"Configuration validation error: {e}")
            raise ConfigError(f"Invalid configuration structure: {e}")

    def get_config(self) -> AppConfig:
        """Returns the loaded and validated configuration object."""
        if self._config is None:
            raise ConfigError("Configuration could not be loaded.")
        return self._config

# Example usage (typically instantiated once and shared/injected)
# app_config = ConfigLoader("config.toml").get_config()
# registry = ResourceRegistry(development_prefix=app_config.development.prefix)
