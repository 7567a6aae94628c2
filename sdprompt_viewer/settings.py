"""Application settings using Pydantic for configuration management."""

import logging
import os
from pathlib import Path
from typing import Optional
from pydantic import BaseModel, Field, field_validator
import yaml

from .utils.parameter_parser import MAX_INPUT_SIZE, MAX_UNKNOWNS

logger = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseModel):
    """Application settings with validation."""

    # Directory and file settings
    dir: Path = Field(default_factory=lambda: Path.cwd(), description="Directory with images")
    pattern: str = Field(default="*.png", description="Glob pattern, union with | (e.g., *.png|*.PNG)")

    # Server settings
    host: str = Field(default="127.0.0.1", description="Host to bind")
    port: int = Field(default=7863, description="Port to serve")

    # Extraction settings
    parameters_key: str = Field(default="parameters", description="Keyword of the PNG tEXt chunk holding the parameters")
    max_input_size: int = Field(default=MAX_INPUT_SIZE, description="Longest parameters text parsed, longer text is truncated")
    max_unknowns: int = Field(default=MAX_UNKNOWNS, description="Capacity of the unknown parameters list")

    # Display settings
    show_unknown_params: bool = Field(default=True, description="Include parameters with unrecognized keys in responses")

    # Logging settings
    log_level: str = Field(default="INFO", description="Log level name")
    log_file: Optional[Path] = Field(default=None, description="Optional log file")

    @field_validator('dir', mode='before')
    @classmethod
    def expand_dir_path(cls, v):
        """Expand and resolve directory path."""
        if isinstance(v, str):
            return Path(v).expanduser().resolve()
        return v.resolve() if isinstance(v, Path) else v

    @field_validator('port')
    @classmethod
    def validate_port(cls, v):
        """Validate port range."""
        if not 1 <= v <= 65535:
            raise ValueError(f"Port must be between 1 and 65535, got {v}")
        return v

    @field_validator('max_input_size')
    @classmethod
    def validate_max_input_size(cls, v):
        if v <= 0:
            raise ValueError(f"max_input_size must be positive, got {v}")
        return v

    @field_validator('max_unknowns')
    @classmethod
    def validate_max_unknowns(cls, v):
        if v < 1:
            raise ValueError(f"max_unknowns must be at least 1, got {v}")
        return v

    @field_validator('parameters_key')
    @classmethod
    def validate_parameters_key(cls, v):
        if not v or '\x00' in v:
            raise ValueError("parameters_key must be a non-empty keyword without NUL characters")
        return v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        """Normalize log level name."""
        level = str(v).upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}, got {v}")
        return level

    @classmethod
    def load_from_yaml(cls, config_file: Optional[Path] = None) -> 'Settings':
        """Load settings from YAML file with env var override capability."""
        config_file = config_file or Path("config/config.yml")

        config_data = {}
        if config_file.exists():
            try:
                with open(config_file, 'r', encoding='utf-8') as f:
                    config_data = yaml.safe_load(f) or {}
            except Exception as e:
                logger.warning(f"Could not load {config_file}: {e}")

        env_dir = os.getenv('SDPROMPT_DIR')
        if env_dir:
            config_data['dir'] = env_dir
        env_key = os.getenv('SDPROMPT_PARAMETERS_KEY')
        if env_key:
            config_data['parameters_key'] = env_key

        return cls(**config_data)
