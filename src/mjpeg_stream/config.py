"""
mjpeg_stream Configuration
==========================

This module handles configuration loading for the stream client.

Configuration Sources (in order of precedence):
    1. Environment variables (highest priority)
    2. config.yaml file
    3. Default values (lowest priority)

Environment Variable Mapping:
    MJPEG_STREAM_URL              -> stream.url
    MJPEG_READ_CHUNK_SIZE         -> stream.read_chunk_size
    MJPEG_BUFFER_CAPACITY         -> stream.buffer_capacity
    MJPEG_RECONNECT_DELAY         -> stream.reconnect_delay_seconds
    MJPEG_PAUSE_POLL              -> stream.pause_poll_seconds
    MJPEG_REQUEST_TIMEOUT         -> stream.request_timeout_seconds
    MJPEG_MAX_RECONNECT_ATTEMPTS  -> stream.max_reconnect_attempts
    MJPEG_LOG_LEVEL               -> logging.level

Example:
    from mjpeg_stream.config import load_config, setup_logging

    settings = load_config()
    setup_logging(settings)
    print(settings.stream.url)
"""

import os
import logging
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, model_validator


logger = logging.getLogger(__name__)


# =============================================================================
# Configuration Models
# =============================================================================

class StreamSource(BaseModel):
    """
    Immutable stream source configuration.

    Created once per client and never mutated. An empty url is accepted
    here and rejected when the client is started.
    """

    model_config = ConfigDict(frozen=True)

    url: str = Field(
        default="",
        description="HTTP URL of the MJPEG stream",
    )
    read_chunk_size: int = Field(
        default=1024,
        ge=1,
        description="Maximum bytes read from the response body per tick",
    )
    buffer_capacity: int = Field(
        default=1024 * 1024,
        ge=2,
        description="Fixed capacity of the read buffer in bytes",
    )
    reconnect_delay_seconds: float = Field(
        default=0.25,
        ge=0,
        description="Idle delay after an error state before reconnecting",
    )
    pause_poll_seconds: float = Field(
        default=1.0,
        ge=0,
        description="Idle delay between ticks while paused",
    )
    request_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Connect and read timeout for the HTTP transport",
    )
    max_reconnect_attempts: int = Field(
        default=0,
        ge=0,
        description="Consecutive recoveries without a frame before giving up (0 = unlimited)",
    )

    @model_validator(mode="after")
    def _check_capacity(self) -> "StreamSource":
        if self.buffer_capacity <= self.read_chunk_size:
            raise ValueError(
                f"buffer_capacity ({self.buffer_capacity}) must exceed "
                f"read_chunk_size ({self.read_chunk_size})"
            )
        return self


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="text", description="Log format: json or text")


class Settings(BaseModel):
    """
    Main settings class for mjpeg_stream.

    Loads configuration from YAML file and environment variables.
    Environment variables take precedence over file values.
    """

    stream: StreamSource = Field(default_factory=StreamSource)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# =============================================================================
# Configuration Loading
# =============================================================================

def load_config(config_path: Optional[str] = None) -> Settings:
    """
    Load configuration from YAML file and environment variables.

    Priority (highest to lowest):
        1. Environment variables
        2. YAML config file
        3. Default values

    Args:
        config_path: Path to config.yaml. If None, searches common locations.

    Returns:
        Settings: Loaded configuration
    """
    # Find config file
    if config_path is None:
        search_paths = [
            Path("config.yaml"),
            Path("config.yml"),
            Path(__file__).parent.parent.parent / "config.yaml",
        ]
        for path in search_paths:
            if path.exists():
                config_path = str(path)
                break

    # Load from YAML if exists
    config_data = {}
    if config_path and Path(config_path).exists():
        logger.info(f"Loading config from: {config_path}")
        with open(config_path, "r") as f:
            config_data = yaml.safe_load(f) or {}
    else:
        logger.debug("No config file found, using defaults and environment variables")

    _apply_env_overrides(config_data)

    return Settings.model_validate(config_data)


def _apply_env_overrides(config_data: dict) -> None:
    """Apply environment variable overrides to config data."""

    # Stream settings
    if env_url := os.environ.get("MJPEG_STREAM_URL"):
        config_data.setdefault("stream", {})["url"] = env_url
    if env_chunk := os.environ.get("MJPEG_READ_CHUNK_SIZE"):
        config_data.setdefault("stream", {})["read_chunk_size"] = int(env_chunk)
    if env_capacity := os.environ.get("MJPEG_BUFFER_CAPACITY"):
        config_data.setdefault("stream", {})["buffer_capacity"] = int(env_capacity)
    if env_delay := os.environ.get("MJPEG_RECONNECT_DELAY"):
        config_data.setdefault("stream", {})["reconnect_delay_seconds"] = float(env_delay)
    if env_poll := os.environ.get("MJPEG_PAUSE_POLL"):
        config_data.setdefault("stream", {})["pause_poll_seconds"] = float(env_poll)
    if env_timeout := os.environ.get("MJPEG_REQUEST_TIMEOUT"):
        config_data.setdefault("stream", {})["request_timeout_seconds"] = float(env_timeout)
    if env_attempts := os.environ.get("MJPEG_MAX_RECONNECT_ATTEMPTS"):
        config_data.setdefault("stream", {})["max_reconnect_attempts"] = int(env_attempts)

    # Logging settings
    if env_log := os.environ.get("MJPEG_LOG_LEVEL"):
        config_data.setdefault("logging", {})["level"] = env_log


def setup_logging(settings: Settings) -> None:
    """Configure logging based on settings."""
    log_level = getattr(logging, settings.logging.level.upper(), logging.INFO)

    if settings.logging.format == "json":
        log_format = '{"time": "%(asctime)s", "level": "%(levelname)s", "module": "%(name)s", "message": "%(message)s"}'
    else:
        log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=log_level,
        format=log_format,
        datefmt="%Y-%m-%dT%H:%M:%S",
    )
