"""
Screenshare Gateway Configuration
=================================

This module handles configuration loading for the screenshare gateway.

Configuration Sources (in order of precedence):
    1. Environment variables (highest priority)
    2. config.yaml file
    3. Default values (lowest priority)

Environment Variable Mapping:
    SCREENSHARE_HOST            -> server.host
    SCREENSHARE_PORT            -> server.port
    PORT                        -> server.port (container platforms)
    SCREENSHARE_BROWSER_FPS     -> server.browser_fps
    SCREENSHARE_READ_TIMEOUT    -> server.read_timeout_seconds
    SCREENSHARE_CAPTURE_FPS     -> capture.fps
    SCREENSHARE_CAPTURE_SOURCE  -> capture.source
    SCREENSHARE_LOG_LEVEL       -> logging.level
    SCREENSHARE_LOG_FORMAT      -> logging.format

Rates are clamped, not rejected:
    server.browser_fps -> [0.5, 60]
    capture.fps        -> [1, 60]

Example:
    from screenshare_gateway.config import load_config

    settings = load_config()
    print(settings.server.port)
    print(settings.server.browser_fps)
"""

import os
import logging
from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from screenshare_gateway.limits import clamp_browser_fps, clamp_capture_fps


logger = logging.getLogger(__name__)

# Characters that would break out of the viewer page's attribute or script string
_UNSAFE_ROUTE_CHARS = "\"'<>\\`"


# =============================================================================
# Configuration Models
# =============================================================================

class GatewayInfo(BaseModel):
    """Service identification."""

    name: str = Field(default="screenshare-gateway", description="Service name")
    version: str = Field(default="0.1.0", description="Service version")


class ServerConfig(BaseModel):
    """
    Gateway server configuration.

    Supplied once at start and immutable thereafter.
    """

    model_config = ConfigDict(frozen=True)

    host: str = Field(default="0.0.0.0", description="Bind host")
    port: int = Field(
        default=8000,
        ge=0,
        le=65535,
        description="Bind port (0 = OS-assigned)",
    )
    browser_fps: float = Field(
        default=5.0,
        description="Viewer page refresh rate, clamped to [0.5, 60]",
    )
    image_route: str = Field(
        default="/shot.jpg",
        description="Route serving the current frame",
    )
    read_timeout_seconds: float = Field(
        default=5.0,
        gt=0,
        description="Deadline for receiving a request before dropping the connection",
    )
    write_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Deadline for draining a response before dropping the connection",
    )
    max_request_bytes: int = Field(
        default=65535,
        ge=64,
        description="Maximum request bytes buffered per connection",
    )

    @field_validator("browser_fps")
    @classmethod
    def _clamp_browser_fps(cls, value: float) -> float:
        return clamp_browser_fps(value)

    @field_validator("image_route")
    @classmethod
    def _absolute_route(cls, value: str) -> str:
        if not value.startswith("/"):
            raise ValueError("image_route must start with '/'")
        if any(c.isspace() or c in _UNSAFE_ROUTE_CHARS for c in value):
            raise ValueError("image_route must not contain whitespace, quotes, '<' or '>'")
        return value


class CaptureConfig(BaseModel):
    """
    Frame source configuration.

    The capture rate belongs to the frame source; the gateway never
    enforces it.
    """

    model_config = ConfigDict(frozen=True)

    fps: int = Field(default=5, description="Capture rate, clamped to [1, 60]")
    source: Literal["none", "test_pattern"] = Field(
        default="none",
        description="Built-in frame source: 'none' (external producer) or 'test_pattern'",
    )
    width: int = Field(default=640, ge=16, description="Test pattern width")
    height: int = Field(default=360, ge=16, description="Test pattern height")
    jpeg_quality: int = Field(default=80, ge=1, le=100, description="JPEG quality")

    @field_validator("fps", mode="before")
    @classmethod
    def _clamp_capture_fps(cls, value) -> int:
        return clamp_capture_fps(float(value))


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="text", description="Log format: json or text")


class Settings(BaseModel):
    """
    Main settings class for the screenshare gateway.

    Loads configuration from YAML file and environment variables.
    Environment variables take precedence over file values.
    """

    gateway: GatewayInfo = Field(default_factory=GatewayInfo)
    server: ServerConfig = Field(default_factory=ServerConfig)
    capture: CaptureConfig = Field(default_factory=CaptureConfig)
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
    if config_path is None:
        search_paths = [
            Path("config.yaml"),
            Path("config.yml"),
            Path.home() / ".config" / "screenshare-gateway" / "config.yaml",
        ]
        for path in search_paths:
            if path.exists():
                config_path = str(path)
                break

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

    # Server settings
    if env_host := os.environ.get("SCREENSHARE_HOST"):
        config_data.setdefault("server", {})["host"] = env_host
    if env_port := os.environ.get("SCREENSHARE_PORT"):
        config_data.setdefault("server", {})["port"] = int(env_port)
    elif env_port := os.environ.get("PORT"):
        config_data.setdefault("server", {})["port"] = int(env_port)
    if env_fps := os.environ.get("SCREENSHARE_BROWSER_FPS"):
        config_data.setdefault("server", {})["browser_fps"] = float(env_fps)
    if env_timeout := os.environ.get("SCREENSHARE_READ_TIMEOUT"):
        config_data.setdefault("server", {})["read_timeout_seconds"] = float(env_timeout)

    # Capture settings
    if env_capture_fps := os.environ.get("SCREENSHARE_CAPTURE_FPS"):
        config_data.setdefault("capture", {})["fps"] = float(env_capture_fps)
    if env_source := os.environ.get("SCREENSHARE_CAPTURE_SOURCE"):
        config_data.setdefault("capture", {})["source"] = env_source

    # Logging settings
    if env_log := os.environ.get("SCREENSHARE_LOG_LEVEL"):
        config_data.setdefault("logging", {})["level"] = env_log
    if env_log_format := os.environ.get("SCREENSHARE_LOG_FORMAT"):
        config_data.setdefault("logging", {})["format"] = env_log_format


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

