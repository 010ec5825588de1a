"""
freed-bridge Configuration
==========================

This module handles configuration loading for the bridge.

Configuration Sources (in order of precedence):
    1. Command-line flags (applied by main)
    2. Environment variables
    3. config.yaml file
    4. Default values (lowest priority)

Environment Variable Mapping:
    FREED_OSC_HOST          -> osc.host
    FREED_OSC_PORT          -> osc.port
    FREED_OSC_ADDRESS       -> osc.address
    FREED_DEVICE            -> serial.device
    FREED_RECONNECT_DELAY   -> connection.reconnect_delay_seconds
    FREED_MAX_QUEUE_SIZE    -> dispatch.max_queue_size
    FREED_DISPATCH_WORKERS  -> dispatch.workers
    FREED_LOG_LEVEL         -> logging.level
    FREED_DEBUG             -> debug

Example:
    from freed_bridge.config import load_config
    
    settings = load_config()
    print(settings.osc.host, settings.osc.port)
    print(settings.serial.device)
"""

import os
import logging
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, field_validator


logger = logging.getLogger(__name__)


# =============================================================================
# Configuration Models
# =============================================================================

class OscConfig(BaseModel):
    """Outbound OSC destination."""
    
    host: str = Field(default="224.0.0.0", description="OSC network address")
    port: int = Field(default=7000, ge=1, le=65535, description="OSC network port")
    address: str = Field(default="/camera", description="OSC address pattern")
    
    @field_validator("address")
    @classmethod
    def _address_has_slash(cls, v: str) -> str:
        if not v.startswith("/"):
            raise ValueError("OSC address must start with '/'")
        return v


class SerialConfig(BaseModel):
    """Tracking device serial line."""
    
    device: str = Field(default="/dev/ttyUSB_Serial", description="Device path")
    baudrate: int = Field(default=38400, gt=0, description="Line speed")
    parity: str = Field(default="O", pattern="^[NEOMSneoms]$", description="Parity")
    stopbits: float = Field(default=1, description="Stop bits: 1, 1.5 or 2")
    bytesize: int = Field(default=8, ge=5, le=8, description="Data bits")
    read_timeout: float = Field(
        default=0.5,
        gt=0,
        description="Seconds a read may block before returning empty",
    )
    
    @field_validator("stopbits")
    @classmethod
    def _known_stopbits(cls, v: float) -> float:
        if v not in (1, 1.5, 2):
            raise ValueError("stopbits must be 1, 1.5 or 2")
        return v


class ConnectionConfig(BaseModel):
    """Reconnection policy."""
    
    reconnect_delay_seconds: float = Field(
        default=1.0,
        gt=0,
        description="Fixed delay between open attempts",
    )


class DispatchConfig(BaseModel):
    """Outbound dispatch concurrency."""
    
    max_queue_size: int = Field(
        default=64,
        ge=1,
        description="Samples held while senders are busy (oldest dropped)",
    )
    workers: int = Field(
        default=4,
        ge=1,
        description="Maximum concurrent in-flight sends",
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""
    
    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="text", description="Log format: json or text")


class Settings(BaseModel):
    """
    Main settings class for freed-bridge.
    
    Loads configuration from YAML file and environment variables.
    Environment variables take precedence over file values.
    """
    
    osc: OscConfig = Field(default_factory=OscConfig)
    serial: SerialConfig = Field(default_factory=SerialConfig)
    connection: ConnectionConfig = Field(default_factory=ConnectionConfig)
    dispatch: DispatchConfig = Field(default_factory=DispatchConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    debug: bool = Field(default=False, description="Log every dispatched sample")


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
        for path in (Path("config.yaml"), Path("config.yml")):
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


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _apply_env_overrides(config_data: dict) -> None:
    """Apply environment variable overrides to config data."""
    
    # OSC settings
    if env_host := os.environ.get("FREED_OSC_HOST"):
        config_data.setdefault("osc", {})["host"] = env_host
    if env_port := os.environ.get("FREED_OSC_PORT"):
        config_data.setdefault("osc", {})["port"] = int(env_port)
    if env_addr := os.environ.get("FREED_OSC_ADDRESS"):
        config_data.setdefault("osc", {})["address"] = env_addr
    
    # Serial settings
    if env_device := os.environ.get("FREED_DEVICE"):
        config_data.setdefault("serial", {})["device"] = env_device
    
    # Connection settings
    if env_delay := os.environ.get("FREED_RECONNECT_DELAY"):
        config_data.setdefault("connection", {})["reconnect_delay_seconds"] = float(env_delay)
    
    # Dispatch settings
    if env_queue := os.environ.get("FREED_MAX_QUEUE_SIZE"):
        config_data.setdefault("dispatch", {})["max_queue_size"] = int(env_queue)
    if env_workers := os.environ.get("FREED_DISPATCH_WORKERS"):
        config_data.setdefault("dispatch", {})["workers"] = int(env_workers)
    
    # Logging settings
    if env_log := os.environ.get("FREED_LOG_LEVEL"):
        config_data.setdefault("logging", {})["level"] = env_log
    if env_debug := os.environ.get("FREED_DEBUG"):
        config_data["debug"] = _parse_bool(env_debug)


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
