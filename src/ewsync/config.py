"""Configuration management for ewsync using Pydantic models."""

import json
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

CONFIG_FILE_NAME = ".ewsync.json"


class ExchangeVersion(str, Enum):
    """Schema versions the request builders can target."""
    EXCHANGE2007_SP1 = "Exchange2007_SP1"
    EXCHANGE2010 = "Exchange2010"
    EXCHANGE2010_SP1 = "Exchange2010_SP1"
    EXCHANGE2010_SP2 = "Exchange2010_SP2"
    EXCHANGE2013 = "Exchange2013"
    EXCHANGE2013_SP1 = "Exchange2013_SP1"


class LogLevel(str, Enum):
    """Logging levels."""
    ERROR = "error"
    WARN = "warn"
    INFO = "info"
    DEBUG = "debug"
    TRACE = "trace"


class ServiceConfig(BaseModel):
    """Endpoint and credentials."""
    url: str | None = None
    username: str | None = None
    password: str | None = None
    version: ExchangeVersion = ExchangeVersion.EXCHANGE2013_SP1
    timeout_seconds: int = Field(alias="timeoutSeconds", default=100)
    verify_tls: bool = Field(alias="verifyTls", default=True)

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout(cls, v):
        if v < 1:
            raise ValueError("timeout_seconds must be >= 1")
        return v

    @field_validator("url")
    @classmethod
    def validate_url(cls, v):
        if v is not None and not v.lower().startswith(("http://", "https://")):
            raise ValueError(f"url must be an http(s) URL, got: {v}")
        return v

    model_config = ConfigDict(populate_by_name=True)


class StreamingConfig(BaseModel):
    """Streaming connection configuration section."""
    heartbeat_minutes: int = Field(alias="heartbeatMinutes", default=1)
    connection_timeout_minutes: int = Field(alias="connectionTimeoutMinutes", default=30)
    trace_wire_bytes: bool = Field(alias="traceWireBytes", default=False)

    @field_validator("heartbeat_minutes")
    @classmethod
    def validate_heartbeat(cls, v):
        """Heartbeat frequency is limited to one day."""
        if not (1 <= v <= 1440):
            raise ValueError(f"heartbeat_minutes must be between 1-1440, got: {v}")
        return v

    @field_validator("connection_timeout_minutes")
    @classmethod
    def validate_connection_timeout(cls, v):
        if not (1 <= v <= 30):
            raise ValueError(f"connection_timeout_minutes must be between 1-30, got: {v}")
        return v

    model_config = ConfigDict(populate_by_name=True)


class SyncConfig(BaseModel):
    """Synchronization configuration section."""
    max_changes_returned: int = Field(alias="maxChangesReturned", default=100)

    @field_validator("max_changes_returned")
    @classmethod
    def validate_max_changes(cls, v):
        if not (1 <= v <= 512):
            raise ValueError(f"max_changes_returned must be between 1-512, got: {v}")
        return v

    model_config = ConfigDict(populate_by_name=True)


class LoggingConfig(BaseModel):
    """Logging configuration section."""
    level: LogLevel = LogLevel.INFO
    trace_requests: bool = Field(alias="traceRequests", default=False)
    trace_responses: bool = Field(alias="traceResponses", default=False)
    trace_http_headers: bool = Field(alias="traceHttpHeaders", default=False)

    model_config = ConfigDict(use_enum_values=True, populate_by_name=True)


class EwsyncConfig(BaseModel):
    """Complete ewsync configuration model."""
    service: ServiceConfig = Field(default_factory=ServiceConfig)
    streaming: StreamingConfig = Field(default_factory=StreamingConfig)
    sync: SyncConfig = Field(default_factory=SyncConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = ConfigDict(extra="forbid")


def load_config(config_path: str | Path | None = None) -> EwsyncConfig:
    """Load configuration from file with fallback to defaults.

    Args:
        config_path: Optional path to configuration file. If None, searches
                    current directory and parents for .ewsync.json

    Returns:
        EwsyncConfig: Loaded and validated configuration

    Raises:
        ValueError: If configuration is invalid
    """
    if config_path is None:
        config_path = find_config_file()
    else:
        config_path = Path(config_path)

    if not config_path or not config_path.exists():
        return create_default_config()

    try:
        with open(config_path, encoding="utf-8") as f:
            config_data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in config file {config_path}: {e}") from e
    except OSError as e:
        raise ValueError(f"Cannot read config file {config_path}: {e}") from e

    if not isinstance(config_data, dict):
        raise ValueError(f"Failed to load config from {config_path}: expected a JSON object")
    try:
        return EwsyncConfig.model_validate(config_data)
    except ValidationError as e:
        raise ValueError(f"Failed to load config from {config_path}: {e}") from e


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Find .ewsync.json by searching up the directory tree.

    Args:
        start_dir: Directory to start search from (default: current directory)

    Returns:
        Path to config file if found, None otherwise
    """
    if start_dir is None:
        start_dir = Path.cwd()

    current = Path(start_dir).resolve()

    while True:
        config_file = current / CONFIG_FILE_NAME
        if config_file.exists():
            return config_file

        parent = current.parent
        if parent == current:
            break
        current = parent

    return None


def create_default_config() -> EwsyncConfig:
    """Create default configuration; no endpoint is configured."""
    return EwsyncConfig()
