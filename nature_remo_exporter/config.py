"""
Configuration module
Centralized configuration, environment variables and validation
"""
import os
import re
from typing import Union

from pydantic import BaseModel, Field, ValidationError, field_validator

from .exceptions import ConfigurationError

# Nature Remo Cloud API
NATURE_REMO_TOKEN = os.getenv("NATURE_REMO_TOKEN", "")
NATURE_REMO_API_URL = os.getenv("NATURE_REMO_API_URL", "https://api.nature.global")
NATURE_REMO_TIMEOUT = os.getenv("NATURE_REMO_TIMEOUT", "10")

# Exporter
EXPORTER_HOST = os.getenv("NATURE_REMO_HOST", "0.0.0.0")
EXPORTER_PORT = os.getenv("NATURE_REMO_PORT", "9199")
REFRESH_INTERVAL = os.getenv("NATURE_REMO_INTERVAL", "30s")

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("LOG_FORMAT", "json")

# API metadata
API_VERSION = "1.0.0"
API_TITLE = "Nature Remo Exporter"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMATS = ("json", "text")

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ms|s|m|h)")
_DURATION_UNITS = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0}


def parse_duration(value: Union[str, int, float]) -> float:
    """
    Parse a refresh interval into seconds.

    Accepts plain numbers of seconds ("30", 30, 2.5) and duration strings
    made of number+unit parts ("30s", "1m30s", "500ms", "2h").

    Raises:
        ConfigurationError: if the value cannot be parsed
    """
    if isinstance(value, (int, float)):
        return float(value)

    text = value.strip().lower()
    if not text:
        raise ConfigurationError("Interval must not be empty")

    try:
        return float(text)
    except ValueError:
        pass

    total = 0.0
    position = 0
    for match in _DURATION_PART.finditer(text):
        if match.start() != position:
            break
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        position = match.end()

    if position != len(text):
        raise ConfigurationError(f"Invalid interval: {value!r} (expected e.g. '30s', '1m30s' or '30')")
    return total


class Settings(BaseModel):
    token: str = Field(description="Nature Remo Cloud API access token")
    host: str = Field(EXPORTER_HOST, description="Address the metrics server binds to")
    port: int = Field(9199, ge=1, le=65535, description="Port the metrics server listens on")
    interval: float = Field(30.0, gt=0, description="Seconds between metric refresh cycles")
    api_base_url: str = Field(NATURE_REMO_API_URL, description="Nature Remo Cloud API base URL")
    request_timeout: float = Field(10.0, gt=0, description="HTTP timeout for API requests in seconds")
    stop_on_error: bool = Field(
        False,
        description="Stop refreshing after the first failed periodic cycle instead of retrying on the next tick"
    )
    log_level: str = Field("INFO", description="Log level: DEBUG, INFO, WARNING, ERROR, CRITICAL")
    log_format: str = Field("json", description="Log format: 'json' or 'text'")

    @field_validator("token")
    @classmethod
    def token_must_be_set(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Nature Remo access token is required (--token or NATURE_REMO_TOKEN)")
        return v

    @field_validator("api_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def valid_log_level(cls, v: str) -> str:
        v = v.upper()
        if v not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return v

    @field_validator("log_format")
    @classmethod
    def valid_log_format(cls, v: str) -> str:
        v = v.lower()
        if v not in LOG_FORMATS:
            raise ValueError(f"log_format must be one of {', '.join(LOG_FORMATS)}")
        return v


def load_settings(**overrides) -> Settings:
    """
    Build Settings from environment defaults and explicit overrides.

    `interval` may be given as a duration string. Any validation problem is
    raised as ConfigurationError so the CLI can report it and exit.
    """
    values = {
        "token": NATURE_REMO_TOKEN,
        "host": EXPORTER_HOST,
        "port": EXPORTER_PORT,
        "interval": REFRESH_INTERVAL,
        "api_base_url": NATURE_REMO_API_URL,
        "request_timeout": NATURE_REMO_TIMEOUT,
        "log_level": LOG_LEVEL,
        "log_format": LOG_FORMAT,
    }
    values.update({k: v for k, v in overrides.items() if v is not None})
    values["interval"] = parse_duration(values["interval"])

    try:
        return Settings(**values)
    except ValidationError as e:
        messages = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ConfigurationError(f"Invalid configuration: {messages}") from e
