"""Frozen dataclasses for configuration and YAML loader with env-var interpolation."""

from __future__ import annotations

import dataclasses
import os
import re
import typing
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .exceptions import ConfigError

_ENV_PATTERN = re.compile(r"\$\{([^}]+)\}")

DEFAULT_REGION = "us-east-1"
VOLUME_TYPES = ("standard", "gp2", "gp3", "io1", "io2", "st1", "sc1")


def _interpolate_env(value: str) -> str:
    """Replace ${ENV_VAR} placeholders with environment variable values."""

    def _replace(match: re.Match) -> str:
        env_key = match.group(1)
        env_val = os.environ.get(env_key)
        if env_val is None:
            raise ConfigError(f"Environment variable '{env_key}' is not set")
        return env_val

    return _ENV_PATTERN.sub(_replace, value)


def _walk_and_interpolate(obj: Any) -> Any:
    """Recursively interpolate env vars in strings throughout a nested structure."""
    if isinstance(obj, str):
        return _interpolate_env(obj)
    if isinstance(obj, dict):
        return {k: _walk_and_interpolate(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_walk_and_interpolate(v) for v in obj]
    return obj


@dataclass(frozen=True)
class AWSConfig:
    region: str = DEFAULT_REGION
    credential_profile: str = ""  # empty = use default boto3 credential chain
    endpoint_url: str = ""  # empty = AWS public endpoints


@dataclass(frozen=True)
class DefaultsConfig:
    """Values used when an action omits an optional parameter."""

    instance_type: str = "t2.micro"
    ami: str = "ami-0c55b159cbfafe1f0"  # Amazon Linux 2, us-east-1
    availability_zone: str = "us-east-1a"
    volume_type: str = "gp2"


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"
    format: str = "json"  # "json" or "text"


@dataclass(frozen=True)
class AppConfig:
    aws: AWSConfig = field(default_factory=AWSConfig)
    defaults: DefaultsConfig = field(default_factory=DefaultsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _build_nested(cls: type, data: dict[str, Any]) -> Any:
    """Construct a frozen dataclass, recursively building nested dataclass sections."""
    hints = typing.get_type_hints(cls)
    known = {f.name for f in dataclasses.fields(cls)}
    kwargs: dict[str, Any] = {}
    for key, value in data.items():
        if key not in known:
            continue
        ft = hints[key]
        if dataclasses.is_dataclass(ft):
            if value is None:
                continue
            if not isinstance(value, dict):
                raise ConfigError(f"Section '{key}' must be a mapping")
            kwargs[key] = _build_nested(ft, value)
        else:
            kwargs[key] = value
    return cls(**kwargs)


def load_config(path: str | Path) -> AppConfig:
    """Load and validate configuration from a YAML file."""
    path = Path(path)
    if not path.is_file():
        raise ConfigError(f"Configuration file not found: {path}")

    with open(path) as f:
        raw = yaml.safe_load(f)

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError("Configuration file must be a YAML mapping")

    raw = _walk_and_interpolate(raw)
    config = _build_nested(AppConfig, raw)
    _validate(config)
    return config


def _validate(config: AppConfig) -> None:
    """Validate configuration values."""
    if not isinstance(config.aws.region, str) or not config.aws.region:
        raise ConfigError("aws.region must be a non-empty string")

    if config.defaults.volume_type not in VOLUME_TYPES:
        raise ConfigError(
            f"defaults.volume_type must be one of: {', '.join(VOLUME_TYPES)}"
        )

    if config.logging.format not in ("json", "text"):
        raise ConfigError("logging.format must be 'json' or 'text'")
