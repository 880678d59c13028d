"""EC2 worker, volume and snapshot provider for CPI orchestration hosts."""

from __future__ import annotations

import os

from .config import AppConfig, load_config
from .provider import AwsExtension

__version__ = "0.1.0"

CONFIG_ENV_VAR = "EC2_PROVIDER_CONFIG"


def get_extension() -> AwsExtension:
    """Plugin entry point: build the extension, reading config from $EC2_PROVIDER_CONFIG if set."""
    path = os.environ.get(CONFIG_ENV_VAR)
    config = load_config(path) if path else AppConfig()
    return AwsExtension(config)


__all__ = ["AwsExtension", "get_extension"]
