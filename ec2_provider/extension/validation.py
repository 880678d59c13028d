"""Typed extraction of action parameters from the host's params mapping."""

from __future__ import annotations

from typing import Any

from ..exceptions import ValidationError


def extract_string(params: dict[str, Any], name: str) -> str:
    value = params.get(name)
    if value is None:
        raise ValidationError(f"Missing required parameter: {name}")
    if not isinstance(value, str):
        raise ValidationError(f"Parameter '{name}' must be a string")
    return value


def extract_string_opt(params: dict[str, Any], name: str) -> str | None:
    """Like extract_string, but a missing or null value yields None."""
    value = params.get(name)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"Parameter '{name}' must be a string")
    return value


def extract_int(params: dict[str, Any], name: str) -> int:
    """Extract a required integer. Integral floats are accepted; bools and strings are not."""
    value = params.get(name)
    if value is None:
        raise ValidationError(f"Missing required parameter: {name}")
    if isinstance(value, bool):
        raise ValidationError(f"Parameter '{name}' must be an integer")
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if not isinstance(value, int):
        raise ValidationError(f"Parameter '{name}' must be an integer")
    return value
