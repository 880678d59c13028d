"""Argument parsing, configuration loading, and one-shot action execution."""

from __future__ import annotations

import argparse
import json
import logging
import re
import sys
from typing import Any

from .config import AppConfig, load_config
from .exceptions import ConfigError, ProviderError, ValidationError
from .extension.actions import ActionDefinition, ParamType
from .logging_config import configure_logging
from .provider import AwsExtension

logger = logging.getLogger(__name__)

_INT_PATTERN = re.compile(r"-?\d+")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ec2-provider",
        description="Run EC2 worker, volume and snapshot actions",
    )
    parser.add_argument(
        "-c", "--config",
        help="Path to the YAML configuration file (built-in defaults if omitted)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("actions", help="List the available actions")
    sub.add_parser("validate", help="Validate the configuration file and exit")

    describe = sub.add_parser("describe", help="Show the parameter schema of an action")
    describe.add_argument("action")

    run = sub.add_parser("run", help="Execute an action and print its result as JSON")
    run.add_argument("action")
    run.add_argument(
        "-p", "--param",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Action parameter; may be repeated. Integer parameters are passed as ints",
    )
    return parser


def parse_params(pairs: list[str], definition: ActionDefinition | None = None) -> dict[str, Any]:
    """Turn ["size_gb=20", "availability_zone=us-east-1a"] into a params mapping.

    Values stay strings unless the action declares the parameter as an integer.
    """
    integer_params = set()
    if definition is not None:
        integer_params = {p.name for p in definition.parameters if p.param_type is ParamType.INTEGER}

    params: dict[str, Any] = {}
    for pair in pairs:
        key, sep, raw = pair.partition("=")
        if not sep or not key:
            raise ValidationError(f"Invalid parameter '{pair}', expected KEY=VALUE")
        if key in integer_params and _INT_PATTERN.fullmatch(raw):
            params[key] = int(raw)
        else:
            params[key] = raw
    return params


def _emit(data: Any) -> None:
    print(json.dumps(data, indent=2, default=str))


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config) if args.config else AppConfig()
    except ConfigError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 1

    configure_logging(config.logging)

    if args.command == "validate":
        logger.info("Configuration is valid")
        return 0

    extension = AwsExtension(config)

    if args.command == "actions":
        _emit(extension.list_actions())
        return 0

    if args.command == "describe":
        definition = extension.get_action_definition(args.action)
        if definition is None:
            logger.error("Action '%s' not found", args.action)
            return 1
        _emit(definition.to_dict())
        return 0

    try:
        params = parse_params(args.param, extension.get_action_definition(args.action))
        result = extension.execute_action(args.action, params)
    except ProviderError as exc:
        logger.error("%s", exc)
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return 130

    _emit(result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
