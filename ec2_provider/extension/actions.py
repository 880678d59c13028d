"""Action catalog: names, descriptions and parameter schemas for every provider action."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..config import DEFAULT_REGION, DefaultsConfig


class ParamType(str, Enum):
    STRING = "string"
    INTEGER = "integer"
    BOOLEAN = "boolean"


@dataclass(frozen=True)
class ParamDefinition:
    """One parameter accepted by an action."""

    name: str
    description: str
    param_type: ParamType
    required: bool = True
    default: Any = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "type": self.param_type.value,
            "required": self.required,
            "default": self.default,
        }


@dataclass(frozen=True)
class ActionDefinition:
    """Schema for one action as advertised to the host."""

    name: str
    description: str
    parameters: list[ParamDefinition] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "parameters": [p.to_dict() for p in self.parameters],
        }


def _required(name: str, description: str, param_type: ParamType = ParamType.STRING) -> ParamDefinition:
    return ParamDefinition(name, description, param_type, required=True)


def _optional(name: str, description: str, default: Any, param_type: ParamType = ParamType.STRING) -> ParamDefinition:
    return ParamDefinition(name, description, param_type, required=False, default=default)


_DEFAULTS = DefaultsConfig()
_REGION = _optional("region", "AWS region", DEFAULT_REGION)


def _action(name: str, description: str, *params: ParamDefinition) -> ActionDefinition:
    return ActionDefinition(name=name, description=description, parameters=[*params, _REGION])


ACTIONS: dict[str, ActionDefinition] = {
    a.name: a
    for a in (
        _action("test_install", "Test if AWS credentials are properly configured"),
        _action("list_workers", "List all EC2 instances"),
        _action(
            "create_worker", "Create a new EC2 instance",
            _required("worker_name", "Name of the instance to create"),
            _optional("instance_type", "EC2 instance type", _DEFAULTS.instance_type),
            _optional("ami", "Amazon Machine Image ID", _DEFAULTS.ami),
        ),
        _action("delete_worker", "Terminate an EC2 instance", _required("worker_id", "ID of the instance to terminate")),
        _action("get_worker", "Get information about an EC2 instance", _required("worker_id", "ID of the instance")),
        _action("has_worker", "Check if an EC2 instance exists", _required("worker_id", "ID of the instance")),
        _action("start_worker", "Start an EC2 instance", _required("worker_id", "ID of the instance to start")),
        _action("get_volumes", "List all EBS volumes"),
        _action("has_volume", "Check if an EBS volume exists", _required("volume_id", "ID of the volume")),
        _action(
            "create_volume", "Create a new EBS volume",
            _required("size_gb", "Size in GB", ParamType.INTEGER),
            _required("availability_zone", "Availability zone"),
            _optional("volume_type", "Volume type (gp2, io1, etc.)", _DEFAULTS.volume_type),
        ),
        _action("delete_volume", "Delete an EBS volume", _required("volume_id", "ID of the volume")),
        _action(
            "attach_volume", "Attach an EBS volume to an EC2 instance",
            _required("worker_id", "ID of the instance"),
            _required("volume_id", "ID of the volume"),
            _required("device_name", "Device name (e.g., /dev/sdf)"),
        ),
        _action("detach_volume", "Detach an EBS volume from an EC2 instance", _required("volume_id", "ID of the volume")),
        _action(
            "create_snapshot", "Create a snapshot of an EBS volume",
            _required("volume_id", "ID of the volume"),
            _required("snapshot_name", "Name of the snapshot"),
        ),
        _action("delete_snapshot", "Delete a snapshot", _required("snapshot_id", "ID of the snapshot")),
        _action("has_snapshot", "Check if a snapshot exists", _required("snapshot_id", "ID of the snapshot")),
        _action("reboot_worker", "Reboot an EC2 instance", _required("worker_id", "ID of the instance")),
        _action(
            "set_worker_metadata", "Set metadata (tags) for an EC2 instance",
            _required("worker_id", "ID of the instance"),
            _required("key", "Metadata key"),
            _required("value", "Metadata value"),
        ),
        _action(
            "snapshot_volume", "Create a snapshot of an EBS volume",
            _required("source_volume_id", "ID of the source volume"),
            _required("snapshot_name", "Name for the snapshot"),
        ),
    )
}
