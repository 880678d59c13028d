"""EC2 provider extension: validates action parameters and dispatches to the EC2 client."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable

import boto3

from .aws.ec2_client import EC2Client, resolve_region
from .config import AppConfig
from .exceptions import ActionNotFoundError, ProviderError, ValidationError
from .extension.actions import ACTIONS, ActionDefinition
from .extension.validation import extract_int, extract_string, extract_string_opt

logger = logging.getLogger(__name__)

Params = dict[str, Any]


class AwsExtension:
    """AWS provider exposed to the orchestration host as a CpiExtension."""

    def __init__(self, config: AppConfig | None = None):
        self._config = config or AppConfig()
        self._defaults = self._config.defaults
        self._client = EC2Client(self._config.aws, self._config.defaults)
        self._handlers: dict[str, Callable[[Params, str | None], dict[str, Any]]] = {
            "test_install": self._test_install,
            "list_workers": self._list_workers,
            "create_worker": self._create_worker,
            "delete_worker": self._delete_worker,
            "get_worker": self._get_worker,
            "has_worker": self._has_worker,
            "start_worker": self._start_worker,
            "get_volumes": self._get_volumes,
            "has_volume": self._has_volume,
            "create_volume": self._create_volume,
            "delete_volume": self._delete_volume,
            "attach_volume": self._attach_volume,
            "detach_volume": self._detach_volume,
            "create_snapshot": self._create_snapshot,
            "delete_snapshot": self._delete_snapshot,
            "has_snapshot": self._has_snapshot,
            "reboot_worker": self._reboot_worker,
            "set_worker_metadata": self._set_worker_metadata,
            "snapshot_volume": self._snapshot_volume,
        }

    @property
    def name(self) -> str:
        return "ec2"

    @property
    def provider_type(self) -> str:
        return "cloud"

    @property
    def default_settings(self) -> dict[str, str]:
        """Fallback values applied when an action omits an optional parameter."""
        return {
            "region": self._config.aws.region,
            "instance_type": self._defaults.instance_type,
            "ami": self._defaults.ami,
            "availability_zone": self._defaults.availability_zone,
            "volume_type": self._defaults.volume_type,
        }

    def list_actions(self) -> list[str]:
        return list(ACTIONS)

    def get_action_definition(self, action: str) -> ActionDefinition | None:
        return ACTIONS.get(action)

    def execute_action(self, action: str, params: Params | None = None) -> dict[str, Any]:
        """Run one action and return its result. Raises ProviderError on any failure."""
        handler = self._handlers.get(action)
        if handler is None:
            raise ActionNotFoundError(action)

        params = params or {}
        region = self._region(params)
        context = {"action": action, "region": resolve_region(self._config.aws, region)}
        start = time.monotonic()
        try:
            result = handler(params, region)
        except ProviderError as exc:
            logger.warning("Action %s failed: %s", action, exc, extra={**context, "error": exc})
            raise

        logger.info(
            "Action %s complete", action,
            extra={**context, "elapsed_seconds": round(time.monotonic() - start, 3)},
        )
        return result

    def _region(self, params: Params) -> str | None:
        """Extract the region leniently: a malformed value falls back to the configured default."""
        try:
            return extract_string_opt(params, "region") or None
        except ValidationError:
            logger.warning("Ignoring non-string region parameter: %r", params.get("region"))
            return None

    # ── Workers ─────────────────────────────────────────────────────

    def _test_install(self, params: Params, region: str | None) -> dict[str, Any]:
        regions = self._client.list_regions(region)
        return {"success": True, "version": f"boto3 {boto3.__version__}", "regions": regions}

    def _list_workers(self, params: Params, region: str | None) -> dict[str, Any]:
        workers = self._client.list_workers(region)
        return {"success": True, "workers": [w.to_summary() for w in workers]}

    def _create_worker(self, params: Params, region: str | None) -> dict[str, Any]:
        worker_name = extract_string(params, "worker_name")
        instance_type = extract_string_opt(params, "instance_type") or self._defaults.instance_type
        ami = extract_string_opt(params, "ami") or self._defaults.ami
        instance_id = self._client.create_worker(worker_name, instance_type, ami, region)
        return {"success": True, "id": instance_id, "name": worker_name}

    def _delete_worker(self, params: Params, region: str | None) -> dict[str, Any]:
        self._client.delete_worker(extract_string(params, "worker_id"), region)
        return {"success": True}

    def _get_worker(self, params: Params, region: str | None) -> dict[str, Any]:
        worker = self._client.get_worker(extract_string(params, "worker_id"), region)
        return {"success": True, "vm": worker.to_detail()}

    def _has_worker(self, params: Params, region: str | None) -> dict[str, Any]:
        exists = self._client.has_worker(extract_string(params, "worker_id"), region)
        return {"success": True, "exists": exists}

    def _start_worker(self, params: Params, region: str | None) -> dict[str, Any]:
        worker_id = extract_string(params, "worker_id")
        self._client.start_worker(worker_id, region)
        return {"success": True, "started": worker_id}

    def _reboot_worker(self, params: Params, region: str | None) -> dict[str, Any]:
        self._client.reboot_worker(extract_string(params, "worker_id"), region)
        return {"success": True}

    def _set_worker_metadata(self, params: Params, region: str | None) -> dict[str, Any]:
        worker_id = extract_string(params, "worker_id")
        key = extract_string(params, "key")
        value = extract_string(params, "value")
        self._client.set_worker_tag(worker_id, key, value, region)
        return {"success": True}

    # ── Volumes ─────────────────────────────────────────────────────

    def _get_volumes(self, params: Params, region: str | None) -> dict[str, Any]:
        volumes = self._client.list_volumes(region)
        return {"success": True, "volumes": [v.to_dict() for v in volumes]}

    def _has_volume(self, params: Params, region: str | None) -> dict[str, Any]:
        exists = self._client.has_volume(extract_string(params, "volume_id"), region)
        return {"success": True, "exists": exists}

    def _create_volume(self, params: Params, region: str | None) -> dict[str, Any]:
        size_gb = extract_int(params, "size_gb")
        if size_gb < 1:
            raise ValidationError("Parameter 'size_gb' must be at least 1")
        availability_zone = extract_string(params, "availability_zone")
        volume_type = extract_string_opt(params, "volume_type") or self._defaults.volume_type
        volume_id = self._client.create_volume(size_gb, availability_zone, volume_type, region)
        return {"success": True, "id": volume_id, "path": volume_id}

    def _delete_volume(self, params: Params, region: str | None) -> dict[str, Any]:
        self._client.delete_volume(extract_string(params, "volume_id"), region)
        return {"success": True}

    def _attach_volume(self, params: Params, region: str | None) -> dict[str, Any]:
        worker_id = extract_string(params, "worker_id")
        volume_id = extract_string(params, "volume_id")
        device_name = extract_string(params, "device_name")
        self._client.attach_volume(worker_id, volume_id, device_name, region)
        return {"success": True}

    def _detach_volume(self, params: Params, region: str | None) -> dict[str, Any]:
        self._client.detach_volume(extract_string(params, "volume_id"), region)
        return {"success": True}

    # ── Snapshots ───────────────────────────────────────────────────

    def _create_snapshot(self, params: Params, region: str | None) -> dict[str, Any]:
        volume_id = extract_string(params, "volume_id")
        snapshot_name = extract_string(params, "snapshot_name")
        snapshot_id = self._client.create_snapshot(volume_id, snapshot_name, region)
        return {"success": True, "id": snapshot_id}

    def _delete_snapshot(self, params: Params, region: str | None) -> dict[str, Any]:
        self._client.delete_snapshot(extract_string(params, "snapshot_id"), region)
        return {"success": True}

    def _has_snapshot(self, params: Params, region: str | None) -> dict[str, Any]:
        exists = self._client.has_snapshot(extract_string(params, "snapshot_id"), region)
        return {"success": True, "exists": exists}

    def _snapshot_volume(self, params: Params, region: str | None) -> dict[str, Any]:
        source_volume_id = extract_string(params, "source_volume_id")
        snapshot_name = extract_string(params, "snapshot_name")
        snapshot_id = self._client.create_snapshot(source_volume_id, snapshot_name, region)
        return {"success": True, "id": snapshot_id, "source_volume_id": source_volume_id}
