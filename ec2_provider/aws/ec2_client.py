"""boto3 client for EC2 instance, EBS volume and snapshot lifecycle calls."""

from __future__ import annotations

import logging
from typing import Any, Iterator

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ..config import DEFAULT_REGION, AWSConfig, DefaultsConfig
from ..exceptions import CloudAPIError, NotFoundError, ProviderError
from .models import UNKNOWN, Volume, Worker, name_from_tags

logger = logging.getLogger(__name__)

SUPPORTED_INSTANCE_TYPES = (
    "t2.micro",
    "t2.small",
    "t2.medium",
    "t3.micro",
    "t3.small",
    "t3.medium",
    "m5.large",
    "m5.xlarge",
)

INSTANCE_NOT_FOUND = "InvalidInstanceID.NotFound"
VOLUME_NOT_FOUND = "InvalidVolume.NotFound"
SNAPSHOT_NOT_FOUND = "InvalidSnapshot.NotFound"


def resolve_region(aws_config: AWSConfig, region: str | None = None) -> str:
    """Region a call will run in: explicit, then configured, then us-east-1."""
    return region or aws_config.region or DEFAULT_REGION


class EC2Client:
    """Lazily builds one boto3 EC2 client and maps provider actions onto it.

    The underlying client is created on first use and memoized. A call for a
    different region replaces the memoized client. Calls that omit the region
    use the configured one.
    """

    def __init__(self, aws_config: AWSConfig, defaults: DefaultsConfig):
        self._config = aws_config
        self._defaults = defaults
        self._ec2: Any = None
        self._region: str | None = None

    @property
    def region(self) -> str | None:
        """Region of the memoized client, or None before first use."""
        return self._region

    def resolve_region(self, region: str | None = None) -> str:
        return resolve_region(self._config, region)

    def _client(self, region: str | None = None) -> Any:
        region = self.resolve_region(region)
        if self._ec2 is not None and region == self._region:
            return self._ec2

        session_kwargs: dict[str, Any] = {"region_name": region}
        if self._config.credential_profile:
            session_kwargs["profile_name"] = self._config.credential_profile

        client_kwargs: dict[str, Any] = {}
        if self._config.endpoint_url:
            client_kwargs["endpoint_url"] = self._config.endpoint_url

        session = boto3.Session(**session_kwargs)
        self._ec2 = session.client("ec2", **client_kwargs)
        self._region = region
        logger.debug("Created EC2 client", extra={"region": region})
        return self._ec2

    # ── SDK call helpers ────────────────────────────────────────────

    def _call(self, context: str, region: str | None, operation: str, **kwargs: Any) -> dict[str, Any]:
        """Invoke one EC2 API operation, wrapping SDK failures in CloudAPIError."""
        logger.debug("EC2 %s %s", operation, kwargs)
        try:
            client = self._client(region)
            return getattr(client, operation)(**kwargs)
        except ClientError as exc:
            raise _wrap(context, exc) from exc
        except BotoCoreError as exc:
            raise CloudAPIError(f"{context}: {exc}") from exc

    def _paginate(self, context: str, region: str | None, operation: str, **kwargs: Any) -> Iterator[dict[str, Any]]:
        try:
            paginator = self._client(region).get_paginator(operation)
            yield from paginator.paginate(**kwargs)
        except ClientError as exc:
            raise _wrap(context, exc) from exc
        except BotoCoreError as exc:
            raise CloudAPIError(f"{context}: {exc}") from exc

    def _exists(self, context: str, region: str | None, operation: str, not_found_code: str, **kwargs: Any) -> dict[str, Any] | None:
        """Run a describe call, returning None when EC2 reports the resource as missing."""
        try:
            return self._call(context, region, operation, **kwargs)
        except CloudAPIError as exc:
            if exc.error_code == not_found_code:
                logger.debug("EC2 reported %s", not_found_code)
                return None
            raise

    # ── Account ─────────────────────────────────────────────────────

    def list_regions(self, region: str | None = None) -> list[str]:
        """Return the names of all regions visible to the current credentials."""
        response = self._call("Failed to connect to AWS", region, "describe_regions")
        return [r["RegionName"] for r in response.get("Regions", []) if r.get("RegionName")]

    # ── Workers ─────────────────────────────────────────────────────

    def list_workers(self, region: str | None = None) -> list[Worker]:
        workers: list[Worker] = []
        for page in self._paginate("Failed to list EC2 instances", region, "describe_instances"):
            for reservation in page.get("Reservations", []):
                for raw in reservation.get("Instances", []):
                    worker = _parse_instance(raw)
                    if worker is not None:
                        workers.append(worker)
        logger.info("Listed %d EC2 instances", len(workers), extra={"count": len(workers)})
        return workers

    def create_worker(self, name: str, instance_type: str, ami: str, region: str | None = None) -> str:
        """Launch one instance tagged with Name=name and return its ID."""
        if instance_type not in SUPPORTED_INSTANCE_TYPES:
            logger.warning(
                "Unsupported instance type %s, using %s", instance_type, self._defaults.instance_type,
            )
            instance_type = self._defaults.instance_type

        response = self._call(
            "Failed to create EC2 instance", region, "run_instances",
            ImageId=ami,
            InstanceType=instance_type,
            MinCount=1,
            MaxCount=1,
            TagSpecifications=[_name_tag_spec("instance", name)],
        )
        for raw in response.get("Instances", [])[:1]:
            instance_id = raw.get("InstanceId")
            if instance_id:
                logger.info("Created EC2 instance %s", instance_id, extra={"resource_id": instance_id})
                return instance_id
        raise ProviderError("No instance was created")

    def delete_worker(self, worker_id: str, region: str | None = None) -> None:
        self._call("Failed to terminate EC2 instance", region, "terminate_instances", InstanceIds=[worker_id])
        logger.info("Terminated EC2 instance %s", worker_id, extra={"resource_id": worker_id})

    def get_worker(self, worker_id: str, region: str | None = None) -> Worker:
        response = self._call(
            "Failed to get EC2 instance details", region, "describe_instances", InstanceIds=[worker_id],
        )
        for reservation in response.get("Reservations", [])[:1]:
            for raw in reservation.get("Instances", [])[:1]:
                return _parse_instance(raw, fallback_id=UNKNOWN)
        raise NotFoundError(f"Instance with ID {worker_id} not found")

    def has_worker(self, worker_id: str, region: str | None = None) -> bool:
        response = self._exists(
            "Failed to check if instance exists", region, "describe_instances",
            INSTANCE_NOT_FOUND, InstanceIds=[worker_id],
        )
        if response is None:
            return False
        return any(r.get("Instances") for r in response.get("Reservations", []))

    def start_worker(self, worker_id: str, region: str | None = None) -> None:
        self._call("Failed to start EC2 instance", region, "start_instances", InstanceIds=[worker_id])
        logger.info("Started EC2 instance %s", worker_id, extra={"resource_id": worker_id})

    def reboot_worker(self, worker_id: str, region: str | None = None) -> None:
        self._call("Failed to reboot EC2 instance", region, "reboot_instances", InstanceIds=[worker_id])
        logger.info("Rebooted EC2 instance %s", worker_id, extra={"resource_id": worker_id})

    def set_worker_tag(self, worker_id: str, key: str, value: str, region: str | None = None) -> None:
        self._call(
            "Failed to set instance metadata", region, "create_tags",
            Resources=[worker_id],
            Tags=[{"Key": key, "Value": value}],
        )

    # ── Volumes ─────────────────────────────────────────────────────

    def list_volumes(self, region: str | None = None) -> list[Volume]:
        volumes: list[Volume] = []
        for page in self._paginate("Failed to list EBS volumes", region, "describe_volumes"):
            for raw in page.get("Volumes", []):
                volume = _parse_volume(raw)
                if volume is not None:
                    volumes.append(volume)
        logger.info("Listed %d EBS volumes", len(volumes), extra={"count": len(volumes)})
        return volumes

    def has_volume(self, volume_id: str, region: str | None = None) -> bool:
        response = self._exists(
            "Failed to check if volume exists", region, "describe_volumes",
            VOLUME_NOT_FOUND, VolumeIds=[volume_id],
        )
        return bool(response and response.get("Volumes"))

    def create_volume(self, size_gb: int, availability_zone: str, volume_type: str, region: str | None = None) -> str:
        response = self._call(
            "Failed to create EBS volume", region, "create_volume",
            AvailabilityZone=availability_zone,
            Size=size_gb,
            VolumeType=volume_type,
        )
        volume_id = response.get("VolumeId")
        if not volume_id:
            raise ProviderError("No volume ID was returned")
        logger.info("Created EBS volume %s", volume_id, extra={"resource_id": volume_id})
        return volume_id

    def delete_volume(self, volume_id: str, region: str | None = None) -> None:
        self._call("Failed to delete EBS volume", region, "delete_volume", VolumeId=volume_id)
        logger.info("Deleted EBS volume %s", volume_id, extra={"resource_id": volume_id})

    def attach_volume(self, worker_id: str, volume_id: str, device_name: str, region: str | None = None) -> None:
        self._call(
            "Failed to attach EBS volume", region, "attach_volume",
            InstanceId=worker_id,
            VolumeId=volume_id,
            Device=device_name,
        )

    def detach_volume(self, volume_id: str, region: str | None = None) -> None:
        self._call("Failed to detach EBS volume", region, "detach_volume", VolumeId=volume_id)

    # ── Snapshots ───────────────────────────────────────────────────

    def create_snapshot(self, volume_id: str, name: str, region: str | None = None) -> str:
        response = self._call(
            "Failed to create snapshot", region, "create_snapshot",
            VolumeId=volume_id,
            Description=f"Snapshot of {volume_id}",
            TagSpecifications=[_name_tag_spec("snapshot", name)],
        )
        snapshot_id = response.get("SnapshotId")
        if not snapshot_id:
            raise ProviderError("No snapshot ID was returned")
        logger.info("Created snapshot %s of %s", snapshot_id, volume_id, extra={"resource_id": snapshot_id})
        return snapshot_id

    def delete_snapshot(self, snapshot_id: str, region: str | None = None) -> None:
        self._call("Failed to delete snapshot", region, "delete_snapshot", SnapshotId=snapshot_id)

    def has_snapshot(self, snapshot_id: str, region: str | None = None) -> bool:
        response = self._exists(
            "Failed to check if snapshot exists", region, "describe_snapshots",
            SNAPSHOT_NOT_FOUND, SnapshotIds=[snapshot_id],
        )
        return bool(response and response.get("Snapshots"))


# ── Parsing ─────────────────────────────────────────────────────────


def _parse_instance(raw: dict[str, Any], fallback_id: str | None = None) -> Worker | None:
    """Parse a raw describe_instances entry. Returns None if it has no ID and no fallback."""
    instance_id = raw.get("InstanceId") or fallback_id
    if not instance_id:
        return None
    return Worker(
        id=instance_id,
        name=name_from_tags(raw.get("Tags")),
        state=raw.get("State", {}).get("Name") or UNKNOWN,
        instance_type=raw.get("InstanceType") or UNKNOWN,
        public_ip=raw.get("PublicIpAddress"),
        private_ip=raw.get("PrivateIpAddress"),
        availability_zone=raw.get("Placement", {}).get("AvailabilityZone"),
    )


def _parse_volume(raw: dict[str, Any]) -> Volume | None:
    volume_id = raw.get("VolumeId")
    if not volume_id:
        return None
    attachments = raw.get("Attachments") or []
    attached_to = attachments[0].get("InstanceId") if attachments else None
    return Volume(
        id=volume_id,
        size_mb=int(raw.get("Size") or 0) * 1024,
        state=raw.get("State") or UNKNOWN,
        availability_zone=raw.get("AvailabilityZone") or UNKNOWN,
        attached_to=attached_to,
    )


def _name_tag_spec(resource_type: str, name: str) -> dict[str, Any]:
    return {"ResourceType": resource_type, "Tags": [{"Key": "Name", "Value": name}]}


def _wrap(context: str, exc: ClientError) -> CloudAPIError:
    error = exc.response.get("Error", {})
    code = error.get("Code")
    message = error.get("Message") or str(exc)
    return CloudAPIError(f"{context}: {code}: {message}" if code else f"{context}: {message}", error_code=code)
