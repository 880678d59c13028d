"""Provider-agnostic shapes for workers and volumes."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

UNNAMED = "unnamed"
UNKNOWN = "unknown"


@dataclass(frozen=True)
class Worker:
    """A virtual machine as reported to the host."""

    id: str
    name: str = UNNAMED
    state: str = UNKNOWN
    instance_type: str = UNKNOWN
    public_ip: str | None = None
    private_ip: str | None = None
    availability_zone: str | None = None

    def to_summary(self) -> dict[str, Any]:
        """Listing form, without placement."""
        data = asdict(self)
        del data["availability_zone"]
        return data

    def to_detail(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Volume:
    """A block storage volume as reported to the host."""

    id: str
    size_mb: int
    state: str = UNKNOWN
    availability_zone: str = UNKNOWN
    attached_to: str | None = None

    @property
    def path(self) -> str:
        # EBS has no mount path of its own; the volume ID stands in for it
        return self.id

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "path": self.path,
            "size_mb": self.size_mb,
            "state": self.state,
            "availability_zone": self.availability_zone,
            "attached_to": self.attached_to,
        }


def name_from_tags(tags: list[dict[str, str]] | None) -> str:
    """Return the value of the Name tag, or 'unnamed' when absent."""
    for tag in tags or []:
        if tag.get("Key") == "Name":
            return tag.get("Value", UNNAMED)
    return UNNAMED
