"""Plugin capability interface the orchestration host binds against."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .actions import ActionDefinition


@runtime_checkable
class CpiExtension(Protocol):
    """Protocol that every provider extension must satisfy."""

    @property
    def name(self) -> str: ...

    @property
    def provider_type(self) -> str: ...

    def list_actions(self) -> list[str]:
        """Return the action names this provider supports, in catalog order."""
        ...

    def get_action_definition(self, action: str) -> ActionDefinition | None:
        """Return the parameter schema for one action, or None if unknown."""
        ...

    def execute_action(self, action: str, params: dict[str, Any]) -> dict[str, Any]:
        """Run one action synchronously and return its JSON-compatible result."""
        ...
