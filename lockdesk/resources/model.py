"""Resource snapshots shown in the resources table."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Tuple


def _labels(value: Any) -> Tuple[str, ...]:
    if not value:
        return ()
    if isinstance(value, str):
        return tuple(value.split())
    return tuple(str(item) for item in value)


@dataclass(frozen=True)
class Resource:
    """State of one lockable resource as last seen by the client.

    A resource may be locked and reserved at the same time. Snapshots are
    replaced wholesale whenever the row is redrawn; they are never aged.
    """

    name: str
    is_locked: bool = False
    is_reserved: bool = False
    is_queued: bool = False
    is_ephemeral: bool = False
    is_reserved_by_current_user: bool = False
    reserved_by: Optional[str] = None
    note: str = ""
    description: str = ""
    labels: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def status(self) -> str:
        if self.is_locked:
            return "LOCKED"
        if self.is_reserved:
            return "RESERVED"
        if self.is_queued:
            return "QUEUED"
        return "FREE"

    @classmethod
    def from_snapshot(cls, payload: Mapping[str, Any]) -> "Resource":
        """Build a resource from a page snapshot.

        Snapshots are trusted as given: absent flags are false and nothing is
        validated.
        """

        return cls(
            name=str(payload.get("resourceName", "")),
            is_locked=bool(payload.get("isLocked")),
            is_reserved=bool(payload.get("isReserved")),
            is_queued=bool(payload.get("isQueued")),
            is_ephemeral=bool(payload.get("isEphemeral")),
            is_reserved_by_current_user=bool(payload.get("isReservedByCurrentUser")),
            reserved_by=payload.get("reservedBy"),
            note=payload.get("note") or "",
            description=payload.get("description") or "",
            labels=_labels(payload.get("labels")),
        )

    @classmethod
    def from_api(cls, payload: Mapping[str, Any], current_user: Optional[str] = None) -> "Resource":
        """Build a resource from one entry of the server's ``api/json`` listing."""

        reserved_by = payload.get("reservedBy") or None
        is_reserved = bool(payload.get("reserved")) or reserved_by is not None
        return cls(
            name=str(payload["name"]),
            is_locked=bool(payload.get("locked")),
            is_reserved=is_reserved,
            is_queued=bool(payload.get("queued")),
            is_ephemeral=bool(payload.get("ephemeral")),
            is_reserved_by_current_user=(
                is_reserved and current_user is not None and reserved_by == current_user
            ),
            reserved_by=reserved_by,
            note=payload.get("note") or "",
            description=payload.get("description") or "",
            labels=_labels(payload.get("labels")),
        )


__all__ = ["Resource"]
