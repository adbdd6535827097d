"""Permission handling for lockdesk."""

from __future__ import annotations

from .permissions import (
    ROW_ACTIONS,
    Capability,
    EffectivePermissions,
    PermissionSession,
    PermissionTable,
)

__all__ = [
    "ROW_ACTIONS",
    "Capability",
    "EffectivePermissions",
    "PermissionSession",
    "PermissionTable",
]
