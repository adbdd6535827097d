"""Which row actions are valid for a resource, given the user's permissions."""

from __future__ import annotations

from typing import Callable, Dict, List

from lockdesk.security.permissions import ROW_ACTIONS, Capability, PermissionSession

from .model import Resource


class ResourceStateRules:
    """Pure predicates over a resource snapshot and the session permissions.

    The predicates only mirror what the server will accept so the action bar
    can avoid offering doomed actions; the server still performs the real
    check.
    """

    def __init__(self, session: PermissionSession) -> None:
        self._session = session
        self._predicates: Dict[Capability, Callable[[Resource], bool]] = {
            Capability.UNLOCK: self.can_unlock,
            Capability.STEAL: self.can_steal,
            Capability.RESERVE: self.can_reserve,
            Capability.UNRESERVE: self.can_unreserve,
            Capability.REASSIGN: self.can_reassign,
            Capability.RESET: self.can_reset,
        }

    def _has(self, capability: Capability) -> bool:
        return self._session.has(capability)

    def can_unlock(self, resource: Resource) -> bool:
        return (resource.is_locked or resource.is_reserved) and self._has(Capability.UNLOCK)

    def can_steal(self, resource: Resource) -> bool:
        return not resource.is_ephemeral and resource.is_locked and self._has(Capability.STEAL)

    def can_reserve(self, resource: Resource) -> bool:
        if resource.is_locked or resource.is_reserved or resource.is_queued:
            return False
        return self._has(Capability.RESERVE)

    def can_unreserve(self, resource: Resource) -> bool:
        if self._has(Capability.ADMINISTER):
            return resource.is_reserved
        return resource.is_reserved_by_current_user and self._has(Capability.UNRESERVE)

    def can_reassign(self, resource: Resource) -> bool:
        if resource.is_reserved:
            if self._has(Capability.ADMINISTER):
                return True
            return (
                resource.is_reserved_by_current_user
                and self._has(Capability.UNRESERVE)
                and self._has(Capability.REASSIGN)
            )
        if resource.is_locked:
            # Lock ownership of the running build is not visible client-side.
            return self._has(Capability.ADMINISTER)
        return False

    def can_reset(self, resource: Resource) -> bool:
        return self._has(Capability.RESET) and (
            self.can_unlock(resource) or self.can_unreserve(resource) or resource.is_queued
        )

    def can_edit_note(self) -> bool:
        return self._has(Capability.EDIT)

    def allows(self, capability: Capability, resource: Resource) -> bool:
        """Evaluate the row action ``capability`` for ``resource``.

        Raises :class:`KeyError` when ``capability`` is not a row action.
        """

        return self._predicates[capability](resource)

    def allowed_actions(self, resource: Resource) -> List[Capability]:
        return [capability for capability in ROW_ACTIONS if self.allows(capability, resource)]


__all__ = ["ResourceStateRules"]
