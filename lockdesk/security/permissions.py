"""Permission models for lockdesk.

The server grants a user a handful of coarse permissions (``UNLOCK``,
``STEAL``, ``RESERVE``, ``ADMINISTER``). The action bar works with eight
finer capabilities derived from those grants, see :meth:`PermissionTable.derive`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple, Union

from lockdesk.utils.logging import get_logger

logger = get_logger(__name__)


class Capability(str, Enum):
    UNLOCK = "UNLOCK"
    RESET = "RESET"
    STEAL = "STEAL"
    REASSIGN = "REASSIGN"
    RESERVE = "RESERVE"
    UNRESERVE = "UNRESERVE"
    EDIT = "EDIT"
    ADMINISTER = "ADMINISTER"

    @property
    def button_id(self) -> str:
        return f"resource_action_{self.value.lower()}"

    @property
    def endpoint(self) -> str:
        """Keyword of the server endpoint handling this action."""

        return self.value.lower()

    @property
    def is_row_action(self) -> bool:
        return self in ROW_ACTIONS

    @classmethod
    def coerce(cls, value: Union[str, "Capability"]) -> "Capability":
        """Return the capability for ``value``, accepting any letter case.

        Raises :class:`ValueError` for unknown names.
        """

        if isinstance(value, Capability):
            return value
        return cls(str(value).strip().upper())


# Actions applied to selected rows, in action bar order.
ROW_ACTIONS: Tuple[Capability, ...] = (
    Capability.UNLOCK,
    Capability.STEAL,
    Capability.RESERVE,
    Capability.UNRESERVE,
    Capability.REASSIGN,
    Capability.RESET,
)

RawPermissions = Mapping[Union[str, Capability], Any]


@dataclass(frozen=True)
class EffectivePermissions:
    """Capability table after folding in coarser grants."""

    granted: Mapping[Capability, bool] = field(default_factory=dict)

    def __post_init__(self) -> None:
        table = {capability: bool(self.granted.get(capability, False)) for capability in Capability}
        object.__setattr__(self, "granted", MappingProxyType(table))

    def allows(self, capability: Capability) -> bool:
        return self.granted[capability]

    def __iter__(self) -> Iterator[Capability]:
        return iter(self.granted)

    def to_dict(self) -> Dict[str, bool]:
        return {capability.value: value for capability, value in self.granted.items()}


class PermissionTable:
    """Derive effective capabilities from a raw permission grant set."""

    @staticmethod
    def _normalise(raw: Optional[RawPermissions]) -> Dict[Capability, bool]:
        grants: Dict[Capability, bool] = {}
        for key, value in (raw or {}).items():
            try:
                capability = Capability.coerce(key)
            except ValueError:
                logger.debug("ignoring unknown permission", extra={"capability": str(key)})
                continue
            grants[capability] = grants.get(capability, False) or bool(value)
        return grants

    @classmethod
    def derive(cls, raw: Optional[RawPermissions]) -> EffectivePermissions:
        """Return the effective permission table for ``raw``.

        Missing keys count as not granted. ``ADMINISTER`` contributes to every
        capability, so an administrator is allowed everything.
        """

        grants = cls._normalise(raw)
        admin = grants.get(Capability.ADMINISTER, False)
        unlock = grants.get(Capability.UNLOCK, False)
        steal = grants.get(Capability.STEAL, False)
        reserve = grants.get(Capability.RESERVE, False)
        return EffectivePermissions(
            {
                Capability.UNLOCK: unlock or admin,
                Capability.RESET: unlock or admin,
                Capability.STEAL: steal or admin,
                Capability.REASSIGN: steal or admin,
                Capability.RESERVE: reserve or admin,
                Capability.UNRESERVE: reserve or admin,
                Capability.EDIT: reserve or unlock or steal or admin,
                Capability.ADMINISTER: admin,
            }
        )


class PermissionSession:
    """Holds the permissions of the current user for one UI session.

    :meth:`load` is called when the page (or configuration) is loaded and may
    be called again later; every component reads the latest table through
    :meth:`has`.
    """

    def __init__(self) -> None:
        self._permissions = EffectivePermissions()

    @property
    def permissions(self) -> EffectivePermissions:
        return self._permissions

    def load(self, raw: Optional[RawPermissions]) -> EffectivePermissions:
        self._permissions = PermissionTable.derive(raw)
        logger.debug("permissions loaded: %s", self._permissions.to_dict())
        return self._permissions

    def reset(self) -> None:
        self._permissions = EffectivePermissions()

    def has(self, capability: Capability) -> bool:
        return self._permissions.allows(capability)


__all__ = [
    "Capability",
    "ROW_ACTIONS",
    "RawPermissions",
    "EffectivePermissions",
    "PermissionTable",
    "PermissionSession",
]
