"""Server integration for lockdesk."""

from __future__ import annotations

from lockdesk.integration.client import Crumb, LockableResourcesClient
from lockdesk.integration.dispatcher import ActionDispatcher, ActionRequest, ActionTransport

__all__ = [
    "ActionDispatcher",
    "ActionRequest",
    "ActionTransport",
    "Crumb",
    "LockableResourcesClient",
]
