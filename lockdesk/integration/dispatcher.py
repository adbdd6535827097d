"""Turn an action-bar click into one request for the selected resources."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Protocol, Tuple, Union
from urllib.parse import quote

from lockdesk.security.permissions import Capability
from lockdesk.ui_tui.selection import SelectionTracker
from lockdesk.utils.logging import get_logger

logger = get_logger(__name__)

# Characters left alone by JavaScript's ``encodeURIComponent``.
_URI_COMPONENT_SAFE = "!'()*"


def encode_component(value: str) -> str:
    return quote(value, safe=_URI_COMPONENT_SAFE)


@dataclass(frozen=True)
class ActionRequest:
    """One batch action for one or more resources."""

    action: Capability
    resources: Tuple[str, ...]

    def __post_init__(self) -> None:
        if not self.action.is_row_action:
            raise ValueError(f"{self.action.value} is not a resource action")
        if not self.resources:
            raise ValueError("an action request needs at least one resource")

    def form_fields(self) -> Dict[str, str]:
        if len(self.resources) == 1:
            return {"resource": self.resources[0]}
        return {"resources": "\n".join(self.resources)}

    def query_string(self) -> str:
        return "&".join(f"{key}={encode_component(value)}" for key, value in self.form_fields().items())

    @property
    def path(self) -> str:
        return f"{self.action.endpoint}?{self.query_string()}"


class ActionTransport(Protocol):
    async def submit(self, request: ActionRequest) -> None: ...  # pragma: no cover - structural


class ActionDispatcher:
    """Submit row actions for whatever is selected when the button is pressed."""

    def __init__(self, tracker: SelectionTracker, transport: ActionTransport) -> None:
        self._tracker = tracker
        self._transport = transport

    def build_request(self, action: Union[str, Capability]) -> Optional[ActionRequest]:
        capability = Capability.coerce(action)
        if not capability.is_row_action:
            raise ValueError(f"{capability.value} is not a resource action")
        selection = self._tracker.current_selection()
        if not selection:
            return None
        return ActionRequest(capability, tuple(selection))

    async def dispatch(self, action: Union[str, Capability]) -> Optional[ActionRequest]:
        """Send ``action`` for the current selection.

        Returns the submitted request, or ``None`` when nothing is selected.
        Submission errors from the transport propagate unchanged.
        """

        request = self.build_request(action)
        if request is None:
            logger.debug("nothing selected, %s skipped", Capability.coerce(action).endpoint)
            return None
        logger.info(
            "dispatching %s",
            request.action.endpoint,
            extra={"action": request.action.endpoint, "resources": list(request.resources)},
        )
        await self._transport.submit(request)
        return request


__all__ = ["ActionDispatcher", "ActionRequest", "ActionTransport", "encode_component"]
