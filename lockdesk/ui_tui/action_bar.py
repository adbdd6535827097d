"""Action bar state: which buttons are shown and which are clickable."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Mapping, Optional, Protocol, Tuple

from lockdesk.resources.model import Resource
from lockdesk.resources.rules import ResourceStateRules
from lockdesk.security.permissions import (
    ROW_ACTIONS,
    Capability,
    PermissionSession,
    RawPermissions,
)
from lockdesk.utils.logging import get_logger

from .selection import SelectionTracker

logger = get_logger(__name__)

# ADMINISTER only widens the other capabilities; it has no button of its own.
BAR_CAPABILITIES: Tuple[Capability, ...] = (*ROW_ACTIONS, Capability.EDIT)


class ButtonState(str, Enum):
    ENABLED = "enabled"
    DISABLED = "disabled"
    HIDDEN = "hidden"


class ButtonHandle(Protocol):
    """Minimal button surface; Textual's ``Button`` satisfies it."""

    disabled: bool
    display: bool


@dataclass
class HeadlessButton:
    """Button stand-in used when no widget tree exists."""

    disabled: bool = False
    display: bool = True


def headless_buttons(capabilities: Iterable[Capability] = BAR_CAPABILITIES) -> Dict[Capability, HeadlessButton]:
    return {capability: HeadlessButton() for capability in capabilities}


class ActionBarController:
    """Keep the action bar consistent with permissions and the selection.

    Buttons the user has no permission for are hidden once per permission
    load. Everything else is merely disabled when it is not valid for *every*
    selected resource, so a batch action never partially applies.
    """

    def __init__(
        self,
        session: PermissionSession,
        tracker: SelectionTracker,
        buttons: Optional[Mapping[Capability, ButtonHandle]] = None,
    ) -> None:
        self._session = session
        self._tracker = tracker
        self._rules = ResourceStateRules(session)
        self._buttons: Dict[Capability, ButtonHandle] = dict(buttons or {})
        self._states: Dict[Capability, ButtonState] = {
            capability: ButtonState.HIDDEN for capability in BAR_CAPABILITIES
        }
        self._note_visible = False

    @property
    def rules(self) -> ResourceStateRules:
        return self._rules

    @property
    def note_visible(self) -> bool:
        return self._note_visible

    def bind(self, buttons: Mapping[Capability, ButtonHandle]) -> None:
        """Attach button handles and push the current states onto them."""

        self._buttons = dict(buttons)
        for capability, state in self._states.items():
            self._apply(capability, state)

    def state(self, capability: Capability) -> ButtonState:
        """State of the button for ``capability``; KeyError for ADMINISTER."""

        return self._states[capability]

    def enabled_actions(self) -> List[Capability]:
        return [c for c in ROW_ACTIONS if self._states[c] is ButtonState.ENABLED]

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def load_permissions(
        self, raw: Optional[RawPermissions], note_buttons: Iterable[ButtonHandle] = ()
    ) -> None:
        """Load a permission set and reset the bar to its baseline.

        Unpermitted buttons are hidden and the rest start disabled, since the
        selection is cleared along with the load.
        """

        self._session.load(raw)
        self._tracker.clear_selection()
        for capability in BAR_CAPABILITIES:
            if self._session.has(capability):
                self._set(capability, ButtonState.DISABLED)
            else:
                self._set(capability, ButtonState.HIDDEN)
        self._recompute()
        self._note_visible = self._rules.can_edit_note()
        for button in note_buttons:
            button.display = self._note_visible
        logger.info(
            "action bar initialised",
            extra={"capability": [c.value for c in Capability if self._session.has(c)]},
        )

    def selection_changed(self, resource: Resource, checked: bool) -> None:
        """Recompute the bar after the row of ``resource`` was (un)checked."""

        self._tracker.record_resource(resource)
        self._enable_permitted()
        if checked and self._restrict_to(resource):
            return
        self._recompute()

    def refresh(self) -> None:
        """Recompute the bar from the cached snapshots of the current selection."""

        self._enable_permitted()
        self._recompute()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _recompute(self) -> None:
        for resource in self._tracker.selected_resources():
            if self._restrict_to(resource):
                return
        if not self._tracker.current_selection():
            for capability in BAR_CAPABILITIES:
                self._disable(capability)

    def _enable_permitted(self) -> None:
        for capability, state in self._states.items():
            if state is not ButtonState.HIDDEN:
                self._set(capability, ButtonState.ENABLED)

    def _restrict_to(self, resource: Resource) -> bool:
        """Disable every row action ``resource`` does not allow.

        Returns ``True`` once all row actions are disabled.
        """

        for capability in ROW_ACTIONS:
            if not self._rules.allows(capability, resource):
                self._disable(capability)
        return all(self._states[c] is not ButtonState.ENABLED for c in ROW_ACTIONS)

    def _disable(self, capability: Capability) -> None:
        if self._states[capability] is not ButtonState.HIDDEN:
            self._set(capability, ButtonState.DISABLED)

    def _set(self, capability: Capability, state: ButtonState) -> None:
        self._states[capability] = state
        self._apply(capability, state)

    def _apply(self, capability: Capability, state: ButtonState) -> None:
        button = self._buttons.get(capability)
        if button is None:
            logger.debug("no button %s on the action bar", capability.button_id)
            return
        button.display = state is not ButtonState.HIDDEN
        button.disabled = state is not ButtonState.ENABLED


__all__ = [
    "ActionBarController",
    "BAR_CAPABILITIES",
    "ButtonHandle",
    "ButtonState",
    "HeadlessButton",
    "headless_buttons",
]
