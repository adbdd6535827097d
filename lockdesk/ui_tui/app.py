"""Textual application for browsing and acting on lockable resources."""
from __future__ import annotations

from typing import Any, Mapping, Optional

from textual import on
from textual.app import App, ComposeResult
from textual.widgets import Button, Footer, Header

from lockdesk.core.config import ConfigManager, LockDeskSettings
from lockdesk.integration.client import LockableResourcesClient
from lockdesk.integration.dispatcher import ActionDispatcher
from lockdesk.security.permissions import Capability, PermissionSession
from lockdesk.utils.errors import LockDeskError
from lockdesk.utils.logging import get_logger

from .action_bar import ActionBarController
from .hotkeys import bindings_for_app
from .notes import NoteEditor
from .panels import ActionBar, NoteView, ResourceRow, ResourceTable
from .selection import SelectionTracker

logger = get_logger(__name__)


class LockDeskTUI(App[None]):
    """Resources table with the batch action bar on top."""

    TITLE = "Lockable resources"
    BINDINGS = bindings_for_app()

    def __init__(
        self,
        settings: LockDeskSettings,
        *,
        client: Optional[LockableResourcesClient] = None,
        config_manager: Optional[ConfigManager] = None,
        permissions: Optional[Mapping[str, Any]] = None,
    ) -> None:
        super().__init__()
        self.settings = settings
        self.client = client or LockableResourcesClient(settings.server)
        self._owns_client = client is None
        self.config_manager = config_manager
        self._permission_override = dict(permissions) if permissions is not None else None
        self.session = PermissionSession()
        self.tracker = SelectionTracker()
        self.controller = ActionBarController(self.session, self.tracker)
        self.dispatcher = ActionDispatcher(self.tracker, self.client)
        self.notes = NoteEditor(self.client)
        self.table = ResourceTable(id="lockable-resources")
        self.action_bar = ActionBar(id="action-bar")

    def compose(self) -> ComposeResult:
        yield Header()
        yield self.action_bar
        yield self.table
        yield Footer()

    async def on_mount(self) -> None:
        self.theme = "textual-light" if self.settings.ui.theme == "light" else "textual-dark"
        self.tracker.attach(self.table)
        self.controller.bind(self.action_bar.buttons())
        if self.config_manager is not None:
            self.config_manager.register_callback(self._settings_reloaded)
        await self.refresh_resources()
        self.controller.load_permissions(self._raw_permissions(), self.table.note_buttons())
        self.set_interval(self.settings.ui.refresh_interval, self.refresh_resources)

    async def on_unmount(self) -> None:
        self.notes.cancel_all()
        if self._owns_client:
            await self.client.close()

    def _raw_permissions(self) -> Mapping[str, Any]:
        if self._permission_override is not None:
            return self._permission_override
        return self.settings.session.permissions

    async def refresh_resources(self) -> None:
        """Reload the table from the server and re-evaluate the action bar."""

        try:
            resources = await self.client.list_resources(self.settings.session.user)
        except LockDeskError as exc:
            logger.warning("resource refresh failed: %s", exc)
            self.notify(str(exc), title="Refresh failed", severity="error")
            return
        await self.table.set_resources(resources, note_visible=self.controller.note_visible)
        for resource in resources:
            self.tracker.record_resource(resource)
        self.controller.refresh()

    async def _settings_reloaded(self, settings: LockDeskSettings) -> None:
        self.settings = settings
        self.controller.load_permissions(self._raw_permissions(), self.table.note_buttons())
        self.notify("Permissions reloaded")

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------
    @on(ResourceRow.SelectionToggled)
    def _selection_toggled(self, event: ResourceRow.SelectionToggled) -> None:
        self.controller.selection_changed(event.row.resource, event.checked)

    @on(ResourceRow.NoteRequested)
    def _note_requested(self, event: ResourceRow.NoteRequested) -> None:
        self.notes.edit(event.row.resource_name, event.row.note_view)

    @on(NoteView.SaveRequested)
    async def _note_save(self, event: NoteView.SaveRequested) -> None:
        row = event.view.parent
        if not isinstance(row, ResourceRow):
            return
        try:
            await self.notes.save(row.resource_name, event.note)
        except LockDeskError as exc:
            self.notify(str(exc), title="Note not saved", severity="error")
            return
        event.view.show_note(event.note)

    @on(Button.Pressed, ".resource-action")
    async def _action_pressed(self, event: Button.Pressed) -> None:
        capability = ActionBar.capability_for(event.button)
        if capability is None:
            return
        if capability is Capability.EDIT:
            selection = self.tracker.current_selection()
            row = self.table.row(selection[0]) if selection else None
            if row is not None:
                self.notes.edit(row.resource_name, row.note_view)
            return
        try:
            request = await self.dispatcher.dispatch(capability)
        except LockDeskError as exc:
            self.notify(str(exc), title=f"{capability.endpoint} failed", severity="error")
            return
        if request is not None:
            self.notify(f"{capability.endpoint}: {', '.join(request.resources)}")
            await self.refresh_resources()

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------
    async def action_refresh_resources(self) -> None:
        await self.refresh_resources()

    async def action_reload_config(self) -> None:
        if self.config_manager is None:
            return
        try:
            await self.config_manager.reload()
        except LockDeskError as exc:
            self.notify(str(exc), title="Configuration error", severity="error")

    def action_select_all(self) -> None:
        for row in self.table.rows:
            row.checkbox.value = True

    def action_clear_selection(self) -> None:
        for row in self.table.rows:
            row.checkbox.value = False


async def launch_tui(
    settings: LockDeskSettings,
    *,
    config_manager: Optional[ConfigManager] = None,
    permissions: Optional[Mapping[str, Any]] = None,
) -> None:
    app = LockDeskTUI(settings, config_manager=config_manager, permissions=permissions)
    await app.run_async()


__all__ = ["LockDeskTUI", "launch_tui"]
