"""Widgets composing the resources screen."""
from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence

from rich.text import Text
from textual import on
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.message import Message
from textual.widgets import Button, Checkbox, Label, Static, TextArea

from lockdesk.resources.model import Resource
from lockdesk.security.permissions import Capability

from .action_bar import BAR_CAPABILITIES
from .notes import LOADING_TEXT, NoteFragment

STATUS_STYLES = {
    "LOCKED": "bold red",
    "RESERVED": "bold yellow",
    "QUEUED": "cyan",
    "FREE": "green",
}


class NoteView(Vertical):
    """Note text of a row, replaced by an editor while the note is edited."""

    DEFAULT_CSS = """
    NoteView { height: auto; padding-left: 4; }
    NoteView TextArea { height: 5; }
    """

    class SaveRequested(Message):
        def __init__(self, view: "NoteView", note: str) -> None:
            self.view = view
            self.note = note
            super().__init__()

    def __init__(self, note: str = "", **kwargs: object) -> None:
        super().__init__(**kwargs)  # type: ignore[arg-type]
        self.placeholder = Static(note, classes="note-text")
        self.editor = TextArea(classes="note-editor")
        self.save_button = Button("Save", classes="note-save", variant="primary")
        self.editor.display = False
        self.save_button.display = False

    def compose(self) -> ComposeResult:
        yield self.placeholder
        yield self.editor
        yield self.save_button

    def show_loading(self) -> None:
        self.placeholder.update(Text(LOADING_TEXT, style="italic"))
        self.placeholder.display = True
        self.editor.display = False
        self.save_button.display = False

    def show_fragment(self, fragment: NoteFragment) -> None:
        field = fragment.first_text_input
        self.editor.load_text(field.value if field else "")
        self.placeholder.display = False
        self.editor.display = field is not None
        self.save_button.display = field is not None

    def focus_first_text_input(self) -> bool:
        if not self.editor.display:
            return False
        self.editor.focus()
        return True

    def show_note(self, note: str) -> None:
        self.placeholder.update(note)
        self.placeholder.display = True
        self.editor.display = False
        self.save_button.display = False

    @on(Button.Pressed, ".note-save")
    def _save(self, event: Button.Pressed) -> None:
        event.stop()
        self.post_message(self.SaveRequested(self, self.editor.text))


class ResourceRow(Vertical):
    """One table row: selection checkbox, state columns and the note area."""

    DEFAULT_CSS = """
    ResourceRow { height: auto; border-bottom: solid $panel; }
    ResourceRow > Horizontal { height: auto; }
    ResourceRow Label { padding: 1 1 0 1; }
    ResourceRow .resource-name { width: 30; }
    ResourceRow .resource-status { width: 12; }
    ResourceRow .resource-owner { width: 20; }
    """

    class SelectionToggled(Message):
        def __init__(self, row: "ResourceRow", checked: bool) -> None:
            self.row = row
            self.checked = checked
            super().__init__()

    class NoteRequested(Message):
        def __init__(self, row: "ResourceRow") -> None:
            self.row = row
            super().__init__()

    def __init__(self, resource: Resource, *, checked: bool = False) -> None:
        super().__init__(classes="resource-row")
        self.resource = resource
        self.checkbox = Checkbox(value=checked, classes="resource-select")
        self.note_button = Button("Note", classes="note-btn")
        self.note_view = NoteView(resource.note)

    @property
    def resource_name(self) -> str:
        return self.resource.name

    def compose(self) -> ComposeResult:
        resource = self.resource
        with Horizontal():
            yield self.checkbox
            yield Label(resource.name, classes="resource-name")
            yield Label(
                Text(resource.status, style=STATUS_STYLES[resource.status]),
                classes="resource-status",
            )
            yield Label(resource.reserved_by or "", classes="resource-owner")
            yield Label(resource.description, classes="resource-description")
            yield self.note_button
        yield self.note_view

    @property
    def checked(self) -> bool:
        return self.checkbox.value

    def uncheck_silently(self) -> None:
        with self.checkbox.prevent(Checkbox.Changed):
            self.checkbox.value = False

    @on(Checkbox.Changed, ".resource-select")
    def _toggled(self, event: Checkbox.Changed) -> None:
        event.stop()
        self.post_message(self.SelectionToggled(self, event.value))

    @on(Button.Pressed, ".note-btn")
    def _note(self, event: Button.Pressed) -> None:
        event.stop()
        self.post_message(self.NoteRequested(self))


class ResourceTable(VerticalScroll):
    """The resources table; reports its checked rows as the selection."""

    def __init__(self, **kwargs: object) -> None:
        super().__init__(**kwargs)  # type: ignore[arg-type]
        self._rows: List[ResourceRow] = []

    @property
    def rows(self) -> Sequence[ResourceRow]:
        return tuple(self._rows)

    def row(self, resource_name: str) -> Optional[ResourceRow]:
        for row in self._rows:
            if row.resource_name == resource_name:
                return row
        return None

    async def set_resources(self, resources: Iterable[Resource], *, note_visible: bool = True) -> None:
        """Redraw the table, keeping the selection of rows that still exist."""

        checked = set(self.list_checked_resource_names())
        await self.remove_children()
        self._rows = [
            ResourceRow(resource, checked=resource.name in checked) for resource in resources
        ]
        for row in self._rows:
            row.note_button.display = note_visible
        if self._rows:
            await self.mount_all(self._rows)

    def note_buttons(self) -> List[Button]:
        return [row.note_button for row in self._rows]

    def list_checked_resource_names(self) -> List[str]:
        return [row.resource_name for row in self._rows if row.checked]

    def clear_checked(self) -> None:
        for row in self._rows:
            row.uncheck_silently()


class ActionBar(Horizontal):
    """Buttons for the batch actions plus note editing."""

    DEFAULT_CSS = """
    ActionBar { height: auto; padding: 0 1; }
    ActionBar Button { margin-right: 1; }
    """

    LABELS: Dict[Capability, str] = {
        Capability.UNLOCK: "Unlock",
        Capability.STEAL: "Steal lock",
        Capability.RESERVE: "Reserve",
        Capability.UNRESERVE: "Unreserve",
        Capability.REASSIGN: "Reassign",
        Capability.RESET: "Reset",
        Capability.EDIT: "Edit note",
    }

    def __init__(self, **kwargs: object) -> None:
        super().__init__(**kwargs)  # type: ignore[arg-type]
        self._buttons: Dict[Capability, Button] = {
            capability: Button(self.LABELS[capability], id=capability.button_id, classes="resource-action")
            for capability in BAR_CAPABILITIES
        }

    def compose(self) -> ComposeResult:
        yield from self._buttons.values()

    def buttons(self) -> Dict[Capability, Button]:
        return dict(self._buttons)

    @staticmethod
    def capability_for(button: Button) -> Optional[Capability]:
        if not button.id or not button.id.startswith("resource_action_"):
            return None
        return Capability.coerce(button.id[len("resource_action_"):])


__all__ = ["ActionBar", "NoteView", "ResourceRow", "ResourceTable"]
