from __future__ import annotations

import asyncio
from typing import Dict, List, Tuple

import pytest

from lockdesk.ui_tui.notes import BehaviourRegistry, NoteEditor, NoteFragment
from lockdesk.utils.errors import IntegrationError

FORM = """
<form action="saveNote" method="post">
  <script>Behaviour.specify('textarea', 'note', 0, function(e) {});</script>
  <input type="hidden" name="resource" value="printer"/>
  <textarea name="note">toner low</textarea>
  <input type="submit" value="Save"/>
</form>
"""


class FakeContainer:
    def __init__(self) -> None:
        self.events: List[str] = []
        self.fragment: NoteFragment | None = None

    def show_loading(self) -> None:
        self.events.append("loading")

    def show_fragment(self, fragment: NoteFragment) -> None:
        self.fragment = fragment
        self.events.append("fragment")

    def focus_first_text_input(self) -> bool:
        self.events.append("focus")
        return self.fragment is not None and self.fragment.first_text_input is not None


class GatedFetcher:
    """Note form fetcher whose responses are released by the test."""

    def __init__(self) -> None:
        self.gates: Dict[str, List[asyncio.Future[str]]] = {}
        self.saved: List[Tuple[str, str]] = []

    async def fetch_note_form(self, resource_name: str) -> str:
        future: asyncio.Future[str] = asyncio.get_running_loop().create_future()
        self.gates.setdefault(resource_name, []).append(future)
        return await future

    async def save_note(self, resource_name: str, note: str) -> None:
        self.saved.append((resource_name, note))


class FailingFetcher(GatedFetcher):
    async def fetch_note_form(self, resource_name: str) -> str:
        raise IntegrationError("HTTP 500")


def test_fragment_parsing() -> None:
    fragment = NoteFragment.parse(FORM)
    assert [(i.name, i.value, i.multiline) for i in fragment.inputs] == [("note", "toner low", True)]
    assert fragment.first_text_input is not None
    assert len(fragment.scripts) == 1 and "Behaviour.specify" in fragment.scripts[0]


def test_fragment_text_inputs_default_type() -> None:
    fragment = NoteFragment.parse('<input name="note" value="x"><input type="checkbox" name="c">')
    assert [(i.name, i.value, i.multiline) for i in fragment.inputs] == [("note", "x", False)]
    assert NoteFragment.parse("<p>nothing</p>").first_text_input is None


@pytest.mark.asyncio
async def test_edit_loads_form_runs_scripts_and_focuses() -> None:
    fetcher = GatedFetcher()
    scripts: List[Tuple[str, str]] = []
    bound: List[str] = []
    behaviours = BehaviourRegistry()
    behaviours.register("textarea", lambda container, element: bound.append(element["name"]))
    editor = NoteEditor(fetcher, behaviours=behaviours, script_runner=lambda name, src: scripts.append((name, src)))
    container = FakeContainer()

    task = editor.edit("printer", container)
    await asyncio.sleep(0)
    assert container.events == ["loading"]
    assert editor.pending("printer")

    fetcher.gates["printer"][0].set_result(FORM)
    fragment = await task
    assert fragment is not None
    assert container.events == ["loading", "fragment", "focus"]
    assert scripts and scripts[0][0] == "printer"
    assert bound == ["note"]
    assert not editor.pending("printer")


@pytest.mark.asyncio
async def test_new_edit_cancels_previous_request_for_same_resource() -> None:
    fetcher = GatedFetcher()
    editor = NoteEditor(fetcher)
    first_container = FakeContainer()
    second_container = FakeContainer()

    first = editor.edit("printer", first_container)
    await asyncio.sleep(0)
    second = editor.edit("printer", second_container)
    await asyncio.sleep(0)

    with pytest.raises(asyncio.CancelledError):
        await first
    fetcher.gates["printer"][1].set_result(FORM)
    await second
    assert first_container.events == ["loading"]
    assert second_container.events == ["loading", "fragment", "focus"]


@pytest.mark.asyncio
async def test_edits_for_different_resources_run_independently() -> None:
    fetcher = GatedFetcher()
    editor = NoteEditor(fetcher)
    a, b = FakeContainer(), FakeContainer()
    task_a = editor.edit("a", a)
    task_b = editor.edit("b", b)
    await asyncio.sleep(0)
    fetcher.gates["b"][0].set_result(FORM)
    fetcher.gates["a"][0].set_result(FORM)
    await asyncio.gather(task_a, task_b)
    assert a.events[-1] == "focus" and b.events[-1] == "focus"


@pytest.mark.asyncio
async def test_failed_fetch_leaves_loading_placeholder() -> None:
    editor = NoteEditor(FailingFetcher())
    container = FakeContainer()
    assert await editor.edit("printer", container) is None
    assert container.events == ["loading"]


@pytest.mark.asyncio
async def test_cancel_all_and_save() -> None:
    fetcher = GatedFetcher()
    editor = NoteEditor(fetcher)
    task = editor.edit("printer", FakeContainer())
    await asyncio.sleep(0)
    editor.cancel_all()
    with pytest.raises(asyncio.CancelledError):
        await task
    assert not editor.cancel("printer")
    await editor.save("printer", "new note")
    assert fetcher.saved == [("printer", "new note")]
