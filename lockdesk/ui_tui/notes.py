"""Inline note editing for a resource row.

The server renders the note editor as an HTML fragment. :class:`NoteEditor`
fetches it, hands the parsed form to the row's note container and focuses
the first text field. Fetches run as one asyncio task per resource; starting
a new edit for a resource cancels the one still in flight, so the most
recent request always wins.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from functools import partial
from typing import Callable, Dict, List, Optional, Protocol, Tuple

from bs4 import BeautifulSoup
from bs4.element import Tag

from lockdesk.utils.errors import IntegrationError
from lockdesk.utils.logging import get_logger

logger = get_logger(__name__)

LOADING_TEXT = "loading..."


@dataclass(frozen=True)
class NoteInput:
    """A text control found in the note form."""

    name: str
    value: str
    multiline: bool


@dataclass
class NoteFragment:
    markup: str
    inputs: List[NoteInput] = field(default_factory=list)
    scripts: List[str] = field(default_factory=list)
    soup: Optional[BeautifulSoup] = field(default=None, repr=False)

    @property
    def first_text_input(self) -> Optional[NoteInput]:
        return self.inputs[0] if self.inputs else None

    @classmethod
    def parse(cls, markup: str) -> "NoteFragment":
        soup = BeautifulSoup(markup, "html.parser")
        inputs: List[NoteInput] = []
        for element in soup.find_all(["textarea", "input"]):
            if element.name == "textarea":
                inputs.append(NoteInput(element.get("name", ""), element.get_text(), True))
            elif element.get("type", "text").lower() == "text":
                inputs.append(NoteInput(element.get("name", ""), element.get("value", ""), False))
        scripts = [script.get_text() for script in soup.find_all("script") if script.get_text().strip()]
        return cls(markup=markup, inputs=inputs, scripts=scripts, soup=soup)


class NoteContainer(Protocol):
    """The per-row area the note form is rendered into."""

    def show_loading(self) -> None: ...  # pragma: no cover - structural

    def show_fragment(self, fragment: NoteFragment) -> None: ...  # pragma: no cover - structural

    def focus_first_text_input(self) -> bool: ...  # pragma: no cover - structural


class NoteFormFetcher(Protocol):
    async def fetch_note_form(self, resource_name: str) -> str: ...  # pragma: no cover - structural

    async def save_note(self, resource_name: str, note: str) -> None: ...  # pragma: no cover - structural


Behaviour = Callable[[NoteContainer, Tag], None]
ScriptRunner = Callable[[str, str], None]


class BehaviourRegistry:
    """Callbacks bound to CSS selectors, re-applied to every rendered form."""

    def __init__(self) -> None:
        self._rules: List[Tuple[str, Behaviour]] = []

    def register(self, selector: str, behaviour: Behaviour) -> None:
        self._rules.append((selector, behaviour))

    def apply(self, container: NoteContainer, fragment: NoteFragment) -> int:
        if fragment.soup is None:
            return 0
        applied = 0
        for selector, behaviour in self._rules:
            for element in fragment.soup.select(selector):
                behaviour(container, element)
                applied += 1
        return applied


def _skip_script(resource_name: str, source: str) -> None:
    logger.debug("inline script skipped (%d chars)", len(source), extra={"resource": resource_name})


class NoteEditor:
    def __init__(
        self,
        fetcher: NoteFormFetcher,
        *,
        behaviours: Optional[BehaviourRegistry] = None,
        script_runner: Optional[ScriptRunner] = None,
    ) -> None:
        self._fetcher = fetcher
        self.behaviours = behaviours or BehaviourRegistry()
        self._run_script = script_runner or _skip_script
        self._tasks: Dict[str, asyncio.Task[Optional[NoteFragment]]] = {}

    def edit(self, resource_name: str, container: NoteContainer) -> asyncio.Task[Optional[NoteFragment]]:
        """Start loading the note form of ``resource_name`` into ``container``."""

        self.cancel(resource_name)
        container.show_loading()
        task = asyncio.create_task(
            self._load(resource_name, container), name=f"note-form:{resource_name}"
        )
        self._tasks[resource_name] = task
        task.add_done_callback(partial(self._finished, resource_name))
        return task

    def pending(self, resource_name: str) -> bool:
        task = self._tasks.get(resource_name)
        return task is not None and not task.done()

    def cancel(self, resource_name: str) -> bool:
        task = self._tasks.pop(resource_name, None)
        if task is None or task.done():
            return False
        task.cancel()
        logger.debug("note form request cancelled", extra={"resource": resource_name})
        return True

    def cancel_all(self) -> None:
        for name in list(self._tasks):
            self.cancel(name)

    async def save(self, resource_name: str, note: str) -> None:
        await self._fetcher.save_note(resource_name, note)

    def _finished(self, resource_name: str, task: asyncio.Task[Optional[NoteFragment]]) -> None:
        if self._tasks.get(resource_name) is task:
            del self._tasks[resource_name]

    async def _load(self, resource_name: str, container: NoteContainer) -> Optional[NoteFragment]:
        try:
            markup = await self._fetcher.fetch_note_form(resource_name)
        except IntegrationError as exc:
            # The placeholder stays; there is no retry.
            logger.warning("note form could not be loaded: %s", exc, extra={"resource": resource_name})
            return None
        fragment = NoteFragment.parse(markup)
        container.show_fragment(fragment)
        for script in fragment.scripts:
            self._run_script(resource_name, script)
        self.behaviours.apply(container, fragment)
        if not container.focus_first_text_input():
            logger.debug("note form has no text input", extra={"resource": resource_name})
        return fragment


__all__ = [
    "BehaviourRegistry",
    "LOADING_TEXT",
    "NoteContainer",
    "NoteEditor",
    "NoteFormFetcher",
    "NoteFragment",
    "NoteInput",
]
