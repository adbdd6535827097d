"""Selection tracking for the resources table."""

from __future__ import annotations

from typing import Dict, List, Optional, Protocol, Sequence

from lockdesk.resources.model import Resource
from lockdesk.utils.logging import get_logger

logger = get_logger(__name__)


class SelectionSource(Protocol):
    """Anything that can report which resource rows are checked."""

    def list_checked_resource_names(self) -> Sequence[str]: ...  # pragma: no cover - structural

    def clear_checked(self) -> None: ...  # pragma: no cover - structural


class SelectionTracker:
    """Read the current selection and cache the last snapshot of every row.

    The selection itself is never stored: it is read from the source each time
    so it always matches what the user sees.
    """

    def __init__(self, source: Optional[SelectionSource] = None) -> None:
        self._source = source
        self._snapshots: Dict[str, Resource] = {}

    def attach(self, source: Optional[SelectionSource]) -> None:
        self._source = source

    def current_selection(self) -> List[str]:
        """Return the checked resource names in row order."""

        if self._source is None:
            logger.debug("selection requested without a table")
            return []
        try:
            names = self._source.list_checked_resource_names()
        except LookupError:
            logger.debug("resources table is not available", exc_info=True)
            return []
        return list(dict.fromkeys(names))

    def record_resource(self, snapshot: Resource) -> None:
        self._snapshots[snapshot.name] = snapshot

    def snapshot(self, name: str) -> Optional[Resource]:
        return self._snapshots.get(name)

    def forget(self, name: str) -> None:
        self._snapshots.pop(name, None)

    def selected_resources(self) -> List[Resource]:
        """Cached snapshots of the checked rows.

        Checked rows without a snapshot are skipped here but still count as
        selected in :meth:`current_selection`.
        """

        selected = []
        for name in self.current_selection():
            snapshot = self._snapshots.get(name)
            if snapshot is not None:
                selected.append(snapshot)
        return selected

    def clear_selection(self) -> None:
        if self._source is None:
            return
        try:
            self._source.clear_checked()
        except LookupError:
            logger.debug("resources table is not available", exc_info=True)


class StaticSelection:
    """Fixed selection, used by the CLI and for headless evaluation."""

    def __init__(self, names: Sequence[str] = ()) -> None:
        self.names: List[str] = list(names)

    def list_checked_resource_names(self) -> Sequence[str]:
        return list(self.names)

    def clear_checked(self) -> None:
        self.names.clear()


__all__ = ["SelectionSource", "SelectionTracker", "StaticSelection"]
