"""Central definition of keyboard bindings."""
from __future__ import annotations

from textual.binding import Binding


GLOBAL_HOTKEYS = [
    Binding("r", "refresh_resources", "Refresh"),
    Binding("ctrl+l", "reload_config", "Reload Config"),
    Binding("a", "select_all", "Select All"),
    Binding("escape", "clear_selection", "Clear Selection"),
    Binding("ctrl+q", "quit", "Quit"),
]


def bindings_for_app() -> list[Binding]:
    """Return the bindings list used by :class:`~textual.app.App`."""

    return list(GLOBAL_HOTKEYS)


__all__ = ["GLOBAL_HOTKEYS", "bindings_for_app"]
