"""Terminal user interface package for lockdesk.

The Textual application lives in :mod:`lockdesk.ui_tui.app`; the modules
exported here have no Textual dependency.
"""

from __future__ import annotations

from .action_bar import ActionBarController, ButtonState, HeadlessButton
from .selection import SelectionSource, SelectionTracker, StaticSelection

__all__ = [
    "ActionBarController",
    "ButtonState",
    "HeadlessButton",
    "SelectionSource",
    "SelectionTracker",
    "StaticSelection",
]
