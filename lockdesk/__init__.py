"""lockdesk: action bar and batch actions for shared lockable resources."""

from __future__ import annotations

__version__ = "0.1.0"
