"""Resource snapshots and the rules gating actions on them."""

from __future__ import annotations

from .model import Resource
from .rules import ResourceStateRules

__all__ = ["Resource", "ResourceStateRules"]
