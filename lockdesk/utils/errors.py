"""Custom exceptions used across lockdesk."""
from __future__ import annotations

from typing import Optional


class LockDeskError(Exception):
    """Base exception for all lockdesk-specific errors."""


class ConfigurationError(LockDeskError):
    """Raised when configuration loading or validation fails."""


class IntegrationError(LockDeskError):
    """Raised when the lockable resources server cannot be reached or answers badly."""


class ActionSubmissionError(IntegrationError):
    """Raised when an action request is rejected by the server."""

    def __init__(self, action: str, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(f"{action}: {message}")
        self.action = action
        self.status_code = status_code


__all__ = [
    "LockDeskError",
    "ConfigurationError",
    "IntegrationError",
    "ActionSubmissionError",
]
