"""Shared helpers for lockdesk."""
