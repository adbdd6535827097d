"""Command line interface for lockdesk."""
