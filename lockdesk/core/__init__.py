"""Core runtime pieces: configuration."""
