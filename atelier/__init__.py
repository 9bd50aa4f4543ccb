"""Offline order store for a tailoring workshop (SQLite)."""

__version__ = "0.1.0"
