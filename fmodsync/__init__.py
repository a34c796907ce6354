"""Sync FMOD Studio event exports into an Obsidian vault."""

__version__ = "0.3.0"
