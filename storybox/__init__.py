"""Storybox: illustrated, narrated children's story generation."""

__version__ = "0.1.0"
