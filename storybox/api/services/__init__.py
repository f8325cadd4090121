"""Services for story generation."""

from .generation_manager import GenerationInProgressError, GenerationManager

__all__ = ["GenerationInProgressError", "GenerationManager"]
