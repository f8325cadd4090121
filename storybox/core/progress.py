"""Progress bands and step labels for story generation."""

from typing import Optional

from .state import GenerationStatus

# Stage weight mapping for percentage calculation
STAGE_WEIGHTS = {
    GenerationStatus.GENERATING_TEXT: (5, 15),
    GenerationStatus.GENERATING_IMAGES: (15, 55),
    GenerationStatus.GENERATING_AUDIO: (60, 90),
    GenerationStatus.FINALIZING: (95, 99),
}

STEP_LABELS = {
    "text": "Creating a new world...",
    "images": "Bringing the characters to life...",
    "images_done": "The voices are starting to be heard...",
    "audio": "Turning the story into sound...",
    "finalizing": "Finishing the story...",
    "complete": "Your story is ready!",
}


def calculate_percentage(
    status: GenerationStatus,
    completed: Optional[int] = None,
    total: Optional[int] = None,
) -> int:
    """Calculate weighted percentage based on stage and progress."""
    if status == GenerationStatus.COMPLETE:
        return 100
    if status not in STAGE_WEIGHTS:
        return 0

    start_pct, end_pct = STAGE_WEIGHTS[status]

    # If we have granular counters, interpolate within stage
    if completed is not None and total is not None and total > 0:
        progress = min(completed, total) / total
        return int(start_pct + (end_pct - start_pct) * progress)

    # Otherwise, just use stage start
    return start_pct
