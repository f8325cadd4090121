"""
Image generation configuration for the story pipeline.

Images are requested one page at a time. The provider sometimes answers a
burst of requests with an empty payload, so every page gets a bounded
number of attempts with a growing delay between them.
"""

# Image generation constants
IMAGE_CONSTANTS = {
    "max_attempts": 3,
    "inter_request_delay": 2.0,  # Seconds between pages (skipped before the first)
    "retry_base_delay": 2.0,  # Backoff grows by this much per failed attempt
    "prompt_excerpt_length": 100,
}

IMAGE_PROMPT_TEMPLATE = (
    "Professional children's book illustration, vibrant fantasy art. "
    "Main character {main_character} (same appearance throughout) in {location}. "
    "Scene: {scene}. "
    "IMPORTANT: NO book pages, NO text overlays, NO page borders, pure scene illustration only. "
    "Consistent character design."
)


def image_backoff(attempt: int, base_delay: float = IMAGE_CONSTANTS["retry_base_delay"]) -> float:
    """
    Delay before the next image attempt.

    Args:
        attempt: The attempt that just failed (1-based)
        base_delay: Seconds added per failed attempt

    Returns:
        Seconds to wait (2s after the first failure, 4s after the second, ...)
    """
    return attempt * base_delay


def wait_image_backoff(base_delay: float = IMAGE_CONSTANTS["retry_base_delay"]):
    """Tenacity wait strategy built on image_backoff."""

    def _wait(retry_state) -> float:
        return image_backoff(retry_state.attempt_number, base_delay)

    return _wait
