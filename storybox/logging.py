"""Structured logging infrastructure.

Provides JSON-formatted logging for production and human-readable
logging for development, plus a StoryLogger helper for generation run events.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Optional

# Extra record attributes copied into JSON output when present
STRUCTURED_FIELDS = (
    "run_id",
    "stage",
    "duration",
    "attempt",
    "page_number",
    "media",
    "error_type",
    "pages",
    "images",
    "audio",
)


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for name in STRUCTURED_FIELDS:
            if hasattr(record, name):
                log_data[name] = getattr(record, name)

        # Add exception info if present
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data)


def configure_logging(json_format: bool = True, level: int = logging.INFO) -> None:
    """Configure structured logging for the application."""
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    if json_format:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )

    root_logger.addHandler(handler)


class StoryLogger:
    """Logger for generation run events with structured fields."""

    def __init__(self):
        self.logger = logging.getLogger("story_generation")

    def generation_started(self, run_id: str, length: str) -> None:
        self.logger.info(
            "Story generation started",
            extra={"run_id": run_id, "stage": "started", "length": length},
        )

    def stage_completed(self, run_id: str, stage: str, duration: Optional[float] = None) -> None:
        extra = {"run_id": run_id, "stage": stage}
        if duration:
            extra["duration"] = round(duration, 2)
        self.logger.info(f"Stage completed: {stage}", extra=extra)

    def generation_completed(
        self,
        run_id: str,
        duration: float,
        pages: int,
        images: int,
        audio: int,
    ) -> None:
        self.logger.info(
            f"Story generation completed: {pages} pages, {images} images, {audio} audio",
            extra={
                "run_id": run_id,
                "stage": "completed",
                "duration": round(duration, 2),
                "pages": pages,
                "images": images,
                "audio": audio,
            },
        )

    def generation_failed(self, run_id: str, error: Exception, stage: Optional[str] = None) -> None:
        extra = {"run_id": run_id, "stage": "failed", "error_type": type(error).__name__}
        if stage:
            extra["failed_at_stage"] = stage
        self.logger.error(f"Story generation failed: {error}", extra=extra, exc_info=error)

    def generation_cancelled(self, run_id: str) -> None:
        self.logger.info("Story generation cancelled", extra={"run_id": run_id, "stage": "cancelled"})

    def retry_attempt(self, run_id: str, attempt: int, reason: str) -> None:
        self.logger.warning(
            f"Retry attempt {attempt}: {reason}",
            extra={"run_id": run_id, "attempt": attempt},
        )

    def media_degraded(self, run_id: str, media: str, page_number: int, reason: str) -> None:
        """A page will be delivered without its image or audio."""
        self.logger.warning(
            f"{media.capitalize()} {page_number}: {reason}",
            extra={"run_id": run_id, "media": media, "page_number": page_number},
        )


# Global story logger instance
story_logger = StoryLogger()
