"""FastAPI application for Storybox."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from storybox.logging import configure_logging
from .config import CORS_ORIGINS, JSON_LOGS, LOG_LEVEL
from .routes import generation, media
from .services.generation_manager import generation_manager

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown."""
    configure_logging(json_format=JSON_LOGS, level=LOG_LEVEL)
    logger.info("Storybox API started")

    yield

    # Shutdown: cancel running generations
    await generation_manager.shutdown()


app = FastAPI(
    title="Storybox API",
    description="""
Generate illustrated, narrated bedtime stories.

## Workflow
1. POST `/generations` with a prompt, length, characters and topic
2. Poll GET `/generations/current` until status is `complete` or `error`
3. Pages carry `image_url` and `audio_url`; either may be missing if that media failed
4. DELETE `/generations/current` to cancel and return to idle
    """,
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware for web frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(generation.router, prefix="/generations", tags=["Generations"])
app.include_router(media.router, prefix="/media", tags=["Media"])


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
