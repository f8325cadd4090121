"""Pydantic models for API requests."""

from typing import Literal, Optional

from pydantic import BaseModel, Field

from storybox.core.types import StoryGenerationParams, StoryLength


class StartGenerationRequest(BaseModel):
    """Request body for starting a story generation."""

    prompt: str = Field(
        ...,
        min_length=1,
        max_length=5000,
        description="Free-text story prompt",
        examples=["A shy dragon learns to make friends"],
    )
    length: StoryLength = Field(
        default=StoryLength.SHORT,
        description="Story length; selects the number of pages",
    )
    main_character: str = Field(default="", max_length=500, description="Main character description")
    location: str = Field(default="", max_length=500)
    theme: str = Field(default="", max_length=100)
    topic: str = Field(default="", max_length=200, description="Used as the story title")
    language: Optional[Literal["en", "tr"]] = Field(
        default=None,
        description="Story language (defaults to STORY_LANGUAGE)",
    )

    def to_params(self) -> StoryGenerationParams:
        return StoryGenerationParams(
            prompt=self.prompt,
            length=self.length,
            main_character=self.main_character,
            location=self.location,
            theme=self.theme,
            topic=self.topic,
        )
