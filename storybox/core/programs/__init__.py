from .story_pipeline import StoryPipeline

__all__ = ["StoryPipeline"]
