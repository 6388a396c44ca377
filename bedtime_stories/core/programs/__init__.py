"""Programs that chain the pipeline stages into a complete story run."""

from .story_pipeline import StoryPipeline

__all__ = ["StoryPipeline"]
