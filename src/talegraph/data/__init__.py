"""Data layer utilities for loading story graph documents."""

from .errors import DataError, DataLoadError, DataValidationError
from .story_graph_repo import StoryGraphRepository, parse_condition, parse_effects, parse_story_graph

__all__ = [
    "DataError",
    "DataLoadError",
    "DataValidationError",
    "StoryGraphRepository",
    "parse_condition",
    "parse_effects",
    "parse_story_graph",
]
