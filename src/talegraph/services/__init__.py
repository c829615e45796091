"""Service layer exports."""

from .condition_evaluator import evaluate, visible_choices
from .effect_executor import EffectOutcome, apply_effects
from .errors import DanglingLogicBranchError, LogicCycleDetectedError, SceneNotFoundError, StoryError
from .events import (
    FlagSetEvent,
    InventoryChangedEvent,
    MalformedEffectEvent,
    RestartRequestedEvent,
    StoryEvent,
    ValueSetEvent,
)
from .reveal_engine import RevealEngine, RevealHandle, reveal_frames
from .scene_resolver import InteractiveScene, ResolutionFailure, TerminalScene, resolve_from
from .story_graph_validator import Issue, ValidationReport, format_issue, validate
from .story_service import ChoiceResult, SceneView, StoryService, StorySession
from .text_resolver import resolve_text, substitute_variables

__all__ = [
    "ChoiceResult",
    "DanglingLogicBranchError",
    "EffectOutcome",
    "FlagSetEvent",
    "InteractiveScene",
    "InventoryChangedEvent",
    "Issue",
    "LogicCycleDetectedError",
    "MalformedEffectEvent",
    "ResolutionFailure",
    "RestartRequestedEvent",
    "RevealEngine",
    "RevealHandle",
    "SceneNotFoundError",
    "SceneView",
    "StoryError",
    "StoryEvent",
    "StoryService",
    "StorySession",
    "TerminalScene",
    "ValidationReport",
    "ValueSetEvent",
    "apply_effects",
    "evaluate",
    "format_issue",
    "resolve_from",
    "resolve_text",
    "reveal_frames",
    "substitute_variables",
    "validate",
    "visible_choices",
]
