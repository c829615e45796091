"""Service-layer exceptions."""
from __future__ import annotations

from typing import Sequence


class StoryError(Exception):
    """Base class for failures while resolving a scene."""

    code = "STORY_ERROR"

    def __init__(self, message: str, node_id: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.node_id = node_id


class SceneNotFoundError(StoryError):
    """Raised when a requested or linked node id is absent from the graph."""

    code = "SCENE_NOT_FOUND"

    def __init__(self, node_id: str, referenced_by: str | None = None) -> None:
        if referenced_by:
            message = f"Scene '{node_id}' (linked from '{referenced_by}') not found."
        else:
            message = f"Scene '{node_id}' not found."
        super().__init__(message, node_id)
        self.referenced_by = referenced_by


class DanglingLogicBranchError(StoryError):
    """Raised when a logic node has no target for the branch it selected."""

    code = "DANGLING_LOGIC_BRANCH"

    def __init__(self, node_id: str, branch: bool) -> None:
        field_name = "nextTrue" if branch else "nextFalse"
        super().__init__(f"Logic node '{node_id}' has no {field_name} target.", node_id)
        self.branch = branch


class LogicCycleDetectedError(StoryError):
    """Raised when logic nodes lead back to a node already visited in this pass."""

    code = "LOGIC_CYCLE_DETECTED"

    def __init__(self, node_id: str, path: Sequence[str]) -> None:
        cycle_path = " -> ".join([*path, node_id])
        super().__init__(f"Logic cycle detected: {cycle_path}.", node_id)
        self.path = tuple(path)
