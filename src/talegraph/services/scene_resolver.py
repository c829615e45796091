"""Scene resolution: follows logic nodes to the next interactive or terminal scene."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Tuple, Union

from talegraph.core.types import TerminalKind
from talegraph.domain.defs import (
    DeathNode,
    InteractiveNode,
    LogicNode,
    StoryGraph,
    WinNode,
)
from talegraph.domain.state import GameState
from talegraph.services.condition_evaluator import evaluate
from talegraph.services.effect_executor import apply_effects
from talegraph.services.errors import (
    DanglingLogicBranchError,
    LogicCycleDetectedError,
    SceneNotFoundError,
    StoryError,
)
from talegraph.services.events import StoryEvent, StoryEventListener

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class InteractiveScene:
    """Resolution stopped on a node that waits for the player."""

    node_id: str
    node: InteractiveNode
    path: Tuple[str, ...] = ()
    events: Tuple[StoryEvent, ...] = ()
    restart_requested: bool = False


@dataclass(frozen=True, slots=True)
class TerminalScene:
    """Resolution reached a death or win node."""

    node_id: str
    kind: TerminalKind
    message: str
    path: Tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class ResolutionFailure:
    """Resolution could not complete; the session decides how to recover."""

    error: StoryError
    path: Tuple[str, ...] = field(default=())

    @property
    def code(self) -> str:
        return self.error.code

    @property
    def message(self) -> str:
        return self.error.message


Resolution = Union[InteractiveScene, TerminalScene, ResolutionFailure]


def resolve_from(
    graph: StoryGraph,
    state: GameState,
    node_id: str,
    *,
    listener: StoryEventListener | None = None,
) -> Resolution:
    """Resolve ``node_id`` to the scene the player should see next.

    Logic nodes are followed automatically. On reaching an interactive node the
    state's ``current_scene`` is advanced and the node's entry effects are
    applied. Errors are returned as :class:`ResolutionFailure`, never raised.
    """
    path: List[str] = []
    try:
        return _resolve(graph, state, node_id, path, listener)
    except StoryError as exc:
        logger.warning("Scene resolution from %r failed: %s", node_id, exc.message)
        return ResolutionFailure(error=exc, path=tuple(path))


def _resolve(
    graph: StoryGraph,
    state: GameState,
    node_id: str,
    path: List[str],
    listener: StoryEventListener | None,
) -> Resolution:
    visited: set[str] = set()
    current_id = node_id
    referenced_by: str | None = None
    while True:
        node = graph.get(current_id)
        if node is None:
            raise SceneNotFoundError(current_id, referenced_by)
        if current_id in visited:
            raise LogicCycleDetectedError(current_id, path)
        visited.add(current_id)
        path.append(current_id)

        if isinstance(node, LogicNode):
            branch = evaluate(node.condition, state)
            target = node.next_true if branch else node.next_false
            logger.debug("Logic node %r evaluated %s -> %r.", current_id, branch, target)
            if not target:
                raise DanglingLogicBranchError(current_id, branch)
            referenced_by = current_id
            current_id = target
            continue
        if isinstance(node, (DeathNode, WinNode)):
            return TerminalScene(node_id=current_id, kind=node.kind, message=node.message, path=tuple(path))
        return _enter_interactive(node, state, tuple(path), listener)


def _enter_interactive(
    node: InteractiveNode,
    state: GameState,
    path: Tuple[str, ...],
    listener: StoryEventListener | None,
) -> InteractiveScene:
    state.current_scene = node.id
    if node.time_set is not None:
        state.time_minutes = node.time_set
    outcome = apply_effects(node.effects, state, listener=listener)
    logger.debug("Entered scene %r via %s.", node.id, " -> ".join(path))
    return InteractiveScene(
        node_id=node.id,
        node=node,
        path=path,
        events=tuple(outcome.events),
        restart_requested=outcome.restart_requested,
    )
