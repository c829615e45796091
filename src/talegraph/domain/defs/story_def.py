"""Story graph definition structures used by the runtime."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Mapping, Tuple, Union

from talegraph.core.types import NodeKind, TerminalKind

from .condition_def import Condition
from .effect_def import Effect

DEFAULT_START_NODE_ID = "start_selection"
DEFAULT_DEATH_MESSAGE = "You died."
DEFAULT_WIN_MESSAGE = "You won!"

# Choice and ``next`` targets that end the story when no node carries the id.
TERMINAL_TARGETS: Mapping[str, TerminalKind] = {"death": "death", "win": "win"}


@dataclass(frozen=True, slots=True)
class TextVariant:
    """One candidate text; the first variant whose condition holds is shown."""

    content: str
    condition: Condition | None = None


TextEntry = Union[str, Tuple[TextVariant, ...], None]


@dataclass(frozen=True, slots=True)
class Choice:
    """Represents a selectable edge on an interactive node."""

    text: str
    next_node_id: str
    condition: Condition | None = None
    effects: Tuple[Effect, ...] = ()
    time_cost: int = 0
    death_message: str | None = None
    win_message: str | None = None

    def terminal_message(self, kind: TerminalKind) -> str:
        """Message shown when this choice leads straight to a ``death`` or ``win`` ending."""
        if kind == "death":
            return self.death_message or DEFAULT_DEATH_MESSAGE
        return self.win_message or DEFAULT_WIN_MESSAGE


@dataclass(frozen=True, slots=True)
class ChoiceNode:
    """Interactive node offering choices, or a single direct ``next``."""

    id: str
    text: TextEntry = None
    choices: Tuple[Choice, ...] = ()
    next_node_id: str | None = None
    effects: Tuple[Effect, ...] = ()
    time_set: int | None = None
    location: str | None = None
    image: str | None = None

    kind: NodeKind = field(default="choice", init=False)


@dataclass(frozen=True, slots=True)
class InputNode:
    """Interactive node that stores player-entered text into ``variable``."""

    id: str
    text: TextEntry = None
    variable: str | None = None
    next_node_id: str | None = None
    effects: Tuple[Effect, ...] = ()
    time_set: int | None = None
    location: str | None = None
    image: str | None = None

    kind: NodeKind = field(default="input", init=False)


@dataclass(frozen=True, slots=True)
class LogicNode:
    """Non-interactive branch chosen by evaluating ``condition``."""

    id: str
    condition: Condition | None = None
    next_true: str | None = None
    next_false: str | None = None

    kind: NodeKind = field(default="logic", init=False)


@dataclass(frozen=True, slots=True)
class DeathNode:
    id: str
    message: str = DEFAULT_DEATH_MESSAGE

    kind: TerminalKind = field(default="death", init=False)


@dataclass(frozen=True, slots=True)
class WinNode:
    id: str
    message: str = DEFAULT_WIN_MESSAGE

    kind: TerminalKind = field(default="win", init=False)


InteractiveNode = Union[ChoiceNode, InputNode]
TerminalNode = Union[DeathNode, WinNode]
StoryNode = Union[ChoiceNode, InputNode, LogicNode, DeathNode, WinNode]


@dataclass(frozen=True, slots=True)
class StoryGraph:
    """Fully parsed story: start node id plus all nodes keyed by id."""

    start_node_id: str
    nodes: Mapping[str, StoryNode] = field(default_factory=dict)
    title: str | None = None

    def get(self, node_id: str) -> StoryNode | None:
        return self.nodes.get(node_id)


def iter_edges(node: StoryNode) -> Iterator[Tuple[str, str]]:
    """Yield ``(field_path, target_id)`` for every static outgoing edge."""
    if isinstance(node, LogicNode):
        if node.next_true:
            yield "nextTrue", node.next_true
        if node.next_false:
            yield "nextFalse", node.next_false
        return
    if isinstance(node, ChoiceNode):
        for index, choice in enumerate(node.choices):
            yield f"choices[{index}].next", choice.next_node_id
    if isinstance(node, (ChoiceNode, InputNode)) and node.next_node_id:
        yield "next", node.next_node_id
