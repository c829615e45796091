"""Domain definition exports."""

from .condition_def import AllOf, AnyOf, Condition, HasFlag, HasItem, Not, UnknownCondition
from .effect_def import (
    SETTABLE_PROPERTIES,
    AddItem,
    Effect,
    RemoveItem,
    Restart,
    SetFlag,
    SetValue,
    UnknownEffect,
    set_value_problem,
)
from .story_def import (
    Choice,
    ChoiceNode,
    DeathNode,
    InputNode,
    InteractiveNode,
    LogicNode,
    StoryGraph,
    StoryNode,
    TerminalNode,
    TERMINAL_TARGETS,
    TextEntry,
    TextVariant,
    WinNode,
    iter_edges,
)

__all__ = [
    "SETTABLE_PROPERTIES",
    "AddItem",
    "AllOf",
    "AnyOf",
    "Choice",
    "ChoiceNode",
    "Condition",
    "DeathNode",
    "Effect",
    "HasFlag",
    "HasItem",
    "InputNode",
    "InteractiveNode",
    "LogicNode",
    "Not",
    "RemoveItem",
    "Restart",
    "SetFlag",
    "SetValue",
    "StoryGraph",
    "StoryNode",
    "TerminalNode",
    "TERMINAL_TARGETS",
    "TextEntry",
    "TextVariant",
    "UnknownCondition",
    "UnknownEffect",
    "WinNode",
    "iter_edges",
    "set_value_problem",
]
