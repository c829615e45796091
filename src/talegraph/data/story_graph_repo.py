"""Loads story graph documents and parses them into typed definitions."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Tuple, cast

import jsonschema

from talegraph.data.errors import DataLoadError, DataValidationError
from talegraph.data.schema import STORY_GRAPH_SCHEMA
from talegraph.domain.defs import (
    AddItem,
    AllOf,
    AnyOf,
    Choice,
    ChoiceNode,
    Condition,
    DeathNode,
    Effect,
    HasFlag,
    HasItem,
    InputNode,
    LogicNode,
    Not,
    RemoveItem,
    Restart,
    SetFlag,
    SetValue,
    StoryGraph,
    StoryNode,
    TextEntry,
    TextVariant,
    UnknownCondition,
    UnknownEffect,
    WinNode,
)
from talegraph.domain.defs.story_def import DEFAULT_DEATH_MESSAGE, DEFAULT_WIN_MESSAGE

logger = logging.getLogger(__name__)

# Stories above this size still load, but slowly enough to be worth a warning.
LARGE_STORY_BYTES = 5 * 1024 * 1024


class StoryGraphRepository:
    """Reads one story JSON file and caches the parsed graph."""

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)
        self._graph: StoryGraph | None = None

    @property
    def path(self) -> Path:
        return self._path

    def get(self) -> StoryGraph:
        """Return the parsed graph, loading it on first use."""
        if self._graph is None:
            self._graph = parse_story_graph(self._load_raw())
        return self._graph

    def _load_raw(self) -> object:
        try:
            size = self._path.stat().st_size
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise DataLoadError(f"Story file not found: {self._path}") from exc
        except OSError as exc:
            raise DataLoadError(f"Unable to read story file: {self._path}") from exc
        if size > LARGE_STORY_BYTES:
            logger.warning("Story file %s is %d bytes; large stories may load slowly.", self._path, size)
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise DataLoadError(f"Invalid JSON in {self._path}: {exc}") from exc


def parse_story_graph(raw: object) -> StoryGraph:
    """Validate the document shape and build a :class:`StoryGraph`."""
    try:
        jsonschema.validate(raw, STORY_GRAPH_SCHEMA)
    except jsonschema.ValidationError as exc:
        location = "/".join(str(part) for part in exc.absolute_path) or "<root>"
        raise DataValidationError(f"Invalid story document at {location}: {exc.message}") from exc
    document = cast(Dict[str, Any], raw)
    nodes: Dict[str, StoryNode] = {}
    for node_id, payload in document["nodes"].items():
        nodes[node_id] = _parse_node(node_id, payload)
    title = document.get("title")
    return StoryGraph(start_node_id=document["startNode"], nodes=nodes, title=title)


def _parse_node(node_id: str, data: Mapping[str, object]) -> StoryNode:
    node_type = data.get("type") or "choice"
    if node_type == "logic":
        return LogicNode(
            id=node_id,
            condition=parse_condition(data.get("condition")),
            next_true=data.get("nextTrue") or None,
            next_false=data.get("nextFalse") or None,
        )
    if node_type == "death":
        return DeathNode(id=node_id, message=data.get("deathMessage") or DEFAULT_DEATH_MESSAGE)
    if node_type == "win":
        return WinNode(id=node_id, message=data.get("winMessage") or DEFAULT_WIN_MESSAGE)

    common = {
        "id": node_id,
        "text": _parse_text(data.get("text")),
        "next_node_id": data.get("next") or None,
        "effects": parse_effects(data.get("effects")),
        "time_set": data.get("timeSet"),
        "location": data.get("location"),
        "image": data.get("image"),
    }
    if node_type == "input":
        return InputNode(variable=data.get("variable") or None, **common)
    if node_type != "choice":
        logger.warning("Story node %r has unknown type %r; treating it as a choice node.", node_id, node_type)
    return ChoiceNode(choices=_parse_choices(data.get("choices")), **common)


def _parse_text(raw: object) -> TextEntry:
    if raw is None or isinstance(raw, str):
        return raw
    variants: List[TextVariant] = []
    for entry in raw:
        variants.append(
            TextVariant(content=entry["content"], condition=parse_condition(entry.get("condition")))
        )
    return tuple(variants)


def _parse_choices(raw: object) -> Tuple[Choice, ...]:
    if not raw:
        return ()
    choices: List[Choice] = []
    for entry in raw:
        choices.append(
            Choice(
                text=entry.get("text", ""),
                next_node_id=entry.get("next") or "",
                condition=parse_condition(entry.get("condition")),
                effects=parse_effects(entry.get("effects")),
                time_cost=entry.get("timeCost") or 0,
                death_message=entry.get("deathMessage"),
                win_message=entry.get("winMessage"),
            )
        )
    return tuple(choices)


def parse_condition(raw: object) -> Condition | None:
    """Build a condition from its JSON form; ``None`` stays ``None``."""
    if raw is None:
        return None
    if not isinstance(raw, Mapping):
        return UnknownCondition(type=repr(raw))
    condition_type = raw.get("type")
    payload = {key: value for key, value in raw.items() if key != "type"}
    if condition_type == "HAS_FLAG":
        value = raw.get("value", True)
        return HasFlag(flag=str(raw.get("flag", "")), value=True if value is None else bool(value))
    if condition_type == "HAS_ITEM":
        return HasItem(item=str(raw.get("item", "")))
    if condition_type in ("AND", "OR"):
        entries = raw.get("conditions") or []
        if not isinstance(entries, list):
            return UnknownCondition(type=str(condition_type), data=payload)
        children = tuple(child for child in (parse_condition(entry) for entry in entries) if child is not None)
        return AllOf(children) if condition_type == "AND" else AnyOf(children)
    if condition_type == "NOT":
        return Not(parse_condition(raw.get("condition")))
    return UnknownCondition(type=_type_label(condition_type), data=payload)


def parse_effects(raw: object) -> Tuple[Effect, ...]:
    if not raw or not isinstance(raw, list):
        return ()
    return tuple(parse_effect(entry) for entry in raw)


def parse_effect(raw: object) -> Effect:
    if not isinstance(raw, Mapping):
        return UnknownEffect(type=repr(raw))
    effect_type = raw.get("type")
    if effect_type == "SET_FLAG":
        value = raw.get("value", True)
        if value is None:
            value = True
        elif not isinstance(value, (bool, str)):
            value = str(value)
        return SetFlag(flag=str(raw.get("flag", "")), value=value)
    if effect_type == "ADD_ITEM":
        return AddItem(item=str(raw.get("item", "")))
    if effect_type == "REMOVE_ITEM":
        return RemoveItem(item=str(raw.get("item", "")))
    if effect_type == "SET_VALUE":
        return SetValue(property=str(raw.get("property", "")), value=raw.get("value"))
    if effect_type == "RESTART":
        return Restart()
    payload = {key: value for key, value in raw.items() if key != "type"}
    return UnknownEffect(type=_type_label(effect_type), data=payload)


def _type_label(tag: object) -> str:
    return "<missing type>" if tag is None else str(tag)
