import json
from pathlib import Path

import pytest

from talegraph.data import DataLoadError, DataValidationError, StoryGraphRepository, parse_story_graph
from talegraph.data.story_graph_repo import parse_condition, parse_effect
from talegraph.domain.defs import (
    AllOf,
    ChoiceNode,
    DeathNode,
    HasFlag,
    InputNode,
    LogicNode,
    Not,
    SetFlag,
    SetValue,
    TextVariant,
    UnknownCondition,
    UnknownEffect,
    WinNode,
)
from talegraph.services.story_graph_validator import validate


def _write_json(path: Path, payload: object) -> Path:
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_repository_parses_every_node_kind(tmp_path: Path) -> None:
    story_path = _write_json(
        tmp_path / "story.json",
        {
            "title": "Test",
            "startNode": "ask",
            "nodes": {
                "ask": {"type": "input", "text": "Name?", "variable": "playerName", "next": "hub", "timeSet": 600},
                "hub": {
                    "type": "choice",
                    "text": [{"content": "Lit", "condition": {"type": "HAS_FLAG", "flag": "lit"}}, {"content": "Dark"}],
                    "location": "Hall",
                    "image": "hall.png",
                    "choices": [{"text": "Check", "next": "gate", "timeCost": 5}],
                    "_editor": {"x": 10, "y": 20},
                },
                "gate": {"type": "logic", "condition": None, "nextTrue": "won", "nextFalse": "dead"},
                "won": {"type": "win"},
                "dead": {"type": "death", "deathMessage": "Gone."},
            },
        },
    )

    graph = StoryGraphRepository(story_path).get()

    assert graph.title == "Test"
    assert graph.start_node_id == "ask"
    ask = graph.nodes["ask"]
    assert isinstance(ask, InputNode)
    assert ask.variable == "playerName"
    assert ask.time_set == 600
    hub = graph.nodes["hub"]
    assert isinstance(hub, ChoiceNode)
    assert hub.text == (TextVariant("Lit", HasFlag("lit")), TextVariant("Dark"))
    assert hub.choices[0].time_cost == 5
    assert hub.image == "hall.png"
    assert isinstance(graph.nodes["gate"], LogicNode)
    assert graph.nodes["gate"].condition is None
    assert graph.nodes["won"] == WinNode("won")
    assert graph.nodes["dead"] == DeathNode("dead", message="Gone.")


def test_repository_caches_parsed_graph(tmp_path: Path) -> None:
    story_path = _write_json(tmp_path / "story.json", {"startNode": "a", "nodes": {"a": {"type": "win"}}})
    repo = StoryGraphRepository(story_path)
    assert repo.get() is repo.get()


def test_missing_file_raises_load_error(tmp_path: Path) -> None:
    with pytest.raises(DataLoadError, match="not found"):
        StoryGraphRepository(tmp_path / "missing.json").get()


def test_invalid_json_raises_load_error(tmp_path: Path) -> None:
    story_path = tmp_path / "broken.json"
    story_path.write_text("{not json", encoding="utf-8")
    with pytest.raises(DataLoadError, match="Invalid JSON"):
        StoryGraphRepository(story_path).get()


@pytest.mark.parametrize(
    "document",
    [
        {"nodes": {}},
        {"startNode": "a"},
        {"startNode": "a", "nodes": []},
        {"startNode": "a", "nodes": {"a": {"type": "choice", "choices": [{"text": "x", "effects": "oops"}]}}},
    ],
)
def test_malformed_documents_raise_validation_error(document: object) -> None:
    with pytest.raises(DataValidationError, match="Invalid story document"):
        parse_story_graph(document)


def test_unknown_node_type_becomes_choice_node(caplog) -> None:
    graph = parse_story_graph({"startNode": "a", "nodes": {"a": {"type": "cutscene", "next": "a"}}})
    assert isinstance(graph.nodes["a"], ChoiceNode)
    assert "unknown type" in caplog.text


def test_parse_condition_handles_nesting_and_unknown_types() -> None:
    condition = parse_condition(
        {
            "type": "AND",
            "conditions": [
                {"type": "NOT", "condition": {"type": "HAS_FLAG", "flag": "a", "value": False}},
                {"type": "HAS_GOLD", "amount": 3},
            ],
        }
    )
    assert condition == AllOf((Not(HasFlag("a", value=False)), UnknownCondition("HAS_GOLD")))
    assert parse_condition({"type": "NOT"}) == Not(None)


def test_parse_effect_keeps_values_and_unknown_types() -> None:
    assert parse_effect({"type": "SET_FLAG", "flag": "door"}) == SetFlag("door", True)
    assert parse_effect({"type": "SET_FLAG", "flag": "door", "value": "open"}) == SetFlag("door", "open")
    assert parse_effect({"type": "SET_VALUE", "property": "dayIndex", "value": 2}) == SetValue("dayIndex", 2)
    assert parse_effect({"type": "PLAY_SOUND", "file": "x.ogg"}) == UnknownEffect("PLAY_SOUND")


def test_malformed_conditions_and_effects_load_as_unknown() -> None:
    graph = parse_story_graph(
        {
            "startNode": "a",
            "nodes": {
                "a": {
                    "type": "choice",
                    "text": "Hall",
                    "effects": [
                        {"item": "Lamp"},
                        "oops",
                        {"type": "SET_VALUE", "property": "timeMinutes", "value": {"h": 1}},
                    ],
                    "choices": [
                        {"text": "Open", "next": "b", "condition": {"flag": "door"}},
                        {"text": "Wait", "next": "b", "condition": 3},
                    ],
                },
                "b": {"type": "win"},
            },
        }
    )

    hall = graph.nodes["a"]
    assert isinstance(hall, ChoiceNode)
    assert hall.effects == (
        UnknownEffect("<missing type>"),
        UnknownEffect("'oops'"),
        SetValue("timeMinutes", {"h": 1}),
    )
    assert hall.choices[0].condition == UnknownCondition("<missing type>")
    assert hall.choices[1].condition == UnknownCondition("3")

    report = validate(graph)
    assert [issue.code for issue in report.warnings].count("MALFORMED_CONDITION") == 2
    assert [issue.code for issue in report.warnings].count("MALFORMED_EFFECT") == 3


def test_choice_terminal_messages_are_parsed() -> None:
    graph = parse_story_graph(
        {
            "startNode": "a",
            "nodes": {
                "a": {
                    "text": "Cliff",
                    "choices": [
                        {"text": "Jump", "next": "death", "deathMessage": "You fall."},
                        {"text": "Fly", "next": "win", "winMessage": "You soar."},
                    ],
                }
            },
        }
    )

    jump, fly = graph.nodes["a"].choices
    assert jump.death_message == "You fall."
    assert jump.terminal_message("death") == "You fall."
    assert fly.win_message == "You soar."
    assert jump.terminal_message("win") == "You won!"
