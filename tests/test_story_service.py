import pytest

from talegraph.data import StoryGraphRepository
from talegraph.domain.defs import (
    Choice,
    InputNode,
    LogicNode,
    Restart,
    SetFlag,
    WinNode,
)
from talegraph.services.events import FlagSetEvent, InventoryChangedEvent, RestartRequestedEvent
from talegraph.services.story_service import CONTINUE_LABEL, StoryService
from tests.helpers.story_graphs import LIGHTHOUSE_STORY, make_graph, scene


def _lighthouse_service(**kwargs) -> StoryService:
    return StoryService(StoryGraphRepository(LIGHTHOUSE_STORY).get(), **kwargs)


def test_new_game_starts_at_name_prompt() -> None:
    service = _lighthouse_service()
    session = service.start_new_game()
    view = service.get_current_view(session)

    assert view.node_id == "start_selection"
    assert view.awaiting_input is True
    assert view.choices == []
    assert view.status == "Mo 20:00"
    assert session.state.player_name == "Player"


def test_lighthouse_walkthrough_reaches_win() -> None:
    received = []
    service = _lighthouse_service(listener=received.append)
    session = service.start_new_game()

    result = service.submit_input(session, "  Ada ")
    assert session.state.player_name == "Ada"
    assert result.node_view.node_id == "harbour"
    assert result.node_view.text.startswith("Rain hammers the harbour, Ada.")
    assert result.node_view.choices[0] == "Search the boathouse"

    service.choose(session, 0)
    result = service.choose(session, 0)
    assert session.state.inventory == ["Oil Lamp"]
    assert InventoryChangedEvent(item="Oil Lamp", action="added", inventory=("Oil Lamp",)) in result.events
    assert "Search the boathouse" not in result.node_view.choices
    assert result.node_view.text.startswith("Back at the harbour, Ada.")

    result = service.choose(session, 0)
    assert result.node_view.node_id == "lighthouse_door"
    assert result.node_view.status == "Mo 20:45"

    result = service.choose(session, 0)
    assert result.node_view.text.startswith("You came in by the window.")

    result = service.choose(session, 0)
    assert result.node_view.terminal == "win"
    assert result.node_view.text.endswith("Well done, Ada.")
    assert session.finished
    assert FlagSetEvent(flag="entered_by", value="window") in received


def test_cliff_without_lamp_is_fatal() -> None:
    service = _lighthouse_service()
    session = service.start_new_game()
    service.submit_input(session, "Ada")

    result = service.choose(session, 1)

    assert result.node_view.terminal == "death"
    assert result.node_view.text == "In the dark you miss the edge of the path. The sea takes Ada."
    with pytest.raises(ValueError):
        service.choose(session, 0)


def test_waiting_changes_day_and_offers_continue() -> None:
    service = _lighthouse_service()
    session = service.start_new_game()
    service.submit_input(session, "Ada")

    result = service.choose(session, 2)

    assert result.node_view.node_id == "wait_out"
    assert result.node_view.choices == [CONTINUE_LABEL]
    assert result.node_view.status == "Tu 06:00"
    result = service.choose(session, 0)
    assert result.node_view.node_id == "harbour"


def test_restart_resets_session() -> None:
    service = _lighthouse_service()
    session = service.start_new_game()
    service.submit_input(session, "Ada")
    service.choose(session, 0)
    service.choose(session, 0)

    service.restart(session)

    assert session.state.inventory == []
    assert session.state.flags == {}
    assert service.get_current_view(session).node_id == "start_selection"


def test_invalid_choice_indexes_raise() -> None:
    service = _lighthouse_service()
    session = service.start_new_game()
    with pytest.raises(ValueError):
        service.choose(session, 0)

    service.submit_input(session, "Ada")
    with pytest.raises(IndexError):
        service.choose(session, 3)
    with pytest.raises(IndexError):
        service.choose(session, -1)
    with pytest.raises(ValueError):
        service.submit_input(session, "Bob")


def test_empty_input_is_rejected() -> None:
    service = _lighthouse_service()
    session = service.start_new_game()
    with pytest.raises(ValueError):
        service.submit_input(session, "   ")
    assert session.state.player_name == "Player"


def test_input_into_flag_variable() -> None:
    graph = make_graph(
        InputNode("ask", text="Name your dog.", variable="flags.dog", next_node_id="park"),
        scene("park", text="{flags.dog} runs ahead.", next_node_id="park"),
    )
    service = StoryService(graph)
    session = service.start_new_game()

    result = service.submit_input(session, "Biscuit")

    assert session.state.flags["dog"] == "Biscuit"
    assert result.node_view.text == "Biscuit runs ahead."


def test_restart_effect_on_choice_starts_over() -> None:
    graph = make_graph(
        scene("start", choices=(Choice("Try again", "end", effects=(SetFlag("tried"), Restart())),)),
        WinNode("end"),
    )
    service = StoryService(graph)
    session = service.start_new_game()

    result = service.choose(session, 0)

    assert result.restarted is True
    assert RestartRequestedEvent() in result.events
    assert session.state.flags == {}
    assert result.node_view.node_id == "start"


def test_restart_in_entry_effects_starts_over() -> None:
    graph = make_graph(
        scene("start", choices=(Choice("Enter", "trap"),)),
        scene("trap", effects=(Restart(),), next_node_id="start"),
    )
    service = StoryService(graph)
    session = service.start_new_game()

    result = service.choose(session, 0)

    assert result.restarted is True
    assert session.state.current_scene == "start"


def test_resolution_failure_is_shown_as_error_view() -> None:
    graph = make_graph(
        scene("start", choices=(Choice("Go", "check"),)),
        LogicNode("check", next_true="gone", next_false="gone"),
    )
    service = StoryService(graph)
    session = service.start_new_game()

    result = service.choose(session, 0)

    assert result.node_view.error_code == "SCENE_NOT_FOUND"
    assert result.node_view.text.startswith("Error: ")
    assert session.finished
    assert session.state.current_scene == "start"


def test_choice_time_cost_advances_clock() -> None:
    graph = make_graph(
        scene("start", choices=(Choice("Walk", "road", time_cost=90),)),
        scene("road", text="It is {time}.", next_node_id="start"),
    )
    service = StoryService(graph)
    session = service.start_new_game()

    result = service.choose(session, 0)

    assert result.node_view.text == "It is 09:30."


def test_choice_into_death_target_uses_its_own_message() -> None:
    graph = make_graph(
        scene("start", choices=(Choice("Feed the eel", "death", death_message="Eaten, {player}."),)),
    )
    service = StoryService(graph)
    session = service.start_new_game("Ada")

    result = service.choose(session, 0)

    assert result.node_view.terminal == "death"
    assert result.node_view.text == "Eaten, Ada."
    assert session.finished
    with pytest.raises(ValueError):
        service.choose(session, 0)


def test_choice_into_win_target_falls_back_to_default_message() -> None:
    graph = make_graph(scene("start", choices=(Choice("Sail home", "win"),)))
    service = StoryService(graph)
    session = service.start_new_game()

    result = service.choose(session, 0)

    assert result.node_view.terminal == "win"
    assert result.node_view.text == "You won!"


def test_node_named_win_takes_precedence_over_terminal_target() -> None:
    graph = make_graph(
        scene("start", choices=(Choice("Onward", "win", win_message="unused"),)),
        scene("win", text="Not over yet.", next_node_id="start"),
    )
    service = StoryService(graph)
    session = service.start_new_game()

    result = service.choose(session, 0)

    assert result.node_view.terminal is None
    assert result.node_view.text == "Not over yet."


def test_input_node_can_lead_straight_to_an_ending() -> None:
    graph = make_graph(InputNode("ask", text="Password?", variable="flags.password", next_node_id="win"))
    service = StoryService(graph)
    session = service.start_new_game()

    result = service.submit_input(session, "swordfish")

    assert result.node_view.terminal == "win"
    assert session.state.flags["password"] == "swordfish"
