from talegraph.domain.defs import HasFlag, TextVariant, UnknownCondition
from talegraph.domain.state import GameState
from talegraph.services.text_resolver import UNSET_FLAG_TOKEN, resolve_text, substitute_variables


def test_first_matching_variant_wins() -> None:
    variants = (
        TextVariant(content="A", condition=HasFlag("x")),
        TextVariant(content="B"),
    )
    assert resolve_text(variants, GameState()) == "B"
    assert resolve_text(variants, GameState(flags={"x": True})) == "A"


def test_variants_after_first_match_are_not_evaluated(caplog) -> None:
    variants = (
        TextVariant(content="first"),
        TextVariant(content="second", condition=UnknownCondition("BROKEN")),
    )
    with caplog.at_level("WARNING"):
        assert resolve_text(variants, GameState()) == "first"
    assert "Malformed condition" not in caplog.text


def test_no_matching_variant_is_empty() -> None:
    variants = (TextVariant(content="A", condition=HasFlag("x")),)
    assert resolve_text(variants, GameState()) == ""
    assert resolve_text(None, GameState()) == ""
    assert resolve_text((), GameState()) == ""


def test_plain_string_is_substituted() -> None:
    state = GameState(player_name="Ada")
    assert resolve_text("Hello {player}.", state) == "Hello Ada."


def test_flag_substitution_with_fallback() -> None:
    state = GameState(flags={"pet": "Biscuit", "gone": False})
    assert substitute_variables("{flags.pet}", state) == "Biscuit"
    assert substitute_variables("{flags.missing}", state) == UNSET_FLAG_TOKEN
    assert substitute_variables("{flags.gone}", state) == UNSET_FLAG_TOKEN


def test_time_is_zero_padded_and_wraps_at_midnight() -> None:
    assert substitute_variables("{time}", GameState(time_minutes=65)) == "01:05"
    assert substitute_variables("{time}", GameState(time_minutes=24 * 60 + 7 * 60 + 30)) == "07:30"


def test_state_fields_by_story_or_python_name() -> None:
    state = GameState(day_index=3, inventory=["Rope", "Lamp"], current_scene="harbour")
    assert substitute_variables("Day {dayIndex}", state) == "Day 3"
    assert substitute_variables("Day {day_index}", state) == "Day 3"
    assert substitute_variables("{inventory}", state) == "Rope, Lamp"
    assert substitute_variables("{currentScene}", state) == "harbour"


def test_unknown_placeholders_are_left_verbatim() -> None:
    state = GameState()
    assert substitute_variables("{weather} and {flags.a.b}", state) == "{weather} and {flags.a.b}"


def test_substitution_is_a_single_pass() -> None:
    state = GameState(player_name="{time}")
    assert substitute_variables("Hi {player}", state) == "Hi {time}"
