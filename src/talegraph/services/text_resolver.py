"""Text variant selection and ``{placeholder}`` substitution."""
from __future__ import annotations

import re

from talegraph.domain.defs import TextEntry
from talegraph.domain.state import GameState, state_attribute_name
from talegraph.services.condition_evaluator import evaluate

UNSET_FLAG_TOKEN = "unknown"

_PLACEHOLDER_PATTERN = re.compile(r"\{(flags\.\w+|\w+)\}")


def resolve_text(entry: TextEntry, state: GameState) -> str:
    """Pick the applicable text for ``entry`` and substitute state variables.

    A plain string is substituted directly. A sequence of variants yields the
    first one whose condition is absent or true; later variants are never
    evaluated. No match yields an empty string.
    """
    if not entry:
        return ""
    if isinstance(entry, str):
        return substitute_variables(entry, state)
    for variant in entry:
        if variant.condition is None or evaluate(variant.condition, state):
            return substitute_variables(variant.content, state)
    return ""


def substitute_variables(text: str, state: GameState) -> str:
    """Expand placeholders in one left-to-right pass.

    Expanded values are not rescanned, so a player name containing braces is
    inserted verbatim. Unknown placeholders are left untouched.
    """
    if not text or "{" not in text:
        return text

    def replace(match: re.Match[str]) -> str:
        name = match.group(1)
        if name == "player":
            return state.player_name
        if name == "time":
            return state.time_string()
        if name.startswith("flags."):
            value = state.flags.get(name[len("flags.") :])
            if not value:
                return UNSET_FLAG_TOKEN
            return _format_value(value)
        attribute = state_attribute_name(name)
        if attribute is None:
            return match.group(0)
        return _format_value(getattr(state, attribute))

    return _PLACEHOLDER_PATTERN.sub(replace, text)


def _format_value(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ", ".join(str(item) for item in value)
    if isinstance(value, dict):
        return ", ".join(f"{key}={_format_value(item)}" for key, item in value.items())
    return str(value)
