"""Story progression services."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List

from talegraph.core.types import TerminalKind
from talegraph.domain.defs import TERMINAL_TARGETS, Choice, ChoiceNode, InputNode, StoryGraph
from talegraph.domain.state import DEFAULT_PLAYER_NAME, GameState
from talegraph.domain.timekeeping import advance_minutes
from talegraph.services.condition_evaluator import visible_choices
from talegraph.services.effect_executor import apply_effects
from talegraph.services.events import StoryEvent, StoryEventListener
from talegraph.services.scene_resolver import (
    InteractiveScene,
    Resolution,
    ResolutionFailure,
    TerminalScene,
    resolve_from,
)
from talegraph.services.text_resolver import resolve_text, substitute_variables

logger = logging.getLogger(__name__)

CONTINUE_LABEL = "Continue..."


@dataclass(slots=True)
class SceneView:
    """Data returned to the presentation layer for rendering."""

    node_id: str
    text: str
    choices: List[str] = field(default_factory=list)
    awaiting_input: bool = False
    location: str | None = None
    image: str | None = None
    status: str = ""
    terminal: TerminalKind | None = None
    error_code: str | None = None


@dataclass(slots=True)
class StorySession:
    """One play-through: the owned state plus where resolution last stopped."""

    state: GameState
    resolution: Resolution

    @property
    def finished(self) -> bool:
        return not isinstance(self.resolution, InteractiveScene)


@dataclass(slots=True)
class ChoiceResult:
    """Result returned after applying a choice or an input."""

    events: List[StoryEvent] = field(default_factory=list)
    node_view: SceneView | None = None
    restarted: bool = False


class StoryService:
    """Application service that drives one story graph."""

    def __init__(
        self,
        graph: StoryGraph,
        *,
        listener: StoryEventListener | None = None,
        default_player_name: str = DEFAULT_PLAYER_NAME,
    ) -> None:
        self._graph = graph
        self._listener = listener
        self._default_player_name = default_player_name

    @property
    def graph(self) -> StoryGraph:
        return self._graph

    def start_new_game(self, player_name: str | None = None) -> StorySession:
        """Create a fresh session positioned at the story's start node."""
        state = GameState(
            current_scene=self._graph.start_node_id,
            player_name=player_name or self._default_player_name,
        )
        events: List[StoryEvent] = []
        resolution = self._resolve(state, self._graph.start_node_id, events, allow_restart=False)
        return StorySession(state=state, resolution=resolution)

    def restart(self, session: StorySession, player_name: str | None = None) -> None:
        """Reset ``session`` in place to a brand new play-through."""
        fresh = self.start_new_game(player_name)
        session.state = fresh.state
        session.resolution = fresh.resolution
        logger.debug("Session restarted at %r.", self._graph.start_node_id)

    def get_current_view(self, session: StorySession) -> SceneView:
        """Return the view model for wherever the session currently stands."""
        state = session.state
        status = f"{state.day_name()[:2]} {state.time_string()}"
        resolution = session.resolution
        if isinstance(resolution, ResolutionFailure):
            return SceneView(
                node_id=resolution.error.node_id or state.current_scene,
                text=f"Error: {resolution.message}",
                status=status,
                error_code=resolution.code,
            )
        if isinstance(resolution, TerminalScene):
            return SceneView(
                node_id=resolution.node_id,
                text=substitute_variables(resolution.message, state),
                status=status,
                terminal=resolution.kind,
            )
        node = resolution.node
        if isinstance(node, InputNode):
            labels: List[str] = []
        else:
            labels = [substitute_variables(choice.text, state) for choice in self.current_choices(session)]
        return SceneView(
            node_id=node.id,
            text=resolve_text(node.text, state),
            choices=labels,
            awaiting_input=isinstance(node, InputNode),
            location=node.location,
            image=node.image,
            status=status,
        )

    def current_choices(self, session: StorySession) -> List[Choice]:
        """Return the choices the player can pick right now.

        A node with no authored choices but a direct ``next`` offers a single
        continue choice.
        """
        resolution = session.resolution
        if not isinstance(resolution, InteractiveScene) or not isinstance(resolution.node, ChoiceNode):
            return []
        node = resolution.node
        if node.choices:
            return visible_choices(node.choices, session.state)
        if node.next_node_id:
            return [Choice(text=CONTINUE_LABEL, next_node_id=node.next_node_id)]
        return []

    def choose(self, session: StorySession, choice_index: int) -> ChoiceResult:
        """Apply the selected visible choice and advance the story."""
        resolution = session.resolution
        if not isinstance(resolution, InteractiveScene):
            raise ValueError("The story has ended; restart to continue playing.")
        if isinstance(resolution.node, InputNode):
            raise ValueError(f"Story node '{resolution.node_id}' expects text input, not a choice.")
        choices = self.current_choices(session)
        if not choices:
            raise ValueError(f"Story node '{resolution.node_id}' has no choices to select.")
        if choice_index < 0:
            raise IndexError(f"Choice index {choice_index} is invalid for node '{resolution.node_id}'.")
        try:
            selected_choice = choices[choice_index]
        except IndexError as exc:
            raise IndexError(
                f"Choice index {choice_index} is invalid for node '{resolution.node_id}'."
            ) from exc

        events: List[StoryEvent] = []
        outcome = apply_effects(selected_choice.effects, session.state, listener=self._emit_into(events))
        if outcome.restart_requested:
            self.restart(session)
            return ChoiceResult(events=events, node_view=self.get_current_view(session), restarted=True)
        if selected_choice.time_cost:
            session.state.time_minutes = advance_minutes(session.state.time_minutes, selected_choice.time_cost)
        return self._advance(session, selected_choice, events)

    def submit_input(self, session: StorySession, value: str) -> ChoiceResult:
        """Store player-entered text into the input node's variable and advance."""
        resolution = session.resolution
        if not isinstance(resolution, InteractiveScene) or not isinstance(resolution.node, InputNode):
            raise ValueError("The current scene does not accept text input.")
        text = value.strip()
        if not text:
            raise ValueError("Input must not be empty.")
        node = resolution.node
        self._store_input(session.state, node.variable, text)
        events: List[StoryEvent] = []
        return self._advance(session, Choice(text="", next_node_id=node.next_node_id or ""), events)

    def _advance(self, session: StorySession, choice: Choice, events: List[StoryEvent]) -> ChoiceResult:
        node_id = choice.next_node_id
        terminal_kind = None if node_id in self._graph.nodes else TERMINAL_TARGETS.get(node_id)
        if terminal_kind is not None:
            session.resolution = TerminalScene(
                node_id=node_id,
                kind=terminal_kind,
                message=choice.terminal_message(terminal_kind),
                path=(node_id,),
            )
            return ChoiceResult(events=events, node_view=self.get_current_view(session))
        resolution = self._resolve(session.state, node_id, events, allow_restart=True)
        if resolution is None:
            self.restart(session)
            return ChoiceResult(events=events, node_view=self.get_current_view(session), restarted=True)
        session.resolution = resolution
        return ChoiceResult(events=events, node_view=self.get_current_view(session))

    def _resolve(
        self,
        state: GameState,
        node_id: str,
        events: List[StoryEvent],
        *,
        allow_restart: bool,
    ) -> Resolution | None:
        resolution = resolve_from(self._graph, state, node_id, listener=self._emit_into(events))
        if isinstance(resolution, InteractiveScene) and resolution.restart_requested:
            if allow_restart:
                return None
            logger.warning("Ignoring RESTART in entry effects of start scene %r.", resolution.node_id)
        return resolution

    def _store_input(self, state: GameState, variable: str | None, text: str) -> None:
        if not variable or variable in ("playerName", "player_name"):
            state.player_name = text
        elif variable.startswith("flags."):
            state.flags[variable[len("flags.") :]] = text
        elif variable in ("dayIndex", "day_index", "timeMinutes", "time_minutes"):
            try:
                number = int(text)
            except ValueError as exc:
                raise ValueError(f"'{variable}' expects a whole number.") from exc
            if variable in ("dayIndex", "day_index"):
                state.day_index = number
            else:
                state.time_minutes = number
        else:
            logger.warning("Input variable %r is not a writable state field; input ignored.", variable)

    def _emit_into(self, events: List[StoryEvent]) -> StoryEventListener:
        def emit(event: StoryEvent) -> None:
            events.append(event)
            if self._listener is not None:
                self._listener(event)

        return emit
