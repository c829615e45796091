"""Terminal player and validator for story graph files."""
from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Callable, List, Sequence

from talegraph.core.types import TextDisplayMode
from talegraph.data import DataError, StoryGraphRepository
from talegraph.domain.defs import StoryGraph
from talegraph.presentation.cli.config import configure_logging, load_config
from talegraph.presentation.cli.render import (
    RevealPrinter,
    render_bullet_lines,
    render_choices,
    render_heading,
    render_scene_header,
    render_terminal,
)
from talegraph.services import (
    ChoiceResult,
    InventoryChangedEvent,
    RestartRequestedEvent,
    RevealEngine,
    SceneView,
    StoryEvent,
    StoryService,
    StorySession,
    format_issue,
    validate,
)


def parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="talegraph", description="Play or validate branching story graphs.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    validate_parser = subparsers.add_parser("validate", help="Check a story for authoring mistakes.")
    validate_parser.add_argument("story_path", help="Path to the story JSON file.")

    play_parser = subparsers.add_parser("play", help="Play a story in the terminal.")
    play_parser.add_argument("story_path", help="Path to the story JSON file.")
    play_parser.add_argument("--name", default=None, help="Player name used for {player}.")
    play_parser.add_argument(
        "--text-mode",
        choices=("instant", "typewriter"),
        default=None,
        help="Override the configured text display mode.",
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    """Run the CLI and return a process exit code."""
    configure_logging()
    args = parse_args(sys.argv[1:] if argv is None else argv)
    story_path = Path(args.story_path).resolve()
    try:
        graph = StoryGraphRepository(story_path).get()
    except DataError as exc:
        print(f"Failed to load story: {exc}")
        return 1

    if args.command == "validate":
        return run_validate(graph, story_path)

    config = load_config()
    text_mode: TextDisplayMode = args.text_mode or config["text_display_mode"]
    engine = RevealEngine(tick_interval=int(config["typing_speed_ms"]) / 1000)
    service = StoryService(graph)
    try:
        return asyncio.run(_run_story_loop(service, engine, text_mode, args.name))
    except KeyboardInterrupt:
        print("\nGoodbye!")
        return 130


def run_validate(graph: StoryGraph, story_path: Path) -> int:
    report = validate(graph)
    if report.errors:
        print("Validation failed:")
        render_bullet_lines(format_issue(issue) for issue in report.errors)
    if report.warnings:
        print("Warnings:")
        render_bullet_lines(format_issue(issue) for issue in report.warnings)
    if not report.errors and not report.warnings:
        print("All good! No issues found.")
    print(
        f"Validation summary for {story_path}: nodes={len(graph.nodes)} "
        f"errors={len(report.errors)} warnings={len(report.warnings)}"
    )
    return 1 if report.errors else 0


class LineReader:
    """Reads terminal lines on a worker thread.

    ``start`` begins a read without a prompt so a typewriter reveal can watch
    for Enter; the next ``read`` then returns that pending line.
    """

    def __init__(self, read_line: Callable[[str], str] | None = None) -> None:
        self._read_line = read_line if read_line is not None else input
        self._pending: asyncio.Future[str] | None = None

    def start(self) -> asyncio.Future[str]:
        if self._pending is None:
            self._pending = asyncio.ensure_future(asyncio.to_thread(self._read_line, ""))
        return self._pending

    async def read(self, prompt: str = "") -> str:
        if self._pending is None:
            return await asyncio.to_thread(self._read_line, prompt)
        print(prompt, end="", flush=True)
        pending, self._pending = self._pending, None
        return await pending


async def _run_story_loop(
    service: StoryService,
    engine: RevealEngine,
    text_mode: TextDisplayMode,
    player_name: str | None,
    reader: LineReader | None = None,
) -> int:
    reader = reader or LineReader()
    session = service.start_new_game(player_name)
    if service.graph.title:
        render_heading(service.graph.title)
    while True:
        view = service.get_current_view(session)
        render_scene_header(view)
        if view.error_code or view.terminal:
            if view.error_code:
                print(view.text)
            else:
                render_terminal(view)
            try:
                answer = await reader.read("Press R to restart, anything else to quit: ")
            except EOFError:
                return 1 if view.error_code else 0
            if answer.strip().lower() != "r":
                print("Goodbye!")
                return 1 if view.error_code else 0
            service.restart(session, player_name)
            continue

        prompt_follows = view.awaiting_input or bool(view.choices)
        try:
            await _reveal(engine, view.text, text_mode, reader, skippable=prompt_follows)
            if not prompt_follows:
                print("No choices are available here. The story cannot continue.")
                return 1
            result = await _take_turn(service, session, view, reader)
        except EOFError:
            print("\nGoodbye!")
            return 0
        _render_story_events(result.events)


async def _take_turn(
    service: StoryService, session: StorySession, view: SceneView, reader: LineReader
) -> ChoiceResult:
    while True:
        try:
            if view.awaiting_input:
                return service.submit_input(session, await _prompt_text(reader))
            render_choices(view.choices)
            return service.choose(session, await _prompt_choice(reader, len(view.choices)))
        except ValueError as exc:
            print(exc)


async def _reveal(
    engine: RevealEngine,
    text: str,
    text_mode: TextDisplayMode,
    reader: LineReader,
    *,
    skippable: bool = True,
) -> None:
    """Reveal ``text``; in typewriter mode pressing Enter shows the rest at once."""
    printer = RevealPrinter()
    handle = engine.start(text, printer)
    if text_mode == "instant":
        handle.skip()
    elif skippable:
        line = reader.start()
        waiter = asyncio.ensure_future(handle.wait())
        await asyncio.wait({waiter, line}, return_when=asyncio.FIRST_COMPLETED)
        if line.done() and not waiter.done():
            handle.skip()
            await reader.read()
    await handle.wait()
    printer.finish()


async def _prompt_choice(reader: LineReader, choice_count: int) -> int:
    while True:
        raw = (await reader.read("Select an option: ")).strip()
        try:
            index = int(raw) - 1
        except ValueError:
            print("Please enter a number.")
            continue
        if 0 <= index < choice_count:
            return index
        print(f"Please enter a value between 1 and {choice_count}.")


async def _prompt_text(reader: LineReader) -> str:
    while True:
        raw = (await reader.read("> ")).strip()
        if raw:
            return raw
        print("Please enter some text.")


def _render_story_events(events: List[StoryEvent]) -> None:
    for event in events:
        if isinstance(event, InventoryChangedEvent):
            contents = ", ".join(event.inventory) if event.inventory else "- Empty -"
            print(f"[Inventory] {contents}")
        elif isinstance(event, RestartRequestedEvent):
            print("[The story starts over.]")
