import asyncio
import json
import threading
from pathlib import Path

from talegraph.presentation.cli.app import LineReader, _reveal, main
from talegraph.services import RevealEngine
from tests.helpers.story_graphs import LIGHTHOUSE_STORY


def _scripted_input(monkeypatch, *answers: str) -> None:
    remaining = iter(answers)

    def fake_input(_prompt: str = "") -> str:
        try:
            return next(remaining)
        except StopIteration:
            raise EOFError from None

    monkeypatch.setattr("builtins.input", fake_input)


def test_validate_command_reports_summary(capsys) -> None:
    exit_code = main(["validate", str(LIGHTHOUSE_STORY)])
    output = capsys.readouterr().out

    assert "Validation summary" in output
    assert "DEAD_END" in output
    assert exit_code == 1


def test_missing_story_file_fails_cleanly(tmp_path: Path, capsys) -> None:
    exit_code = main(["validate", str(tmp_path / "nope.json")])
    assert exit_code == 1
    assert "Failed to load story" in capsys.readouterr().out


def test_play_instant_mode_until_input_runs_out(monkeypatch, capsys, tmp_path: Path) -> None:
    monkeypatch.setattr("talegraph.presentation.cli.config.get_user_data_dir", lambda: tmp_path)
    _scripted_input(monkeypatch, "Ada", "2")

    exit_code = main(["play", str(LIGHTHOUSE_STORY), "--text-mode", "instant"])
    output = capsys.readouterr().out

    assert exit_code == 0
    assert "The Last Lighthouse" in output
    assert "GAME OVER" in output
    assert "The sea takes Ada." in output


def test_play_reprompts_after_rejected_input(monkeypatch, capsys, tmp_path: Path) -> None:
    monkeypatch.setattr("talegraph.presentation.cli.config.get_user_data_dir", lambda: tmp_path)
    story_path = tmp_path / "calendar.json"
    story_path.write_text(
        json.dumps(
            {
                "startNode": "ask",
                "nodes": {
                    "ask": {"type": "input", "text": "Which day?", "variable": "dayIndex", "next": "win"},
                },
            }
        ),
        encoding="utf-8",
    )
    _scripted_input(monkeypatch, "tuesday", "3")

    exit_code = main(["play", str(story_path), "--text-mode", "instant"])
    output = capsys.readouterr().out

    assert exit_code == 0
    assert "'dayIndex' expects a whole number." in output
    assert "You won!" in output


def test_enter_skips_typewriter_reveal(capsys) -> None:
    async def scenario() -> None:
        engine = RevealEngine(tick_interval=60)
        reader = LineReader(lambda _prompt: "")
        await asyncio.wait_for(_reveal(engine, "A very slow sentence.", "typewriter", reader), timeout=5)
        assert engine.current is not None
        assert engine.current.state == "done"

    asyncio.run(scenario())

    assert "A very slow sentence." in capsys.readouterr().out


def test_line_typed_after_reveal_answers_the_next_prompt(capsys) -> None:
    gate = threading.Event()

    def gated_input(_prompt: str) -> str:
        gate.wait(timeout=5)
        return "north"

    async def scenario() -> str:
        engine = RevealEngine(tick_interval=0)
        reader = LineReader(gated_input)
        await _reveal(engine, "Fork in the road.", "typewriter", reader)
        gate.set()
        return await reader.read("> ")

    assert asyncio.run(scenario()) == "north"
    output = capsys.readouterr().out
    assert "Fork in the road." in output
    assert output.endswith("> ")
