"""Shared CLI rendering helpers."""
from __future__ import annotations

import re
import sys
from typing import Iterable, Sequence, TextIO

from talegraph.presentation.cli.config import debug_enabled
from talegraph.services import SceneView

_BREAK_TAG = re.compile(r"<br\s*/?>", re.IGNORECASE)
_ANY_TAG = re.compile(r"<[^>]*>")


def strip_markup(text: str) -> str:
    """Return ``text`` without markup tags; ``<br>`` becomes a newline."""
    return _ANY_TAG.sub("", _BREAK_TAG.sub("\n", text))


class RevealPrinter:
    """Writes a growing reveal prefix to a stream, printing only the new part."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream or sys.stdout
        self._written = ""

    def __call__(self, displayed: str) -> None:
        plain = strip_markup(displayed)
        if plain.startswith(self._written):
            delta = plain[len(self._written) :]
        else:
            delta = "\n" + plain
        if delta:
            self._stream.write(delta)
            self._stream.flush()
        self._written = plain

    def finish(self) -> None:
        self._stream.write("\n")
        self._stream.flush()
        self._written = ""


def render_heading(title: str) -> None:
    """Print a consistent section heading."""
    print(f"\n=== {title} ===")


def render_scene_header(view: SceneView) -> None:
    """Print the status line above a scene's text."""
    parts = [view.status]
    if view.location:
        parts.append(view.location)
    render_heading(" | ".join(part for part in parts if part))
    if debug_enabled():
        print(f"[{view.node_id}]")
    if view.image:
        print(f"[Image: {view.image}]")


def render_choices(choices: Sequence[str]) -> None:
    """Display numbered story choices."""
    if not choices:
        return
    for idx, label in enumerate(choices, start=1):
        print(f"{idx}. {label}")


def render_terminal(view: SceneView) -> None:
    if view.terminal == "win":
        render_heading("YOU WIN!")
    else:
        render_heading("GAME OVER")
    print(strip_markup(view.text))


def render_bullet_lines(lines: Iterable[str]) -> None:
    """Print bullet-prefixed lines."""
    for line in lines:
        print(f"- {line}")
