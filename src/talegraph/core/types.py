"""Shared type aliases for the core and domain layers."""
from typing import Literal

NodeKind = Literal["choice", "input", "logic", "death", "win"]
TerminalKind = Literal["death", "win"]
Severity = Literal["ERROR", "WARN"]
RevealState = Literal["idle", "revealing", "done", "cancelled"]
TextDisplayMode = Literal["instant", "typewriter"]

__all__ = [
    "NodeKind",
    "RevealState",
    "Severity",
    "TerminalKind",
    "TextDisplayMode",
]
