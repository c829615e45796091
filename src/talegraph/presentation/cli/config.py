"""CLI configuration helpers for options persistence."""
from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Dict

from talegraph.core.types import TextDisplayMode

logger = logging.getLogger(__name__)

_DEFAULT_TEXT_MODE: TextDisplayMode = "typewriter"
_DEFAULT_TYPING_SPEED_MS = 10
_MAX_TYPING_SPEED_MS = 1000


def get_user_data_dir() -> Path:
    """Return the per-user data directory."""
    if os.name == "nt":
        base = os.environ.get("APPDATA")
        if base:
            return Path(base) / "Talegraph"
        return Path.home() / "Talegraph"
    return Path.home() / ".config" / "talegraph"


def get_default_config_path() -> Path:
    """Return the default per-user config path."""
    return get_user_data_dir() / "config.json"


def debug_enabled() -> bool:
    """Return True only when TALEGRAPH_DEBUG is explicitly set to '1'."""
    return os.getenv("TALEGRAPH_DEBUG") == "1"


def configure_logging() -> None:
    level = logging.DEBUG if debug_enabled() else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _normalize_text_mode(value: object) -> TextDisplayMode:
    return "instant" if value == "instant" else _DEFAULT_TEXT_MODE


def _normalize_typing_speed(value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        return _DEFAULT_TYPING_SPEED_MS
    return min(max(value, 0), _MAX_TYPING_SPEED_MS)


def _defaults() -> Dict[str, object]:
    return {"text_display_mode": _DEFAULT_TEXT_MODE, "typing_speed_ms": _DEFAULT_TYPING_SPEED_MS}


def load_config(path: Path | None = None) -> Dict[str, object]:
    """Load config from disk or return defaults."""
    config_path = path or get_default_config_path()
    try:
        raw = json.loads(config_path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return _defaults()
    except (OSError, ValueError) as exc:
        logger.warning("Ignoring unreadable config %s: %s", config_path, exc)
        return _defaults()
    if not isinstance(raw, dict):
        return _defaults()
    return {
        "text_display_mode": _normalize_text_mode(raw.get("text_display_mode")),
        "typing_speed_ms": _normalize_typing_speed(raw.get("typing_speed_ms")),
    }


def save_config(config: Dict[str, object], path: Path | None = None) -> None:
    """Persist config to disk."""
    config_path = path or get_default_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)
    payload = {
        "text_display_mode": _normalize_text_mode(config.get("text_display_mode")),
        "typing_speed_ms": _normalize_typing_speed(config.get("typing_speed_ms")),
    }
    config_path.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
