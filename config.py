from __future__ import annotations

import os
import yaml
from pathlib import Path
from typing import Dict, Any, Mapping

USER_CONFIG_PATH = Path.home() / ".dome_config.yaml"
DEFAULT_DATA_DIR = Path.home() / ".local" / "share" / "dome"

DEFAULT_TICK_RATE = 4.0
DEFAULT_FRAME_RATE = 30.0
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_HIGHLIGHT_TICKS = 10


def config_path() -> Path:
    override = os.environ.get("DOME_CONFIG", "").strip()
    return Path(override).expanduser() if override else USER_CONFIG_PATH


def _load_config() -> Dict[str, Any]:
    path = config_path()
    if not path.exists():
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except Exception:
        return {}
    return data if isinstance(data, dict) else {}


def _positive_float(value: Any, default: float) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default


def get_data_dir() -> Path:
    env = os.environ.get("DOME_DATA", "").strip()
    if env:
        return Path(env).expanduser()
    configured = str(_load_config().get("data_dir", "") or "").strip()
    return Path(configured).expanduser() if configured else DEFAULT_DATA_DIR


def get_tick_rate() -> float:
    return _positive_float(_load_config().get("tick_rate"), DEFAULT_TICK_RATE)


def get_frame_rate() -> float:
    return _positive_float(_load_config().get("frame_rate"), DEFAULT_FRAME_RATE)


def get_theme() -> str:
    return str(_load_config().get("theme", "") or "").strip()


def get_highlight_ticks() -> int:
    """Ticks a rejected duplicate name stays highlighted."""
    try:
        ticks = int(_load_config().get("highlight_ticks", DEFAULT_HIGHLIGHT_TICKS))
    except (TypeError, ValueError):
        return DEFAULT_HIGHLIGHT_TICKS
    return ticks if ticks > 0 else DEFAULT_HIGHLIGHT_TICKS


def get_log_level() -> str:
    env = os.environ.get("DOME_LOG_LEVEL", "").strip()
    if env:
        return env.upper()
    return str(_load_config().get("log_level", "") or DEFAULT_LOG_LEVEL).strip().upper()


def get_keybinding_overrides() -> Dict[str, Dict[str, str]]:
    """``keybindings`` section of the user config: ``{mode: {keys: action}}``."""
    raw = _load_config().get("keybindings") or {}
    if not isinstance(raw, Mapping):
        return {}
    overrides: Dict[str, Dict[str, str]] = {}
    for mode, bindings in raw.items():
        if isinstance(bindings, Mapping):
            overrides[str(mode)] = {str(keys): str(action) for keys, action in bindings.items()}
    return overrides
