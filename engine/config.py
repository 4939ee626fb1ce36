"""Loader for the server configuration file."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional, Union

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "configs" / "defaults.json"
_CONFIG_DATA: Dict[str, Any] = {}
_LOADED = False


def _read(path: Path) -> Dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
    except FileNotFoundError:
        print(f"[config] {path} not found; using built-in defaults")
        return {}
    except json.JSONDecodeError as exc:
        print(f"[config] {path} is not valid JSON ({exc}); using built-in defaults")
        return {}
    if not isinstance(data, dict):
        print(f"[config] {path} must hold a JSON object; using built-in defaults")
        return {}
    return data


def load(path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """(Re)load the config from ``path`` (defaults file when omitted)."""
    global _CONFIG_DATA, _LOADED
    _CONFIG_DATA = _read(Path(path) if path is not None else DEFAULT_CONFIG_PATH)
    _LOADED = True
    return _CONFIG_DATA


def lookup(data: Dict[str, Any], path: str, default: Any = None) -> Any:
    """Resolve a dotted path inside ``data``, or default when missing."""
    if not path:
        return data
    current: Any = data
    for segment in path.split('.'):
        if isinstance(current, dict) and segment in current:
            current = current[segment]
        else:
            return default
    return current


def get(path: str, default: Any = None) -> Any:
    """Return a value from the loaded config using dotted paths."""
    if not _LOADED:
        load()
    return lookup(_CONFIG_DATA, path, default)
