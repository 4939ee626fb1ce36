"""Client intents, validated at the network boundary and applied between ticks."""
from __future__ import annotations

import math
from collections import deque
from dataclasses import dataclass
from typing import Any, Deque, Dict, List, Union

from .constants import ConstructType


class IntentError(ValueError):
    """A client message that cannot be turned into an intent."""


@dataclass
class JoinIntent:
    pid: str
    name: str


@dataclass
class LeaveIntent:
    pid: str


@dataclass
class InputIntent:
    """Held movement keys, facing, and whether the fire button is down."""
    pid: str
    up: bool = False
    down: bool = False
    left: bool = False
    right: bool = False
    orientation: float = 0.0  # radians, 0 = up
    fire: bool = False


@dataclass
class BuildIntent:
    pid: str
    construct: ConstructType
    x: float
    y: float


Intent = Union[JoinIntent, LeaveIntent, InputIntent, BuildIntent]


def _finite(data: Dict[str, Any], key: str, default: Any = None) -> float:
    value = data.get(key, default)
    if value is None:
        raise IntentError(f"missing field {key!r}")
    if isinstance(value, bool):
        raise IntentError(f"field {key!r} must be a number")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise IntentError(f"field {key!r} must be a number") from None
    if not math.isfinite(number):
        raise IntentError(f"field {key!r} must be finite")
    return number


def _flag(data: Dict[str, Any], key: str) -> bool:
    value = data.get(key, False)
    if not isinstance(value, bool):
        raise IntentError(f"field {key!r} must be true or false")
    return value


def parse_intent(pid: str, msg: Dict[str, Any]) -> Intent:
    """Turn one decoded client message into an intent for ``pid``.

    Raises :class:`IntentError` for unknown message types and bad payloads.
    """
    if not pid:
        raise IntentError("missing source")
    kind = msg.get("type")
    data = msg.get("data", {})
    if not isinstance(data, dict):
        raise IntentError("data must be an object")

    if kind == "input":
        return InputIntent(
            pid=pid,
            up=_flag(data, "up"),
            down=_flag(data, "down"),
            left=_flag(data, "left"),
            right=_flag(data, "right"),
            orientation=_finite(data, "orientation", 0.0),
            fire=_flag(data, "fire"),
        )
    if kind == "build":
        raw_type = data.get("construct")
        try:
            construct = ConstructType(int(raw_type))
        except (TypeError, ValueError):
            raise IntentError(f"unknown construct type {raw_type!r}") from None
        return BuildIntent(pid=pid, construct=construct, x=_finite(data, "x"), y=_finite(data, "y"))
    raise IntentError(f"unknown message type {kind!r}")


class IntentQueue:
    """FIFO filled by network tasks and drained by the tick driver."""

    def __init__(self) -> None:
        self._items: Deque[Intent] = deque()

    def put(self, intent: Intent) -> None:
        self._items.append(intent)

    def drain(self) -> List[Intent]:
        items = list(self._items)
        self._items.clear()
        return items

    def __len__(self) -> int:
        return len(self._items)
