"""Snapshot helpers for broadcasting world state."""
from __future__ import annotations

from typing import Any, Dict, Iterable, List

from .bullet import Bullet
from .construct import Construct
from .player import Player
from .praesidium import Praesidium


class SnapshotBuilder:
    """Serialises the live entities into the ``state`` payload sent to clients."""

    def __init__(self, killfeed_max: int = 6, killfeed_ttl: float = 4.0) -> None:
        self.killfeed_max = killfeed_max
        self.killfeed_ttl = killfeed_ttl

    def build(
        self,
        *,
        now_ms: float,
        tick: int,
        players: Iterable[Player],
        bullets: Iterable[Bullet],
        constructs: Iterable[Construct],
        killfeed: List[Dict[str, Any]],
        praesidia: Iterable[Praesidium] = (),
    ) -> Dict[str, Any]:
        return {
            "type": "state",
            "time": now_ms,
            "tick": tick,
            "players": [p.to_dict() for p in players],
            "bullets": [b.to_dict() for b in bullets if b.should_exist],
            "constructs": [c.to_dict() for c in constructs if c.should_exist],
            "praesidia": [p.to_dict() for p in praesidia if p.should_exist],
            "killfeed": self._recent_kills(now_ms, killfeed),
        }

    def _recent_kills(self, now_ms: float, killfeed: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        ttl_ms = self.killfeed_ttl * 1000.0
        feed = [dict(e) for e in killfeed if (now_ms - float(e.get("t", 0.0))) <= ttl_ms]
        return feed[-self.killfeed_max:] if self.killfeed_max > 0 else []
