"""Connection-id → player mapping and the read-only view handed to a tick."""
from __future__ import annotations

from typing import Dict, Iterator, Mapping, Optional, Tuple

from .player import Player


class RegistryView:
    """Frozen snapshot of the registry for the duration of one tick.

    Iteration order is join order, which decides which player a bullet hits
    when it overlaps several at once.
    """

    def __init__(self, players: Mapping[str, Player]) -> None:
        self._players: Dict[str, Player] = dict(players)
        self._order: Tuple[Player, ...] = tuple(self._players.values())

    def values(self) -> Tuple[Player, ...]:
        return self._order

    def get(self, pid: str) -> Optional[Player]:
        return self._players.get(pid)

    def __contains__(self, pid: object) -> bool:
        return pid in self._players

    def __len__(self) -> int:
        return len(self._order)

    def __iter__(self) -> Iterator[Player]:
        return iter(self._order)


class ClientRegistry:
    """Live players keyed by connection id. Mutated only between ticks."""

    def __init__(self) -> None:
        self._players: Dict[str, Player] = {}

    def add(self, player: Player) -> None:
        if player.pid in self._players:
            raise KeyError(f"player {player.pid!r} already registered")
        self._players[player.pid] = player

    def remove(self, pid: str) -> Optional[Player]:
        return self._players.pop(pid, None)

    def get(self, pid: str) -> Optional[Player]:
        return self._players.get(pid)

    def values(self) -> Tuple[Player, ...]:
        return tuple(self._players.values())

    def view(self) -> RegistryView:
        return RegistryView(self._players)

    def __contains__(self, pid: object) -> bool:
        return pid in self._players

    def __len__(self) -> int:
        return len(self._players)
