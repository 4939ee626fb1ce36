"""Hit-test and damage contracts shared by players and constructs."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol, Union

Identity = Union[str, int]


class Damageable(Protocol):
    """Anything a bullet can collide with and hurt."""

    def is_collided_with(self, x: float, y: float, radius: float) -> bool:
        ...

    def damage(self, amount: float) -> None:
        ...


def circle_collide(x1: float, y1: float, r1: float, x2: float, y2: float, r2: float) -> bool:
    """Check if two circles overlap (touching counts)."""
    dx = x1 - x2
    dy = y1 - y2
    rr = r1 + r2
    return (dx * dx + dy * dy) <= (rr * rr)


@dataclass
class HitEvent:
    """Outcome of a bullet resolving against a target."""
    source: Identity
    target_kind: str  # "player" or "construct"
    target_id: Identity
    damage: float
    x: float
    y: float
    killed: bool = False
    credited: Optional[Identity] = None  # player whose kill counter moved
