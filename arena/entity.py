"""Per-tick kinematic bookkeeping shared by every simulated object."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .combat import circle_collide


@dataclass
class Entity:
    """Position, velocity and circular hitbox of a simulated object.

    Concrete objects (bullets, players, constructs) own one of these and call
    :meth:`update` before running their own logic, so every object advances
    with the same elapsed time inside a tick.
    """

    x: float = 0.0
    y: float = 0.0
    vx: float = 0.0  # px/ms
    vy: float = 0.0  # px/ms
    hitbox_size: float = 0.0  # radius, px
    last_update_time: float = 0.0  # ms of simulated time
    update_time_difference: float = 0.0  # ms

    def update(self, dt: float) -> None:
        """Record the elapsed time for this tick and integrate velocity."""
        self.update_time_difference = max(0.0, float(dt))
        self.last_update_time += self.update_time_difference
        self.x += self.vx * self.update_time_difference
        self.y += self.vy * self.update_time_difference

    def is_collided_with(self, x: float, y: float, radius: float) -> bool:
        """Circle overlap between this hitbox and one centred on (x, y)."""
        return circle_collide(self.x, self.y, self.hitbox_size, x, y, radius)


def body_property(name: str, doc: str = "") -> property:
    """Expose ``self.body.<name>`` as a read/write attribute of the owner."""

    def getter(self: Any) -> Any:
        return getattr(self.body, name)

    def setter(self: Any, value: Any) -> None:
        setattr(self.body, name, value)

    return property(getter, setter, doc=doc or f"Proxy for body.{name}.")
