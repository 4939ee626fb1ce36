"""Praesidium pickups: the currency players collect and spend on constructs."""
from __future__ import annotations

from typing import Any, Dict

from .constants import PRAESIDIUM_HITBOX_SIZE
from .entity import Entity, body_property


class Praesidium:
    """A static pickup worth ``quantity`` praesidia to whoever touches it first."""

    x = body_property("x")
    y = body_property("y")
    hitbox_size = body_property("hitbox_size")

    def __init__(
        self, pkid: int, x: float, y: float, quantity: int, *, hitbox_size: float = PRAESIDIUM_HITBOX_SIZE
    ) -> None:
        self.pkid = pkid
        self.body = Entity(x=x, y=y, hitbox_size=hitbox_size)
        self.quantity = int(quantity)
        self.should_exist = True

    def is_collided_with(self, x: float, y: float, radius: float) -> bool:
        return self.body.is_collided_with(x, y, radius)

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.pkid, "x": self.x, "y": self.y, "quantity": self.quantity}
