"""Player-built structures: turrets and walls."""
from __future__ import annotations

import math
from typing import Any, Dict, List, Optional

from .bullet import Bullet
from .combat import Identity
from .constants import (
    CONSTRUCT_HEALTH,
    CONSTRUCT_HITBOX_SIZE,
    TURRET_RANGE,
    TURRET_SHOT_COOLDOWN_MS,
    ConstructType,
)
from .entity import Entity, body_property
from .transform import direction_to


class Construct:
    """A static structure owned by a player.

    Walls are inert. Turrets shoot at the nearest living player other than
    their owner; their bullets carry the owner as ``source`` so kills credit
    the builder.
    """

    x = body_property("x")
    y = body_property("y")
    hitbox_size = body_property("hitbox_size")

    def __init__(
        self,
        cid: int,
        owner: Identity,
        kind: ConstructType,
        x: float,
        y: float,
        *,
        health: Optional[float] = None,
        hitbox_size: float = CONSTRUCT_HITBOX_SIZE,
        fire_range: float = TURRET_RANGE,
        shot_cooldown: float = TURRET_SHOT_COOLDOWN_MS,
    ) -> None:
        self.cid = cid
        self.owner = owner
        self.type = ConstructType(kind)
        self.body = Entity(x=x, y=y, hitbox_size=hitbox_size)
        self.orientation = 0.0
        self.health = CONSTRUCT_HEALTH.get(self.type, 1) if health is None else health
        self.range = fire_range
        self.shot_cooldown = shot_cooldown
        self.last_shot_time: Optional[float] = None
        self.should_exist = True

    # --- Damageable ---
    def is_collided_with(self, x: float, y: float, radius: float) -> bool:
        return self.body.is_collided_with(x, y, radius)

    def damage(self, amount: float) -> None:
        self.health -= amount

    def is_dead(self) -> bool:
        return self.health <= 0

    # --- Per tick ---
    def update(self, registry: Any, dt: float, now: float, **bullet_cfg: Any) -> List[Bullet]:
        """Advance one tick; returns any bullets fired this tick."""
        self.body.update(dt)
        if self.is_dead():
            self.should_exist = False
            return []
        if self.type != ConstructType.TURRET:
            return []
        if self.last_shot_time is not None and now - self.last_shot_time < self.shot_cooldown:
            return []

        target = self._nearest_target(registry)
        if target is None:
            return []
        self.orientation = direction_to(self.x, self.y, target.x, target.y)
        self.last_shot_time = now
        return [Bullet.create(self.x, self.y, self.orientation, self.owner, **bullet_cfg)]

    def _nearest_target(self, registry: Any) -> Optional[Any]:
        best = None
        best_d = 0.0
        for player in registry.values():
            if player.pid == self.owner or player.is_dead():
                continue
            d = math.hypot(player.x - self.x, player.y - self.y)
            if d > self.range:
                continue
            if best is None or d < best_d:
                best, best_d = player, d
        return best

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.cid,
            "owner": self.owner,
            "type": int(self.type),
            "x": self.x,
            "y": self.y,
            "orientation": self.orientation,
            "health": self.health,
        }
