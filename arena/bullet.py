"""Server-side projectile state and its collision/combat resolution."""
from __future__ import annotations

from typing import Any, Optional, Sequence

from .combat import HitEvent, Identity
from .constants import (
    BULLET_DEFAULT_DAMAGE,
    BULLET_DEFAULT_HITBOX_SIZE,
    BULLET_MAX_TRAVEL_DISTANCE,
    BULLET_VELOCITY_MAGNITUDE,
    WORLD_MAX,
    WORLD_MIN,
    ConstructType,
)
from .entity import Entity, body_property
from .transform import Bounds, heading_vector, in_world


class Bullet:
    """A projectile flying in a straight line until it hits or expires.

    ``source`` is the identity of the player that fired it (turret bullets use
    the turret owner). ``should_exist`` only ever goes from True to False; the
    tick driver reaps the bullet after the update that cleared it.
    """

    VELOCITY_MAGNITUDE = BULLET_VELOCITY_MAGNITUDE
    DEFAULT_DAMAGE = BULLET_DEFAULT_DAMAGE
    MAX_TRAVEL_DISTANCE = BULLET_MAX_TRAVEL_DISTANCE
    DEFAULT_HITBOX_SIZE = BULLET_DEFAULT_HITBOX_SIZE

    x = body_property("x")
    y = body_property("y")
    vx = body_property("vx")
    vy = body_property("vy")
    hitbox_size = body_property("hitbox_size")

    def __init__(
        self,
        x: float,
        y: float,
        vx: float,
        vy: float,
        orientation: float,
        hitbox_size: float,
        source: Identity,
        damage: float,
        *,
        speed: float = BULLET_VELOCITY_MAGNITUDE,
        max_travel_distance: float = BULLET_MAX_TRAVEL_DISTANCE,
    ) -> None:
        self.body = Entity(x=x, y=y, vx=vx, vy=vy, hitbox_size=hitbox_size)
        self.orientation = orientation
        self.source = source
        self.damage = damage
        self.speed = speed
        self.max_travel_distance = max_travel_distance

        self.distance_traveled = 0.0
        self.should_exist = True

    @classmethod
    def create(
        cls,
        x: float,
        y: float,
        direction: float,
        source: Identity,
        *,
        speed: Optional[float] = None,
        damage: Optional[float] = None,
        hitbox_size: Optional[float] = None,
        max_travel_distance: Optional[float] = None,
    ) -> "Bullet":
        """Factory used when a player (or its turret) fires.

        ``direction`` is an orientation in radians where 0 points up; callers
        are expected to have validated it as finite.
        """
        speed = cls.VELOCITY_MAGNITUDE if speed is None else float(speed)
        vx, vy = heading_vector(direction, speed)
        return cls(
            x,
            y,
            vx,
            vy,
            direction,
            cls.DEFAULT_HITBOX_SIZE if hitbox_size is None else float(hitbox_size),
            source,
            cls.DEFAULT_DAMAGE if damage is None else damage,
            speed=speed,
            max_travel_distance=(
                cls.MAX_TRAVEL_DISTANCE if max_travel_distance is None else float(max_travel_distance)
            ),
        )

    def update(
        self,
        registry: Any,
        constructs: Sequence[Any],
        dt: float,
        bounds: Bounds = (WORLD_MIN, WORLD_MAX),
    ) -> Optional[HitEvent]:
        """Advance by ``dt`` milliseconds and resolve at most one collision.

        Players are checked before constructs and the first overlap in
        iteration order wins. Returns the resolved hit, if any.
        """
        self.body.update(dt)

        self.distance_traveled += self.speed * self.body.update_time_difference
        if self.distance_traveled >= self.max_travel_distance or not in_world(self.x, self.y, bounds):
            self.should_exist = False
            return None

        for player in registry.values():
            if self.source == player.pid or player.is_dead():
                continue
            if not player.is_collided_with(self.x, self.y, self.hitbox_size):
                continue
            player.damage(self.damage)
            event = HitEvent(
                source=self.source,
                target_kind="player",
                target_id=player.pid,
                damage=self.damage,
                x=self.x,
                y=self.y,
            )
            if player.is_dead():
                event.killed = True
                # The shooter may have disconnected while the bullet was in flight.
                killer = registry.get(self.source)
                if killer is not None:
                    killer.kills += 1
                    event.credited = killer.pid
            self.should_exist = False
            return event

        for construct in constructs:
            if self.source == construct.owner and construct.type != ConstructType.WALL:
                continue
            if not construct.is_collided_with(self.x, self.y, self.hitbox_size):
                continue
            construct.damage(self.damage)
            self.should_exist = False
            return HitEvent(
                source=self.source,
                target_kind="construct",
                target_id=construct.cid,
                damage=self.damage,
                x=self.x,
                y=self.y,
                killed=construct.is_dead(),
            )
        return None

    def to_dict(self) -> dict:
        return {
            "x": self.x,
            "y": self.y,
            "orientation": self.orientation,
            "source": self.source,
        }
