"""Authoritative player state."""
from __future__ import annotations

from typing import Any, Dict, Optional

from .bullet import Bullet
from .constants import (
    PLAYER_HITBOX_SIZE,
    PLAYER_MAX_HEALTH,
    PLAYER_RESPAWN_MS,
    PLAYER_SHOT_COOLDOWN_MS,
    PLAYER_SPEED,
    PLAYER_START_PRAESIDIA,
    WORLD_MAX,
    WORLD_MIN,
)
from .entity import Entity, body_property
from .transform import Bounds, clamp_to_world, normalized, wrap_pi


class Player:
    """A connected player: movement intent, health, and scoreboard counters."""

    x = body_property("x")
    y = body_property("y")
    vx = body_property("vx")
    vy = body_property("vy")
    hitbox_size = body_property("hitbox_size")

    def __init__(
        self,
        pid: str,
        name: str,
        x: float = 0.0,
        y: float = 0.0,
        *,
        max_health: int = PLAYER_MAX_HEALTH,
        speed: float = PLAYER_SPEED,
        hitbox_size: float = PLAYER_HITBOX_SIZE,
        shot_cooldown: float = PLAYER_SHOT_COOLDOWN_MS,
        respawn_delay: float = PLAYER_RESPAWN_MS,
        praesidia: int = PLAYER_START_PRAESIDIA,
    ) -> None:
        self.pid = pid
        self.name = name
        self.body = Entity(x=x, y=y, hitbox_size=hitbox_size)
        self.orientation = 0.0
        self.speed = speed
        self.max_health = max_health
        self.health = max_health
        self.shot_cooldown = shot_cooldown
        self.respawn_delay = respawn_delay

        # Held keys from the latest input intent
        self.up = False
        self.down = False
        self.left = False
        self.right = False
        self.firing = False

        self.last_shot_time: Optional[float] = None
        self.respawn_at: Optional[float] = None

        # --- Stats for scoreboard ---
        self.kills = 0
        self.deaths = 0

        # Build currency, kept across deaths
        self.praesidia = int(praesidia)

    # --- Damageable ---
    def is_collided_with(self, x: float, y: float, radius: float) -> bool:
        return self.body.is_collided_with(x, y, radius)

    def damage(self, amount: float) -> None:
        was_alive = not self.is_dead()
        self.health -= amount
        if was_alive and self.is_dead():
            self.deaths += 1
            self.vx = 0.0
            self.vy = 0.0

    def is_dead(self) -> bool:
        return self.health <= 0

    # --- Intent ---
    def apply_input(
        self, up: bool, down: bool, left: bool, right: bool, orientation: float, fire: bool = False
    ) -> None:
        self.up, self.down, self.left, self.right = bool(up), bool(down), bool(left), bool(right)
        self.orientation = wrap_pi(orientation)
        self.firing = bool(fire)

    def can_shoot(self, now: float) -> bool:
        if self.is_dead():
            return False
        return self.last_shot_time is None or now - self.last_shot_time >= self.shot_cooldown

    def fire(self, now: float, **bullet_cfg: Any) -> Optional[Bullet]:
        """Spawn a bullet along the current orientation, or None while cooling down."""
        if not self.can_shoot(now):
            return None
        self.last_shot_time = now
        return Bullet.create(self.x, self.y, self.orientation, self.pid, **bullet_cfg)

    # --- Praesidia ---
    def collect(self, quantity: int) -> None:
        self.praesidia += int(quantity)

    def spend(self, cost: int) -> bool:
        """Deduct ``cost`` if affordable; returns whether the payment went through."""
        if cost < 0 or self.praesidia < cost:
            return False
        self.praesidia -= cost
        return True

    # --- Per tick ---
    def update(self, dt: float, now: float, bounds: Bounds = (WORLD_MIN, WORLD_MAX)) -> None:
        if self.is_dead():
            # Velocity was zeroed on death; keep the shared tick bookkeeping.
            self.body.update(dt)
            if self.respawn_at is None:
                self.respawn_at = now + self.respawn_delay
            return

        dx = float(self.right) - float(self.left)
        dy = float(self.down) - float(self.up)
        ux, uy = normalized(dx, dy)
        self.vx = ux * self.speed
        self.vy = uy * self.speed
        self.body.update(dt)
        self.x, self.y = clamp_to_world(self.x, self.y, bounds)

    def ready_to_respawn(self, now: float) -> bool:
        return self.is_dead() and self.respawn_at is not None and now >= self.respawn_at

    def respawn(self, x: float, y: float) -> None:
        self.x, self.y = x, y
        self.vx = self.vy = 0.0
        self.health = self.max_health
        self.respawn_at = None
        self.last_shot_time = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pid": self.pid,
            "name": self.name,
            "x": self.x,
            "y": self.y,
            "orientation": self.orientation,
            "health": self.health,
            "max_health": self.max_health,
            "alive": not self.is_dead(),
            "kills": self.kills,
            "deaths": self.deaths,
            "praesidia": self.praesidia,
        }
