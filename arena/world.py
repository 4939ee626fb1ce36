"""Tick driver: owns every live entity and advances the arena one step at a time."""
from __future__ import annotations

import random
from typing import Any, Callable, Dict, List, Optional, Tuple

from engine.config import lookup

from .bullet import Bullet
from .combat import HitEvent
from .constants import (
    BULLET_DEFAULT_DAMAGE,
    BULLET_DEFAULT_HITBOX_SIZE,
    BULLET_MAX_TRAVEL_DISTANCE,
    BULLET_VELOCITY_MAGNITUDE,
    CONSTRUCT_COST,
    CONSTRUCT_HEALTH,
    CONSTRUCT_HITBOX_SIZE,
    KILLFEED_MAX,
    KILLFEED_TTL,
    PLAYER_HITBOX_SIZE,
    PLAYER_MAX_HEALTH,
    PLAYER_RESPAWN_MS,
    PLAYER_SHOT_COOLDOWN_MS,
    PLAYER_SPEED,
    PLAYER_START_PRAESIDIA,
    PRAESIDIUM_HITBOX_SIZE,
    PRAESIDIUM_MAX_COUNT,
    PRAESIDIUM_QUANTITY_MAX,
    PRAESIDIUM_QUANTITY_MIN,
    PRAESIDIUM_SPAWN_INTERVAL_MS,
    TURRET_RANGE,
    TURRET_SHOT_COOLDOWN_MS,
    WORLD_MAX,
    WORLD_MIN,
    ConstructType,
)
from .construct import Construct
from .event_bus import EventBus
from .intents import BuildIntent, InputIntent, Intent, IntentQueue, JoinIntent, LeaveIntent
from .player import Player
from .praesidium import Praesidium
from .registry import ClientRegistry, RegistryView
from .replication import SnapshotBuilder
from .transform import clamp_to_world

BroadcastSink = Callable[[Dict[str, Any]], None]


class World:
    """Authoritative simulation state plus the fixed-step update loop.

    Network tasks only call :meth:`submit`; everything else happens inside
    :meth:`tick`, which applies queued intents, updates players, hands out
    praesidium pickups, updates bullets and constructs, reaps dead entities,
    tops up the pickups and passes a snapshot to the broadcast sink. Times
    are milliseconds of simulated time.
    """

    def __init__(
        self,
        cfg: Optional[Dict[str, Any]] = None,
        *,
        broadcast: Optional[BroadcastSink] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.cfg = cfg or {}
        self.bounds = (
            float(lookup(self.cfg, "world.min", WORLD_MIN)),
            float(lookup(self.cfg, "world.max", WORLD_MAX)),
        )
        self.bullet_cfg = {
            "speed": float(lookup(self.cfg, "bullet.speed", BULLET_VELOCITY_MAGNITUDE)),
            "damage": lookup(self.cfg, "bullet.damage", BULLET_DEFAULT_DAMAGE),
            "hitbox_size": float(lookup(self.cfg, "bullet.hitbox_size", BULLET_DEFAULT_HITBOX_SIZE)),
            "max_travel_distance": float(
                lookup(self.cfg, "bullet.max_travel_distance", BULLET_MAX_TRAVEL_DISTANCE)
            ),
        }
        self.broadcast = broadcast
        self.rng = rng or random.Random(lookup(self.cfg, "world.seed"))

        self.registry = ClientRegistry()
        self.bullets: List[Bullet] = []
        self.constructs: List[Construct] = []
        self.praesidia: List[Praesidium] = []
        self.praesidium_cfg = {
            "hitbox_size": float(lookup(self.cfg, "praesidium.hitbox_size", PRAESIDIUM_HITBOX_SIZE)),
            "max_count": int(lookup(self.cfg, "praesidium.max_count", PRAESIDIUM_MAX_COUNT)),
            "spawn_interval_ms": float(
                lookup(self.cfg, "praesidium.spawn_interval_ms", PRAESIDIUM_SPAWN_INTERVAL_MS)
            ),
            "quantity_min": int(lookup(self.cfg, "praesidium.quantity_min", PRAESIDIUM_QUANTITY_MIN)),
            "quantity_max": int(lookup(self.cfg, "praesidium.quantity_max", PRAESIDIUM_QUANTITY_MAX)),
        }
        self.intents = IntentQueue()
        self.events = EventBus()
        self.snapshots = SnapshotBuilder(
            killfeed_max=int(lookup(self.cfg, "hud.killfeed_max", KILLFEED_MAX)),
            killfeed_ttl=float(lookup(self.cfg, "hud.killfeed_ttl", KILLFEED_TTL)),
        )
        # each item: {"t","attacker","attacker_name","victim","victim_name"}
        self.killfeed: List[Dict[str, Any]] = []

        self.time_ms = 0.0
        self.tick_count = 0
        self._next_cid = 1
        self._next_pkid = 1
        self._next_praesidium_at = self.praesidium_cfg["spawn_interval_ms"]

    # ---------- Intake ----------
    def submit(self, intent: Intent) -> None:
        """Queue an intent; it takes effect at the start of the next tick."""
        self.intents.put(intent)

    # ---------- Entities ----------
    def random_position(self) -> Tuple[float, float]:
        lo, hi = self.bounds
        return self.rng.uniform(lo, hi), self.rng.uniform(lo, hi)

    def add_player(self, pid: str, name: str, x: Optional[float] = None, y: Optional[float] = None) -> Player:
        if x is None or y is None:
            x, y = self.random_position()
        player = Player(
            pid,
            name,
            x,
            y,
            max_health=int(lookup(self.cfg, "player.max_health", PLAYER_MAX_HEALTH)),
            speed=float(lookup(self.cfg, "player.speed", PLAYER_SPEED)),
            hitbox_size=float(lookup(self.cfg, "player.hitbox_size", PLAYER_HITBOX_SIZE)),
            shot_cooldown=float(lookup(self.cfg, "player.shot_cooldown_ms", PLAYER_SHOT_COOLDOWN_MS)),
            respawn_delay=float(lookup(self.cfg, "player.respawn_ms", PLAYER_RESPAWN_MS)),
            praesidia=int(lookup(self.cfg, "player.start_praesidia", PLAYER_START_PRAESIDIA)),
        )
        self.registry.add(player)
        self.events.emit("join", player)
        return player

    def remove_player(self, pid: str) -> Optional[Player]:
        player = self.registry.remove(pid)
        if player is not None:
            self.events.emit("leave", player)
        return player

    def add_construct(self, owner: str, kind: ConstructType, x: float, y: float) -> Construct:
        kind = ConstructType(kind)
        section = kind.name.lower()
        x, y = clamp_to_world(x, y, self.bounds)
        construct = Construct(
            self._next_cid,
            owner,
            kind,
            x,
            y,
            health=lookup(self.cfg, f"construct.{section}.health", CONSTRUCT_HEALTH.get(kind, 1)),
            hitbox_size=float(lookup(self.cfg, "construct.hitbox_size", CONSTRUCT_HITBOX_SIZE)),
            fire_range=float(lookup(self.cfg, "construct.turret.range", TURRET_RANGE)),
            shot_cooldown=float(lookup(self.cfg, "construct.turret.shot_cooldown_ms", TURRET_SHOT_COOLDOWN_MS)),
        )
        self._next_cid += 1
        self.constructs.append(construct)
        return construct

    def construct_cost(self, kind: ConstructType) -> int:
        kind = ConstructType(kind)
        return int(lookup(self.cfg, f"construct.{kind.name.lower()}.cost", CONSTRUCT_COST.get(kind, 0)))

    def add_praesidium(
        self, x: Optional[float] = None, y: Optional[float] = None, quantity: Optional[int] = None
    ) -> Praesidium:
        if x is None or y is None:
            x, y = self.random_position()
        if quantity is None:
            lo = self.praesidium_cfg["quantity_min"]
            quantity = self.rng.randint(lo, max(lo, self.praesidium_cfg["quantity_max"]))
        pickup = Praesidium(self._next_pkid, x, y, quantity, hitbox_size=self.praesidium_cfg["hitbox_size"])
        self._next_pkid += 1
        self.praesidia.append(pickup)
        return pickup

    def spawn_bullet(self, x: float, y: float, direction: float, source: str) -> Bullet:
        bullet = Bullet.create(x, y, direction, source, **self.bullet_cfg)
        self.bullets.append(bullet)
        return bullet

    # ---------- Main step ----------
    def tick(self, dt: float) -> Dict[str, Any]:
        """Advance the whole arena by ``dt`` milliseconds and return the snapshot."""
        dt = max(0.0, float(dt))
        self.tick_count += 1
        self.time_ms += dt

        self._apply_intents()
        self._fire_weapons()

        # Stable for every entity update in this tick
        view = self.registry.view()

        self._update_players(dt, view)
        self._collect_praesidia(view)
        self._update_bullets(dt, view)
        self._update_constructs(dt, view)
        self._reap()
        self._spawn_praesidia()

        snapshot = self.snapshot()
        if self.broadcast is not None:
            try:
                self.broadcast(snapshot)
            except Exception as exc:
                print(f"[tick] broadcast sink failed: {exc!r}")
        return snapshot

    def snapshot(self) -> Dict[str, Any]:
        return self.snapshots.build(
            now_ms=self.time_ms,
            tick=self.tick_count,
            players=self.registry.values(),
            bullets=self.bullets,
            constructs=self.constructs,
            killfeed=self.killfeed,
            praesidia=self.praesidia,
        )

    # ---------- Phases ----------
    def _apply_intents(self) -> None:
        for intent in self.intents.drain():
            if isinstance(intent, JoinIntent):
                if intent.pid in self.registry:
                    continue
                self.add_player(intent.pid, intent.name)
            elif isinstance(intent, LeaveIntent):
                self.remove_player(intent.pid)
            elif isinstance(intent, InputIntent):
                player = self.registry.get(intent.pid)
                if player is None:
                    continue
                player.apply_input(
                    intent.up, intent.down, intent.left, intent.right, intent.orientation, intent.fire
                )
            elif isinstance(intent, BuildIntent):
                player = self.registry.get(intent.pid)
                if player is None or player.is_dead():
                    continue
                cost = self.construct_cost(intent.construct)
                if not player.spend(cost):
                    print(f"[build] pid={intent.pid} cannot afford {intent.construct.name.lower()} "
                          f"({player.praesidia}/{cost})")
                    continue
                self.add_construct(intent.pid, intent.construct, intent.x, intent.y)

    def _fire_weapons(self) -> None:
        for player in self.registry.values():
            if not player.firing:
                continue
            bullet = player.fire(self.time_ms, **self.bullet_cfg)
            if bullet is not None:
                self.bullets.append(bullet)

    def _update_players(self, dt: float, view: RegistryView) -> None:
        for player in view.values():
            try:
                player.update(dt, self.time_ms, self.bounds)
                if player.ready_to_respawn(self.time_ms):
                    player.respawn(*self.random_position())
            except Exception as exc:
                # Players belong to the registry; keep them and carry on.
                print(f"[tick] player {player.pid} update failed: {exc!r}")

    def _collect_praesidia(self, view: RegistryView) -> None:
        for pickup in self.praesidia:
            if not pickup.should_exist:
                continue
            # First living player in registry order takes it.
            for player in view.values():
                if player.is_dead() or not pickup.is_collided_with(player.x, player.y, player.hitbox_size):
                    continue
                player.collect(pickup.quantity)
                pickup.should_exist = False
                self.events.emit("pickup", player, pickup)
                break

    def _spawn_praesidia(self) -> None:
        if self.time_ms < self._next_praesidium_at:
            return
        self._next_praesidium_at = self.time_ms + self.praesidium_cfg["spawn_interval_ms"]
        if len(self.praesidia) < self.praesidium_cfg["max_count"]:
            self.add_praesidium()

    def _update_bullets(self, dt: float, view: RegistryView) -> None:
        for bullet in self.bullets:
            if not bullet.should_exist:
                continue
            try:
                event = bullet.update(view, self.constructs, dt, self.bounds)
            except Exception as exc:
                print(f"[tick] bullet update failed: {exc!r}")
                bullet.should_exist = False
                continue
            if event is not None:
                self._on_hit(event, view)

    def _update_constructs(self, dt: float, view: RegistryView) -> None:
        fired: List[Bullet] = []
        for construct in self.constructs:
            if not construct.should_exist:
                continue
            try:
                fired.extend(construct.update(view, dt, self.time_ms, **self.bullet_cfg))
            except Exception as exc:
                print(f"[tick] construct {construct.cid} update failed: {exc!r}")
                construct.should_exist = False
        # New bullets start moving on the next tick.
        self.bullets.extend(fired)

    def _reap(self) -> None:
        self.bullets = [b for b in self.bullets if b.should_exist]
        for construct in self.constructs:
            if construct.is_dead():
                construct.should_exist = False
        self.constructs = [c for c in self.constructs if c.should_exist]
        self.praesidia = [p for p in self.praesidia if p.should_exist]

    # ---------- Events ----------
    def _on_hit(self, event: HitEvent, view: RegistryView) -> None:
        self.events.emit("hit", event)
        if not (event.killed and event.target_kind == "player"):
            return
        attacker = view.get(event.source)
        victim = view.get(event.target_id)
        self.killfeed.append({
            "t": self.time_ms,
            "attacker": event.source,
            "attacker_name": attacker.name if attacker else "World",
            "victim": event.target_id,
            "victim_name": victim.name if victim else "",
        })
        max_keep = max(12, self.snapshots.killfeed_max * 3)
        if len(self.killfeed) > max_keep:
            self.killfeed = self.killfeed[-max_keep:]
        self.events.emit("kill", event)
