import json
import random

import pytest

from arena.bullet import Bullet
from arena.constants import ConstructType
from arena.construct import Construct
from arena.intents import BuildIntent, InputIntent, JoinIntent, LeaveIntent
from arena.player import Player
from arena.world import World

DT = 16.0


def _world(cfg=None, **kwargs):
    return World(cfg or {}, rng=random.Random(7), **kwargs)


class BrokenBullet(Bullet):
    def update(self, registry, constructs, dt, bounds=None):
        raise RuntimeError("boom")


class BrokenConstruct(Construct):
    def update(self, registry, dt, now, **bullet_cfg):
        raise RuntimeError("jammed")


class BrokenPlayer(Player):
    def update(self, dt, now, bounds=None):
        raise RuntimeError("desync")


def test_intents_wait_for_tick_boundary():
    world = _world()
    world.submit(JoinIntent(pid="a", name="Ann"))
    assert "a" not in world.registry
    world.tick(DT)
    assert "a" in world.registry
    world.submit(LeaveIntent(pid="a"))
    assert "a" in world.registry
    world.tick(DT)
    assert "a" not in world.registry


def test_duplicate_join_is_ignored():
    world = _world()
    world.submit(JoinIntent(pid="a", name="Ann"))
    world.submit(JoinIntent(pid="a", name="Ann again"))
    world.tick(DT)
    assert len(world.registry) == 1
    assert world.registry.get("a").name == "Ann"


def test_fire_intent_spawns_one_bullet_per_cooldown():
    world = _world()
    world.add_player("a", "Ann", 0.0, 0.0)
    world.submit(InputIntent(pid="a", orientation=0.0, fire=True))
    world.tick(DT)
    assert len(world.bullets) == 1
    assert world.bullets[0].source == "a"
    for _ in range(5):
        world.tick(DT)
    assert len(world.bullets) == 1


def test_bullet_hits_player_and_is_reaped_same_tick():
    world = _world()
    shooter = world.add_player("a", "Ann", 0.0, 0.0)
    victim = world.add_player("b", "Bob", 0.0, -100.0)
    world.submit(InputIntent(pid="a", orientation=0.0, fire=True))
    hits = []
    world.events.subscribe("hit", hits.append)
    for _ in range(10):
        world.tick(DT)
    assert victim.health == victim.max_health - 1
    assert len(hits) == 1 and hits[0].target_id == "b"
    assert world.bullets == []
    assert shooter.kills == 0


def test_update_then_reap_keeps_other_bullets_running():
    world = _world()
    broken = BrokenBullet.create(0.0, 0.0, 0.0, "x")
    good = world.spawn_bullet(0.0, 0.0, 0.0, "x")
    world.bullets.insert(0, broken)
    world.tick(DT)
    assert broken not in world.bullets
    assert good in world.bullets
    assert good.distance_traveled == pytest.approx(Bullet.VELOCITY_MAGNITUDE * DT)


def test_faulting_bullet_is_logged(capsys):
    world = _world()
    world.bullets.append(BrokenBullet.create(0.0, 0.0, 0.0, "x"))
    world.tick(DT)
    assert "[tick] bullet update failed" in capsys.readouterr().out


def test_broadcast_sees_reaped_state():
    seen = []
    world = _world(broadcast=seen.append)
    expiring = world.spawn_bullet(0.0, 0.0, 0.0, "x")
    expiring.distance_traveled = expiring.max_travel_distance
    world.spawn_bullet(0.0, 0.0, 0.0, "y")
    world.tick(DT)
    assert len(seen) == 1
    snap = seen[0]
    assert snap["type"] == "state" and snap["tick"] == 1
    assert [b["source"] for b in snap["bullets"]] == ["y"]
    json.dumps(snap)


def test_broadcast_failure_does_not_abort_tick(capsys):
    def sink(_):
        raise IOError("socket gone")

    world = _world(broadcast=sink)
    world.tick(DT)
    world.tick(DT)
    assert world.tick_count == 2
    assert "broadcast sink failed" in capsys.readouterr().out


def test_build_intent_places_construct_for_living_player():
    world = _world()
    world.add_player("a", "Ann", 0.0, 0.0).praesidia = 7
    world.submit(BuildIntent(pid="a", construct=ConstructType.WALL, x=9999.0, y=10.0))
    world.submit(BuildIntent(pid="ghost", construct=ConstructType.WALL, x=0.0, y=0.0))
    world.tick(DT)
    assert len(world.constructs) == 1
    wall = world.constructs[0]
    assert wall.owner == "a" and wall.type == ConstructType.WALL
    assert wall.x == world.bounds[1] and wall.y == 10.0
    assert world.registry.get("a").praesidia == 2


def test_destroyed_construct_is_reaped():
    world = _world({"construct": {"wall": {"health": 1}}})
    wall = world.add_construct("a", ConstructType.WALL, 0.0, 0.0)
    world.spawn_bullet(0.0, 0.0, 0.0, "b")
    world.tick(DT)
    assert wall.is_dead()
    assert world.constructs == []
    assert world.bullets == []


def test_turret_kill_credits_owner():
    world = _world()
    owner = world.add_player("a", "Ann", 1000.0, 1000.0)
    victim = world.add_player("b", "Bob", 0.0, -200.0)
    victim.health = 1
    world.add_construct("a", ConstructType.TURRET, 0.0, 0.0)
    kills = []
    world.events.subscribe("kill", kills.append)
    for _ in range(20):
        world.tick(DT)
    assert victim.is_dead()
    assert owner.kills == 1
    assert len(kills) == 1 and kills[0].credited == "a"
    assert world.killfeed[-1]["attacker_name"] == "Ann"
    assert world.killfeed[-1]["victim_name"] == "Bob"
    assert world.snapshot()["killfeed"][-1]["victim"] == "b"


def test_shooter_leaving_mid_flight_still_lands_hit():
    world = _world()
    shooter = world.add_player("a", "Ann", 0.0, 0.0)
    victim = world.add_player("b", "Bob", 0.0, -300.0)
    victim.health = 1
    world.submit(InputIntent(pid="a", orientation=0.0, fire=True))
    world.tick(DT)
    world.submit(LeaveIntent(pid="a"))
    for _ in range(30):
        world.tick(DT)
    assert victim.is_dead()
    assert shooter.kills == 0
    assert victim.kills == 0
    assert world.killfeed[-1]["attacker_name"] == "World"


def test_dead_player_respawns_after_delay():
    world = _world({"player": {"respawn_ms": 100.0}})
    player = world.add_player("a", "Ann", 0.0, 0.0)
    player.damage(player.max_health)
    assert player.deaths == 1
    world.tick(DT)
    assert player.is_dead()
    for _ in range(10):
        world.tick(DT)
    assert not player.is_dead()
    assert player.health == player.max_health
    lo, hi = world.bounds
    assert lo <= player.x <= hi and lo <= player.y <= hi


def test_config_overrides_bullet_defaults():
    world = _world({"bullet": {"speed": 1.0, "damage": 3}, "world": {"min": 0.0, "max": 100.0}})
    bullet = world.spawn_bullet(50.0, 50.0, 0.0, "x")
    assert bullet.vy == pytest.approx(-1.0)
    assert bullet.damage == 3
    assert world.bounds == (0.0, 100.0)


def test_same_elapsed_time_for_every_entity():
    world = _world()
    player = world.add_player("a", "Ann", 0.0, 0.0)
    turret = world.add_construct("a", ConstructType.TURRET, 300.0, 300.0)
    bullet = world.spawn_bullet(0.0, 0.0, 0.0, "x")
    world.tick(25.0)
    assert player.body.update_time_difference == 25.0
    assert turret.body.update_time_difference == 25.0
    assert bullet.body.update_time_difference == 25.0


def test_faulting_construct_is_logged_and_reaped(capsys):
    world = _world()
    broken = BrokenConstruct(99, "a", ConstructType.TURRET, 0.0, 0.0)
    world.constructs.append(broken)
    wall = world.add_construct("a", ConstructType.WALL, 400.0, 400.0)
    bullet = world.spawn_bullet(-400.0, -400.0, 0.0, "x")
    world.tick(DT)
    assert "[tick] construct 99 update failed" in capsys.readouterr().out
    assert broken not in world.constructs
    assert wall in world.constructs
    assert bullet.distance_traveled == pytest.approx(Bullet.VELOCITY_MAGNITUDE * DT)


def test_faulting_player_is_logged_and_kept(capsys):
    world = _world()
    world.registry.add(BrokenPlayer("a", "Ann", 0.0, 0.0))
    healthy = world.add_player("b", "Bob", 300.0, 300.0)
    bullet = world.spawn_bullet(-400.0, -400.0, 0.0, "x")
    world.tick(DT)
    assert "[tick] player a update failed" in capsys.readouterr().out
    assert "a" in world.registry
    assert healthy.body.update_time_difference == DT
    assert bullet.distance_traveled == pytest.approx(Bullet.VELOCITY_MAGNITUDE * DT)
    assert world.tick_count == 1


def test_build_without_praesidia_is_rejected(capsys):
    world = _world()
    player = world.add_player("a", "Ann", 0.0, 0.0)
    player.praesidia = world.construct_cost(ConstructType.TURRET) - 1
    world.submit(BuildIntent(pid="a", construct=ConstructType.TURRET, x=10.0, y=10.0))
    world.tick(DT)
    assert world.constructs == []
    assert player.praesidia == world.construct_cost(ConstructType.TURRET) - 1
    assert "cannot afford turret" in capsys.readouterr().out


def test_build_costs_come_from_config():
    world = _world({"construct": {"turret": {"cost": 2}}})
    player = world.add_player("a", "Ann", 0.0, 0.0)
    player.praesidia = 5
    world.submit(BuildIntent(pid="a", construct=ConstructType.TURRET, x=10.0, y=10.0))
    world.submit(BuildIntent(pid="a", construct=ConstructType.TURRET, x=20.0, y=10.0))
    world.submit(BuildIntent(pid="a", construct=ConstructType.TURRET, x=30.0, y=10.0))
    world.tick(DT)
    assert len(world.constructs) == 2
    assert player.praesidia == 1


def test_overlapping_player_collects_praesidium():
    world = _world()
    first = world.add_player("a", "Ann", 0.0, 0.0)
    second = world.add_player("b", "Bob", 5.0, 0.0)
    pickup = world.add_praesidium(10.0, 0.0, quantity=4)
    far = world.add_praesidium(2000.0, 2000.0, quantity=3)
    pickups = []
    world.events.subscribe("pickup", lambda player, p: pickups.append((player.pid, p.pkid)))
    snap = world.tick(DT)
    assert first.praesidia == 4
    assert second.praesidia == 0
    assert world.praesidia == [far]
    assert pickups == [("a", pickup.pkid)]
    assert [p["id"] for p in snap["praesidia"]] == [far.pkid]
    assert snap["players"][0]["praesidia"] == 4


def test_dead_player_cannot_collect_praesidium():
    world = _world()
    corpse = world.add_player("a", "Ann", 0.0, 0.0)
    corpse.damage(corpse.max_health)
    world.add_praesidium(0.0, 0.0, quantity=2)
    world.tick(DT)
    assert corpse.praesidia == 0
    assert len(world.praesidia) == 1


def test_praesidia_spawn_on_interval_up_to_cap():
    world = _world({"praesidium": {"spawn_interval_ms": 32.0, "max_count": 3,
                                   "quantity_min": 2, "quantity_max": 4}})
    world.tick(DT)
    assert world.praesidia == []
    for _ in range(20):
        world.tick(DT)
    assert len(world.praesidia) == 3
    lo, hi = world.bounds
    for pickup in world.praesidia:
        assert 2 <= pickup.quantity <= 4
        assert lo <= pickup.x <= hi and lo <= pickup.y <= hi
