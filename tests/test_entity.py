import pytest

from arena.entity import Entity
from arena.combat import circle_collide


def test_update_records_elapsed_and_moves():
    body = Entity(x=1.0, y=2.0, vx=0.5, vy=-0.25)
    body.update(16.0)
    assert body.update_time_difference == 16.0
    assert body.last_update_time == 16.0
    assert body.x == pytest.approx(9.0)
    assert body.y == pytest.approx(-2.0)
    body.update(4.0)
    assert body.update_time_difference == 4.0
    assert body.last_update_time == 20.0


def test_negative_elapsed_is_clamped():
    body = Entity(vx=1.0)
    body.update(-5.0)
    assert body.update_time_difference == 0.0
    assert body.x == 0.0


def test_circle_overlap_includes_touching():
    body = Entity(x=0.0, y=0.0, hitbox_size=10.0)
    assert body.is_collided_with(14.0, 0.0, 4.0)
    assert not body.is_collided_with(14.01, 0.0, 4.0)
    assert circle_collide(0.0, 0.0, 1.0, 3.0, 4.0, 4.0)
    assert not circle_collide(0.0, 0.0, 1.0, 3.0, 4.0, 3.9)
