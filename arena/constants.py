# arena/constants.py
from enum import IntEnum


class ConstructType(IntEnum):
    """Build-menu slots. Slots 1, 2, 4 and 5 are unassigned."""
    TURRET = 0
    WALL = 3


# World bounds in pixels, centred on the origin.
WORLD_MIN = -2500.0
WORLD_MAX = 2500.0

# Bullet defaults. Speed is in pixels per millisecond, distance in pixels,
# damage in health points, hitbox is a radius in pixels.
BULLET_VELOCITY_MAGNITUDE = 0.85
BULLET_DEFAULT_DAMAGE = 1
BULLET_MAX_TRAVEL_DISTANCE = 1000.0
BULLET_DEFAULT_HITBOX_SIZE = 4.0

# Player defaults (times in milliseconds)
PLAYER_MAX_HEALTH = 10
PLAYER_SPEED = 0.4
PLAYER_HITBOX_SIZE = 32.0
PLAYER_SHOT_COOLDOWN_MS = 800.0
PLAYER_RESPAWN_MS = 3000.0

# Construct defaults keyed by type
CONSTRUCT_HEALTH = {
    ConstructType.TURRET: 20,
    ConstructType.WALL: 50,
}
CONSTRUCT_HITBOX_SIZE = 32.0
TURRET_RANGE = 500.0
TURRET_SHOT_COOLDOWN_MS = 1200.0

KILLFEED_MAX = 6
KILLFEED_TTL = 4.0  # seconds

# Praesidia: the build currency. Players pick it up from the map and spend
# it on constructs.
CONSTRUCT_COST = {
    ConstructType.TURRET: 10,
    ConstructType.WALL: 5,
}
PLAYER_START_PRAESIDIA = 0
PRAESIDIUM_HITBOX_SIZE = 16.0
PRAESIDIUM_MAX_COUNT = 12
PRAESIDIUM_SPAWN_INTERVAL_MS = 2000.0
PRAESIDIUM_QUANTITY_MIN = 1
PRAESIDIUM_QUANTITY_MAX = 5
