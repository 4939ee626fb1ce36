"""Authoritative arena simulation: entities, combat resolution and the tick driver."""
from .bullet import Bullet
from .combat import Damageable, HitEvent
from .constants import ConstructType
from .construct import Construct
from .entity import Entity
from .event_bus import EventBus
from .intents import BuildIntent, InputIntent, IntentError, JoinIntent, LeaveIntent, parse_intent
from .player import Player
from .praesidium import Praesidium
from .registry import ClientRegistry, RegistryView
from .replication import SnapshotBuilder
from .world import World

__all__ = [
    "World",
    "Entity",
    "Bullet",
    "Player",
    "Construct",
    "Praesidium",
    "ConstructType",
    "Damageable",
    "HitEvent",
    "ClientRegistry",
    "RegistryView",
    "EventBus",
    "SnapshotBuilder",
    "JoinIntent",
    "LeaveIntent",
    "InputIntent",
    "BuildIntent",
    "IntentError",
    "parse_intent",
]
