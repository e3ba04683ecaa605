"""
World Data Models for Warden.

Snapshots of state owned by the external world client:
- Points and entities the agent can see
- Players and their (possibly absent) entities
- Inventory items
- Movement goals and world events
"""

from warden.models.world import (
    Entity,
    EntityKind,
    GoalNear,
    Item,
    Player,
    Vec3,
    WorldEvent,
    WorldEventType,
    chat_event,
    tick_event,
)

__all__ = [
    "Entity",
    "EntityKind",
    "GoalNear",
    "Item",
    "Player",
    "Vec3",
    "WorldEvent",
    "WorldEventType",
    "chat_event",
    "tick_event",
]
