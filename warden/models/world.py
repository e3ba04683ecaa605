"""
World Models for Warden.

Value types describing what the agent observes in the game world:
points, entities, players, inventory items, movement goals and the
events a world client emits.

These are snapshots of state owned by the external world client.
"""

from __future__ import annotations

import math
from enum import Enum

from pydantic import BaseModel, Field, model_validator


class Vec3(BaseModel):
    """A point in the 3D world."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def distance_to(self, other: Vec3) -> float:
        """Euclidean distance to another point."""
        return math.sqrt(
            (self.x - other.x) ** 2 + (self.y - other.y) ** 2 + (self.z - other.z) ** 2
        )

    def __str__(self) -> str:
        return f"({self.x:g}, {self.y:g}, {self.z:g})"


class EntityKind(str, Enum):
    """Broad categories of world entities."""

    PLAYER = "player"
    HOSTILE = "hostile"
    MOB = "mob"
    OBJECT = "object"
    OTHER = "other"


class Entity(BaseModel):
    """A live entity in the world (player body, mob, dropped item...)."""

    id: int
    name: str = ""
    kind: EntityKind = EntityKind.OTHER
    position: Vec3 = Field(default_factory=Vec3)

    def is_hostile(self) -> bool:
        """Check if this entity is a hostile mob."""
        return self.kind == EntityKind.HOSTILE


class Player(BaseModel):
    """
    A player known to the server.

    `entity` is None while the player is out of the agent's view.
    """

    username: str = Field(min_length=1)
    display_name: str = ""
    entity: Entity | None = None

    @model_validator(mode="after")
    def default_display_name(self) -> Player:
        if not self.display_name:
            self.display_name = self.username
        return self


class Item(BaseModel):
    """A stack of items in the agent's inventory."""

    type: int = Field(ge=0, description="Numeric item type id")
    name: str = Field(min_length=1)
    count: int = Field(default=1, ge=1)
    slot: int | None = Field(default=None, description="Inventory slot index")


class GoalNear(BaseModel):
    """Movement goal: get within `radius` of `position`."""

    position: Vec3
    radius: float = Field(default=1.0, ge=0)


class WorldEventType(str, Enum):
    """Events a world client emits to the agent."""

    SPAWN = "spawn"
    CHAT = "chat"
    PHYSICS_TICK = "physics_tick"
    END = "end"

    # Automatic consumption notifications
    AUTOEAT_STARTED = "autoeat_started"
    AUTOEAT_FINISHED = "autoeat_finished"
    AUTOEAT_ERROR = "autoeat_error"


class WorldEvent(BaseModel):
    """A single event from the world client's event stream."""

    type: WorldEventType

    # chat
    username: str | None = None
    message: str | None = None

    # autoeat
    item: str | None = None
    offhand: bool = False
    error: str | None = None

    # end
    reason: str | None = None


def chat_event(username: str, message: str) -> WorldEvent:
    """Factory function to create a chat event."""
    return WorldEvent(type=WorldEventType.CHAT, username=username, message=message)


def tick_event() -> WorldEvent:
    """Factory function to create a physics tick event."""
    return WorldEvent(type=WorldEventType.PHYSICS_TICK)
