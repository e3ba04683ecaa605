"""
Collaborator interface definitions for Warden.

Uses Protocol classes to define the contract for the external subsystems
the agent drives. Implementations can wrap a real game protocol client or
the in-memory fakes used for testing.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from warden.engine.models import ConnectionConfig
    from warden.models import Entity, GoalNear, Item, Player, WorldEvent


class MovementCollaborator(Protocol):
    """
    Pathfinding capability.

    Holds a single active goal; setting a new goal replaces the old one.
    """

    @property
    def goal(self) -> GoalNear | None:
        """The currently active goal."""
        ...

    def set_goal(self, goal: GoalNear | None) -> None:
        """Replace the active goal, or clear it with None."""
        ...


class CombatCollaborator(Protocol):
    """Combat capability. Owns the current attack target."""

    @property
    def target(self) -> Entity | None:
        """The entity currently being attacked, if any."""
        ...

    def attack(self, entity: Entity) -> Awaitable[None]:
        """Start attacking an entity; completes once the attack is under way."""
        ...

    def stop(self) -> Awaitable[None]:
        """Stop attacking; completes once combat has wound down."""
        ...


class InventoryCollaborator(Protocol):
    """Inventory capability."""

    def items(self) -> list[Item]:
        """All item stacks currently held."""
        ...

    def find_item(self, name: str) -> Item | None:
        """First stack whose name matches exactly."""
        ...

    @property
    def held_item(self) -> Item | None:
        """The item in the main hand."""
        ...

    def equipped(self, destination: str) -> Item | None:
        """The item in an equipment slot."""
        ...

    def equip(self, item: Item, destination: str) -> Awaitable[None]:
        """Move an item into an equipment slot."""
        ...

    def unequip(self, destination: str) -> Awaitable[None]:
        """Empty an equipment slot."""
        ...

    def toss(self, item_type: int, count: int) -> Awaitable[None]:
        """Drop `count` items of a type on the ground."""
        ...


class ConsumptionCollaborator(Protocol):
    """Automatic eating capability."""

    @property
    def enabled(self) -> bool:
        ...

    def enable(self) -> None:
        ...

    def disable(self) -> None:
        ...


class WorldClient(Protocol):
    """
    A connected game client.

    Exposes the agent's own state, the visible world, the collaborators,
    and an ordered stream of world events. The stream ends when the
    connection does.
    """

    @property
    def username(self) -> str:
        """The agent's own username."""
        ...

    @property
    def entity(self) -> Entity:
        """The agent's own entity."""
        ...

    @property
    def players(self) -> dict[str, Player]:
        """Players known to the server, keyed by username."""
        ...

    def entities(self) -> list[Entity]:
        """Entities currently in view."""
        ...

    movement: MovementCollaborator
    combat: CombatCollaborator
    inventory: InventoryCollaborator
    consumption: ConsumptionCollaborator

    def chat(self, message: str) -> None:
        """Send a chat message."""
        ...

    def load_plugin(self, name: str) -> None:
        """Register a capability plugin with the client."""
        ...

    def events(self) -> AsyncIterator[WorldEvent]:
        """Iterate world events in arrival order."""
        ...

    async def close(self) -> None:
        """Disconnect."""
        ...


ClientFactory = Callable[["ConnectionConfig"], Awaitable[WorldClient]]
