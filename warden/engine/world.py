"""
World Query Facade for Warden.

Read-only accessors over the world client's live state. Every call reads
the client afresh; nothing is cached, because the client is the source of
truth and may change between calls.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from warden.engine.models import EquipmentDestination

if TYPE_CHECKING:
    from warden.models import Entity, Item, Player, Vec3
    from warden.world.interfaces import WorldClient


class WorldQuery:
    """Snapshot reads against a connected world client."""

    def __init__(self, client: WorldClient) -> None:
        self.client = client

    @property
    def username(self) -> str:
        """The agent's own username."""
        return self.client.username

    def agent_position(self) -> Vec3:
        """Where the agent currently stands."""
        return self.client.entity.position

    def resolve_visible_player(self, username: str) -> Player | None:
        """
        Find a player that is currently in view.

        Returns:
            The player, guaranteed to have an entity, or None if the player
            is unknown or out of view.
        """
        player = self.client.players.get(username)
        if player is None or player.entity is None:
            return None
        return player

    def current_inventory(self) -> list[tuple[str, int]]:
        """Held item stacks as (name, count) pairs."""
        return [(item.name, item.count) for item in self.client.inventory.items()]

    def find_item(self, name: str) -> Item | None:
        """First stack whose name matches exactly (case-sensitive)."""
        return self.client.inventory.find_item(name)

    def count_item(self, name: str) -> int:
        """Total number held across all stacks with this name."""
        return sum(item.count for item in self.client.inventory.items() if item.name == name)

    def held_item(self) -> Item | None:
        """The item in the main hand."""
        return self.client.inventory.held_item

    def equipped(self, destination: str) -> Item | None:
        if destination == EquipmentDestination.HAND.value:
            return self.held_item()
        return self.client.inventory.equipped(destination)

    def combat_target(self) -> Entity | None:
        """The entity the combat collaborator is engaging, if any."""
        return self.client.combat.target

    def nearest_hostile_within(self, radius: float, from_position: Vec3) -> Entity | None:
        """Closest hostile entity strictly within `radius` of a point."""
        nearest: Entity | None = None
        nearest_distance = radius
        for entity in self.client.entities():
            if not entity.is_hostile():
                continue
            distance = entity.position.distance_to(from_position)
            if distance < nearest_distance:
                nearest = entity
                nearest_distance = distance
        return nearest
