"""
In-memory implementations of collaborator interfaces.

These implementations keep world state in plain Python objects, making
tests fast and isolated from a real game server. The offline sandbox
drives the same classes from the console.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Awaitable
from itertools import count

from warden.models import (
    Entity,
    EntityKind,
    GoalNear,
    Item,
    Player,
    Vec3,
    WorldEvent,
    WorldEventType,
)


class InMemoryMovement:
    """Movement collaborator that records every goal it is given."""

    def __init__(self) -> None:
        self._goal: GoalNear | None = None
        self.history: list[GoalNear | None] = []

    @property
    def goal(self) -> GoalNear | None:
        return self._goal

    def set_goal(self, goal: GoalNear | None) -> None:
        self._goal = goal
        self.history.append(goal)

    @property
    def clear_count(self) -> int:
        """How many times the goal was cleared."""
        return sum(1 for goal in self.history if goal is None)


class InMemoryCombat:
    """
    Combat collaborator.

    `attack` sets the target immediately; `stop` clears it when its
    completion runs, unless `stop_succeeds` is False.
    """

    def __init__(self) -> None:
        self._target: Entity | None = None
        self.attacked: list[Entity] = []
        self.stop_calls = 0
        self.stop_succeeds = True

    @property
    def target(self) -> Entity | None:
        return self._target

    def attack(self, entity: Entity) -> Awaitable[None]:
        self._target = entity
        self.attacked.append(entity)
        return self._settle()

    def stop(self) -> Awaitable[None]:
        self.stop_calls += 1
        return self._stop()

    def target_lost(self) -> None:
        """The current target died or escaped."""
        self._target = None

    async def _settle(self) -> None:
        await asyncio.sleep(0)

    async def _stop(self) -> None:
        await asyncio.sleep(0)
        if self.stop_succeeds:
            self._target = None


class InMemoryInventory:
    """
    Inventory collaborator backed by a list of stacks and a slot table.

    Equipped items stay listed among the stacks. `equip_succeeds` and
    `unequip_succeeds` let tests simulate a server that silently ignores
    the request.
    """

    def __init__(self, items: list[Item] | None = None) -> None:
        self._items: list[Item] = list(items or [])
        self._slots: dict[str, Item] = {}
        self.equip_succeeds = True
        self.unequip_succeeds = True
        self.toss_fails = False
        self.equip_calls: list[tuple[str, str]] = []
        self.unequip_calls: list[str] = []
        self.toss_calls: list[tuple[int, int]] = []

    def add(self, item: Item) -> Item:
        self._items.append(item)
        return item

    def items(self) -> list[Item]:
        return list(self._items)

    def find_item(self, name: str) -> Item | None:
        for item in self._items:
            if item.name == name:
                return item
        return None

    @property
    def held_item(self) -> Item | None:
        return self._slots.get("hand")

    def equipped(self, destination: str) -> Item | None:
        return self._slots.get(destination)

    def equip(self, item: Item, destination: str) -> Awaitable[None]:
        self.equip_calls.append((item.name, destination))
        return self._equip(item, destination)

    def unequip(self, destination: str) -> Awaitable[None]:
        self.unequip_calls.append(destination)
        return self._unequip(destination)

    def toss(self, item_type: int, count: int) -> Awaitable[None]:
        self.toss_calls.append((item_type, count))
        return self._toss(item_type, count)

    async def _equip(self, item: Item, destination: str) -> None:
        await asyncio.sleep(0)
        if self.equip_succeeds:
            self._slots[destination] = item

    async def _unequip(self, destination: str) -> None:
        await asyncio.sleep(0)
        if self.unequip_succeeds:
            self._slots.pop(destination, None)

    async def _toss(self, item_type: int, count: int) -> None:
        await asyncio.sleep(0)
        if self.toss_fails:
            raise RuntimeError("Server rejected the toss")

        held = sum(item.count for item in self._items if item.type == item_type)
        if count > held:
            raise ValueError(f"Cannot toss {count} items, only {held} held")

        remaining = count
        for item in list(self._items):
            if item.type != item_type or remaining == 0:
                continue
            taken = min(item.count, remaining)
            remaining -= taken
            if taken == item.count:
                self._items.remove(item)
                for slot, equipped in list(self._slots.items()):
                    if equipped is item:
                        del self._slots[slot]
            else:
                item.count -= taken


class InMemoryConsumption:
    """Automatic eating collaborator that just tracks its switch."""

    def __init__(self) -> None:
        self._enabled = True
        self.enable_calls = 0
        self.disable_calls = 0

    @property
    def enabled(self) -> bool:
        return self._enabled

    def enable(self) -> None:
        self.enable_calls += 1
        self._enabled = True

    def disable(self) -> None:
        self.disable_calls += 1
        self._enabled = False


class InMemoryWorldClient:
    """
    In-memory implementation of WorldClient.

    Players and entities are added by the caller; events are pushed onto
    a queue and consumed in order by `events()`.
    """

    def __init__(self, username: str = "warden", position: Vec3 | None = None) -> None:
        self._ids = count(1)
        self._username = username
        self._entity = Entity(
            id=0, name=username, kind=EntityKind.PLAYER, position=position or Vec3()
        )
        self._players: dict[str, Player] = {
            username: Player(username=username, entity=self._entity)
        }
        self._entities: dict[int, Entity] = {}
        self._queue: asyncio.Queue[WorldEvent] = asyncio.Queue()

        self.movement = InMemoryMovement()
        self.combat = InMemoryCombat()
        self.inventory = InMemoryInventory()
        self.consumption = InMemoryConsumption()

        self.sent: list[str] = []
        self.plugins: list[str] = []
        self.closed = False

    # World state

    @property
    def username(self) -> str:
        return self._username

    @property
    def entity(self) -> Entity:
        return self._entity

    @property
    def players(self) -> dict[str, Player]:
        return self._players

    def entities(self) -> list[Entity]:
        return list(self._entities.values())

    def add_player(
        self,
        username: str,
        position: Vec3 | None = None,
        display_name: str = "",
    ) -> Player:
        """Add a player; it is visible only when a position is given."""
        entity = None
        if position is not None:
            entity = self.add_entity(username, EntityKind.PLAYER, position)
        player = Player(username=username, display_name=display_name, entity=entity)
        self._players[username] = player
        return player

    def hide_player(self, username: str) -> None:
        """Move a player out of view."""
        player = self._players[username]
        if player.entity is not None:
            self._entities.pop(player.entity.id, None)
            player.entity = None

    def add_entity(self, name: str, kind: EntityKind, position: Vec3) -> Entity:
        entity = Entity(id=next(self._ids), name=name, kind=kind, position=position)
        self._entities[entity.id] = entity
        return entity

    def remove_entity(self, entity_id: int) -> None:
        entity = self._entities.pop(entity_id, None)
        if entity is not None and self.combat.target is entity:
            self.combat.target_lost()

    def add_item(self, name: str, count: int = 1, item_type: int | None = None) -> Item:
        item_type = item_type if item_type is not None else next(self._ids)
        return self.inventory.add(Item(type=item_type, name=name, count=count))

    # Client surface

    def chat(self, message: str) -> None:
        self.sent.append(message)

    def load_plugin(self, name: str) -> None:
        self.plugins.append(name)

    def push(self, event: WorldEvent) -> None:
        """Queue an event for the consumer."""
        self._queue.put_nowait(event)

    def disconnect(self, reason: str = "disconnected") -> None:
        self.push(WorldEvent(type=WorldEventType.END, reason=reason))

    async def events(self) -> AsyncIterator[WorldEvent]:
        while True:
            event = await self._queue.get()
            yield event
            if event.type == WorldEventType.END:
                return

    async def close(self) -> None:
        if not self.closed:
            self.closed = True
            self.disconnect("closed")
