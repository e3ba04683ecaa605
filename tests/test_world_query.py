"""Tests for the world query facade."""

from __future__ import annotations

import pytest

from warden.engine import WorldQuery
from warden.models import EntityKind, Vec3
from warden.world import InMemoryWorldClient


@pytest.fixture
def client() -> InMemoryWorldClient:
    return InMemoryWorldClient(username="warden", position=Vec3(x=0, y=64, z=0))


@pytest.fixture
def world(client: InMemoryWorldClient) -> WorldQuery:
    return WorldQuery(client)


class TestPlayers:
    def test_visible_player_resolves(self, client, world):
        client.add_player("alice", Vec3(x=3, y=64, z=0))
        player = world.resolve_visible_player("alice")
        assert player is not None
        assert player.entity is not None
        assert player.entity.position == Vec3(x=3, y=64, z=0)

    def test_out_of_view_player_does_not_resolve(self, client, world):
        client.add_player("alice")
        assert world.resolve_visible_player("alice") is None

    def test_unknown_player_does_not_resolve(self, world):
        assert world.resolve_visible_player("nobody") is None

    def test_reads_are_live(self, client, world):
        client.add_player("alice", Vec3(x=3, y=64, z=0))
        assert world.resolve_visible_player("alice") is not None
        client.hide_player("alice")
        assert world.resolve_visible_player("alice") is None


class TestInventory:
    def test_current_inventory(self, client, world):
        client.add_item("diamond_sword")
        client.add_item("bread", count=5)
        assert world.current_inventory() == [("diamond_sword", 1), ("bread", 5)]

    def test_find_item_is_exact_and_case_sensitive(self, client, world):
        client.add_item("bread", count=2)
        assert world.find_item("bread") is not None
        assert world.find_item("Bread") is None
        assert world.find_item("brea") is None

    def test_find_item_returns_first_stack(self, client, world):
        first = client.add_item("bread", count=2, item_type=7)
        client.add_item("bread", count=3, item_type=7)
        assert world.find_item("bread") is first

    def test_count_item_sums_stacks(self, client, world):
        client.add_item("bread", count=2, item_type=7)
        client.add_item("bread", count=3, item_type=7)
        assert world.count_item("bread") == 5
        assert world.count_item("apple") == 0

    @pytest.mark.asyncio
    async def test_held_item_reads_main_hand(self, client, world):
        sword = client.add_item("diamond_sword")
        helmet = client.add_item("iron_helmet")
        assert world.held_item() is None

        await client.inventory.equip(sword, "hand")
        await client.inventory.equip(helmet, "head")

        assert world.held_item() is sword
        assert world.equipped("hand") is sword
        assert world.equipped("head") is helmet


class TestHostiles:
    def test_nearest_hostile_within_radius(self, client, world):
        client.add_entity("zombie", EntityKind.HOSTILE, Vec3(x=10, y=64, z=0))
        near = client.add_entity("skeleton", EntityKind.HOSTILE, Vec3(x=4, y=64, z=0))
        found = world.nearest_hostile_within(16, world.agent_position())
        assert found is near

    def test_ignores_non_hostile(self, client, world):
        client.add_entity("cow", EntityKind.MOB, Vec3(x=1, y=64, z=0))
        client.add_player("alice", Vec3(x=1, y=64, z=1))
        assert world.nearest_hostile_within(16, world.agent_position()) is None

    def test_radius_is_exclusive(self, client, world):
        client.add_entity("zombie", EntityKind.HOSTILE, Vec3(x=16, y=64, z=0))
        assert world.nearest_hostile_within(16, world.agent_position()) is None
