"""Tests for chat command dispatch."""

from __future__ import annotations

import pytest

from warden.engine import ActionDispatcher, GuardMode, ModeCoordinator, WorldQuery
from warden.models import EntityKind, GoalNear, Vec3
from warden.world import InMemoryWorldClient


def _make_dispatcher() -> tuple[ActionDispatcher, InMemoryWorldClient]:
    """Create a dispatcher with alice standing next to the agent."""
    client = InMemoryWorldClient(username="warden", position=Vec3(x=0, y=64, z=0))
    client.add_player("alice", Vec3(x=2, y=64, z=2), display_name="Alice")
    world = WorldQuery(client)
    coordinator = ModeCoordinator(world, client.movement, client.combat)
    return ActionDispatcher(client, world, coordinator), client


async def _say(dispatcher: ActionDispatcher, message: str, username: str = "alice") -> None:
    dispatcher.handle_chat(username, message)
    await dispatcher.completions.drain()


# =============================================================================
# Dispatch Basics
# =============================================================================


class TestHandleChat:
    @pytest.mark.asyncio
    async def test_non_commands_get_no_reply(self):
        dispatcher, client = _make_dispatcher()
        await _say(dispatcher, "nice weather today")
        assert client.sent == []

    @pytest.mark.asyncio
    async def test_own_messages_are_ignored(self):
        dispatcher, client = _make_dispatcher()
        await _say(dispatcher, "come", username="warden")
        assert client.sent == []
        assert client.movement.history == []

    @pytest.mark.asyncio
    async def test_validation_failure_is_replied(self):
        dispatcher, client = _make_dispatcher()
        result = dispatcher.handle_chat("alice", "toss bread lots")
        assert result is None
        assert client.sent == ["lots is not a valid count."]

    @pytest.mark.asyncio
    async def test_handler_crash_becomes_reply(self):
        dispatcher, client = _make_dispatcher()

        def _boom(issuer, command):
            raise RuntimeError("kaboom")

        dispatcher.handlers[next(iter(dispatcher.handlers))].handler = _boom
        dispatcher.handle_chat("alice", "come")

        assert client.sent == ["Something went wrong while handling come."]

    @pytest.mark.asyncio
    async def test_help_lists_commands(self):
        dispatcher, client = _make_dispatcher()
        await _say(dispatcher, "help")
        assert len(client.sent) == 1
        assert client.sent[0].startswith("Commands: come, inventory")
        assert "plugin <name> <start|stop>" in client.sent[0]


# =============================================================================
# Movement
# =============================================================================


class TestCome:
    @pytest.mark.asyncio
    async def test_come_moves_to_issuer(self):
        dispatcher, client = _make_dispatcher()
        await _say(dispatcher, "come")

        assert client.sent == ["Coming to @Alice!"]
        assert client.movement.goal == GoalNear(position=Vec3(x=2, y=64, z=2), radius=1.0)

    @pytest.mark.asyncio
    async def test_come_when_issuer_not_visible(self):
        dispatcher, client = _make_dispatcher()
        client.hide_player("alice")
        await _say(dispatcher, "come")

        assert client.sent == ["I can't see you."]
        assert client.movement.history == []


class TestFollow:
    @pytest.mark.asyncio
    async def test_follow_defaults_to_issuer(self):
        dispatcher, client = _make_dispatcher()
        await _say(dispatcher, "follow")

        assert client.sent == ["Following @Alice."]
        assert dispatcher.coordinator.follow_target.username == "alice"

    @pytest.mark.asyncio
    async def test_follow_named_player(self):
        dispatcher, client = _make_dispatcher()
        client.add_player("bob", Vec3(x=9, y=64, z=9))
        await _say(dispatcher, "follow bob")

        assert client.sent == ["Following @bob."]
        assert dispatcher.coordinator.follow_target.username == "bob"

    @pytest.mark.asyncio
    async def test_follow_unknown_player_changes_nothing(self):
        dispatcher, client = _make_dispatcher()
        before = dispatcher.coordinator.follow
        await _say(dispatcher, "follow x")

        assert client.sent == ["I could not find x."]
        assert dispatcher.coordinator.follow == before

    @pytest.mark.asyncio
    async def test_follow_self_is_refused(self):
        dispatcher, client = _make_dispatcher()
        await _say(dispatcher, "follow warden")

        assert client.sent == ["I can't follow myself."]
        assert not dispatcher.coordinator.follow.active

    @pytest.mark.asyncio
    async def test_stop_follow(self):
        dispatcher, client = _make_dispatcher()
        await _say(dispatcher, "follow")
        await _say(dispatcher, "stop follow")

        assert client.sent[-1] == "I will no longer follow anyone."
        assert not dispatcher.coordinator.follow.active


# =============================================================================
# Guard and Combat
# =============================================================================


class TestGuard:
    @pytest.mark.asyncio
    async def test_guard_anchors_at_issuer(self):
        dispatcher, client = _make_dispatcher()
        await _say(dispatcher, "guard")

        assert client.sent == ["I will be guarding @Alice"]
        assert dispatcher.coordinator.guard == GuardMode(
            active=True, anchor=Vec3(x=2, y=64, z=2)
        )
        assert client.movement.history == [GoalNear(position=Vec3(x=2, y=64, z=2), radius=1.0)]

    @pytest.mark.asyncio
    async def test_guard_when_issuer_not_visible(self):
        dispatcher, client = _make_dispatcher()
        client.hide_player("alice")
        await _say(dispatcher, "guard")

        assert client.sent == ["I can't see you."]
        assert not dispatcher.coordinator.guard.active

    @pytest.mark.asyncio
    async def test_anchor_stays_when_issuer_walks_away(self):
        dispatcher, client = _make_dispatcher()
        await _say(dispatcher, "guard")
        client.players["alice"].entity.position = Vec3(x=30, y=64, z=30)

        dispatcher.coordinator.on_tick(1.0)

        assert client.movement.goal.position == Vec3(x=2, y=64, z=2)

    @pytest.mark.asyncio
    async def test_stop_guarding(self):
        dispatcher, client = _make_dispatcher()
        await _say(dispatcher, "guard")
        await _say(dispatcher, "stop guarding")

        assert client.sent[-1] == "I will no longer guard this area."
        assert dispatcher.coordinator.guard == GuardMode()
        assert client.combat.stop_calls == 1
        assert client.movement.clear_count == 1
        assert client.movement.goal is None


class TestAttack:
    @pytest.mark.asyncio
    async def test_attack_visible_player(self):
        dispatcher, client = _make_dispatcher()
        bob = client.add_player("bob", Vec3(x=4, y=64, z=0))
        await _say(dispatcher, "attack bob")

        assert client.sent == ["Attacking @bob!"]
        assert client.combat.attacked == [bob.entity]

    @pytest.mark.asyncio
    async def test_attack_unknown_player(self):
        dispatcher, client = _make_dispatcher()
        await _say(dispatcher, "attack bob")

        assert client.sent == ["I could not find bob."]
        assert client.combat.attacked == []

    @pytest.mark.asyncio
    async def test_attack_self_is_refused(self):
        dispatcher, client = _make_dispatcher()
        await _say(dispatcher, "attack warden")

        assert client.sent == ["I can't attack myself."]
        assert client.combat.attacked == []

    @pytest.mark.asyncio
    async def test_guard_does_not_override_attack(self):
        dispatcher, client = _make_dispatcher()
        bob = client.add_player("bob", Vec3(x=4, y=64, z=0))
        await _say(dispatcher, "guard")
        await _say(dispatcher, "attack bob")
        client.add_entity("zombie", EntityKind.HOSTILE, Vec3(x=1, y=64, z=0))

        dispatcher.coordinator.on_tick(1.0)
        await dispatcher.completions.drain()

        assert client.combat.attacked == [bob.entity]
        assert client.combat.target is bob.entity

    @pytest.mark.asyncio
    async def test_stop_attack(self):
        dispatcher, client = _make_dispatcher()
        client.add_player("bob", Vec3(x=4, y=64, z=0))
        await _say(dispatcher, "attack bob")
        await _say(dispatcher, "stop attack")

        assert client.sent[-1] == "Stopped attacking."
        assert client.combat.target is None
        assert client.combat.stop_calls == 1

    @pytest.mark.asyncio
    async def test_stop_attack_soft_failure(self):
        dispatcher, client = _make_dispatcher()
        client.add_player("bob", Vec3(x=4, y=64, z=0))
        client.combat.stop_succeeds = False
        await _say(dispatcher, "attack bob")
        await _say(dispatcher, "stop attack")

        assert client.sent[-1] == "Failed to stop attacking."

    @pytest.mark.asyncio
    async def test_stop_attack_when_idle(self):
        dispatcher, client = _make_dispatcher()
        await _say(dispatcher, "stop attack")

        assert client.sent == ["I am not attacking anyone."]
        assert client.combat.stop_calls == 0


# =============================================================================
# Items
# =============================================================================


class TestInventory:
    @pytest.mark.asyncio
    async def test_empty_inventory(self):
        dispatcher, client = _make_dispatcher()
        await _say(dispatcher, "inventory")
        assert client.sent == ["I have nothing."]

    @pytest.mark.asyncio
    async def test_inventory_lists_items(self):
        dispatcher, client = _make_dispatcher()
        client.add_item("diamond_sword")
        client.add_item("bread", count=5)
        await _say(dispatcher, "inventory")
        assert client.sent == ["I have \n\ndiamond_sword (1)\nbread (5)"]


class TestEquip:
    @pytest.mark.asyncio
    async def test_equip_success(self):
        dispatcher, client = _make_dispatcher()
        client.add_item("diamond_sword")
        await _say(dispatcher, "equip diamond_sword hand")

        assert client.inventory.equip_calls == [("diamond_sword", "hand")]
        assert client.sent == ["Succesfully equipped diamond_sword to hand."]
        assert client.inventory.held_item.name == "diamond_sword"

    @pytest.mark.asyncio
    async def test_equip_soft_failure(self):
        dispatcher, client = _make_dispatcher()
        client.add_item("diamond_sword")
        client.inventory.equip_succeeds = False
        await _say(dispatcher, "equip diamond_sword hand")

        assert client.sent == ["Failed to equip diamond_sword to hand."]

    @pytest.mark.asyncio
    async def test_equip_to_armor_slot(self):
        dispatcher, client = _make_dispatcher()
        client.add_item("iron_helmet")
        await _say(dispatcher, "equip iron_helmet head")

        assert client.sent == ["Succesfully equipped iron_helmet to head."]

    @pytest.mark.asyncio
    async def test_equip_missing_item(self):
        dispatcher, client = _make_dispatcher()
        await _say(dispatcher, "equip diamond_sword")

        assert client.sent == ["I don't have diamond_sword on me."]
        assert client.inventory.equip_calls == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("destination", ["chest", "back", "mainhand"])
    async def test_equip_invalid_destination(self, destination):
        dispatcher, client = _make_dispatcher()
        client.add_item("diamond_sword")
        await _say(dispatcher, f"equip diamond_sword {destination}")

        assert client.sent == [
            f"{destination} is not a valid destination. "
            "(hand, head, torso, legs, feet, off-hand)"
        ]
        assert client.inventory.equip_calls == []


class TestUnequip:
    @pytest.mark.asyncio
    async def test_unequip_success(self):
        dispatcher, client = _make_dispatcher()
        client.add_item("diamond_sword")
        await _say(dispatcher, "equip diamond_sword")
        await _say(dispatcher, "unequip")

        assert client.sent[-1] == "Succesfully unequipped diamond_sword from hand."
        assert client.inventory.held_item is None

    @pytest.mark.asyncio
    async def test_unequip_soft_failure(self):
        dispatcher, client = _make_dispatcher()
        client.add_item("diamond_sword")
        await _say(dispatcher, "equip diamond_sword")
        client.inventory.unequip_succeeds = False
        await _say(dispatcher, "unequip hand")

        assert client.sent[-1] == "Failed to unequip diamond_sword from hand."

    @pytest.mark.asyncio
    async def test_unequip_empty_slot(self):
        dispatcher, client = _make_dispatcher()
        await _say(dispatcher, "unequip feet")

        assert client.sent == ["I don't have anything equipped on feet."]
        assert client.inventory.unequip_calls == []

    @pytest.mark.asyncio
    async def test_unequip_invalid_destination(self):
        dispatcher, client = _make_dispatcher()
        await _say(dispatcher, "unequip pocket")

        assert client.sent[0].startswith("pocket is not a valid destination.")
        assert client.inventory.unequip_calls == []


class TestToss:
    @pytest.mark.asyncio
    async def test_toss_default_count(self):
        dispatcher, client = _make_dispatcher()
        bread = client.add_item("bread", count=5)
        await _say(dispatcher, "toss bread")

        assert client.inventory.toss_calls == [(bread.type, 1)]
        assert client.sent == ["Tossed 1 bread."]
        assert bread.count == 4

    @pytest.mark.asyncio
    async def test_toss_across_stacks(self):
        dispatcher, client = _make_dispatcher()
        client.add_item("bread", count=2, item_type=7)
        client.add_item("bread", count=3, item_type=7)
        await _say(dispatcher, "toss bread 4")

        assert client.sent == ["Tossed 4 bread."]
        assert dispatcher.world.count_item("bread") == 1

    @pytest.mark.asyncio
    async def test_toss_more_than_held(self):
        dispatcher, client = _make_dispatcher()
        client.add_item("bread", count=3)
        await _say(dispatcher, "toss bread 5")

        assert client.sent == ["I only have 3 bread, cannot toss 5."]
        assert client.inventory.toss_calls == []

    @pytest.mark.asyncio
    async def test_toss_missing_item(self):
        dispatcher, client = _make_dispatcher()
        await _say(dispatcher, "toss bread")

        assert client.sent == ["I don't have bread on me."]
        assert client.inventory.toss_calls == []

    @pytest.mark.asyncio
    async def test_toss_rejected_by_server(self):
        dispatcher, client = _make_dispatcher()
        client.add_item("bread", count=3)
        client.inventory.toss_fails = True
        await _say(dispatcher, "toss bread 2")

        assert client.sent == ["Failed to toss 2 bread."]


# =============================================================================
# Plugins
# =============================================================================


class TestPlugin:
    @pytest.mark.asyncio
    async def test_start_autoeat(self):
        dispatcher, client = _make_dispatcher()
        await _say(dispatcher, "plugin autoeat start")

        assert client.consumption.enable_calls == 1
        assert client.sent == ["Successfully applied start to autoeat."]

    @pytest.mark.asyncio
    async def test_stop_autoeat(self):
        dispatcher, client = _make_dispatcher()
        await _say(dispatcher, "plugin autoeat stop")

        assert client.consumption.disable_calls == 1
        assert not client.consumption.enabled
        assert client.sent == ["Successfully applied stop to autoeat."]

    @pytest.mark.asyncio
    async def test_unknown_plugin(self):
        dispatcher, client = _make_dispatcher()
        await _say(dispatcher, "plugin foo start")

        assert client.sent == ["foo is not a valid plugin. (autoeat)"]
        assert client.consumption.enable_calls == 0
        assert client.consumption.disable_calls == 0
