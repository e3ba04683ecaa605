"""
Action Dispatcher for Warden.

Maps validated chat commands to collaborator calls and chat replies.
This is the piece operators talk to: every recognised command gets either
an immediate reply explaining which precondition failed, or an
acknowledgement (and, for asynchronous operations, a follow-up once the
outcome is known).
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from warden.engine.models import AgentConfig, Command, CommandName, PluginAction, PluginName
from warden.engine.parser import USAGE, CommandParser, InvalidCommand
from warden.models import GoalNear

if TYPE_CHECKING:
    from warden.engine.completions import CompletionTracker
    from warden.engine.modes import ModeCoordinator
    from warden.engine.world import WorldQuery
    from warden.world.interfaces import WorldClient

logger = logging.getLogger(__name__)


@dataclass
class CommandHandler:
    """A chat command and the method that carries it out."""

    name: CommandName
    handler: Callable[[str, Command], None]


class ActionDispatcher:
    """
    Routes chat commands to handlers.

    Handlers validate against live world state, then call the minimal set
    of collaborator operations. Mode changes go through the coordinator.
    """

    def __init__(
        self,
        client: WorldClient,
        world: WorldQuery,
        coordinator: ModeCoordinator,
        config: AgentConfig | None = None,
        parser: CommandParser | None = None,
        completions: CompletionTracker | None = None,
    ) -> None:
        self.client = client
        self.world = world
        self.coordinator = coordinator
        self.config = config or coordinator.config
        self.parser = parser or CommandParser()
        self.completions = completions or coordinator.completions
        self.handlers: dict[CommandName, CommandHandler] = {}
        self._register_handlers()

    @property
    def username(self) -> str:
        return self.world.username

    def _register_handlers(self) -> None:
        """Register a handler for every command."""
        handlers = [
            CommandHandler(CommandName.COME, self._cmd_come),
            CommandHandler(CommandName.INVENTORY, self._cmd_inventory),
            CommandHandler(CommandName.EQUIP, self._cmd_equip),
            CommandHandler(CommandName.UNEQUIP, self._cmd_unequip),
            CommandHandler(CommandName.GUARD, self._cmd_guard),
            CommandHandler(CommandName.STOP_GUARDING, self._cmd_stop_guarding),
            CommandHandler(CommandName.ATTACK, self._cmd_attack),
            CommandHandler(CommandName.STOP_ATTACK, self._cmd_stop_attack),
            CommandHandler(CommandName.TOSS, self._cmd_toss),
            CommandHandler(CommandName.FOLLOW, self._cmd_follow),
            CommandHandler(CommandName.STOP_FOLLOW, self._cmd_stop_follow),
            CommandHandler(CommandName.PLUGIN, self._cmd_plugin),
            CommandHandler(CommandName.HELP, self._cmd_help),
        ]
        for handler in handlers:
            self.handlers[handler.name] = handler

    def reply(self, message: str) -> None:
        """Send a chat message."""
        self.client.chat(message)

    def handle_chat(self, username: str, message: str) -> Command | None:
        """
        Handle one chat line.

        Never raises: validation failures and handler crashes are turned
        into chat replies.

        Returns:
            The command that was dispatched, or None if the line was
            ignored or rejected.
        """
        if username == self.username:
            return None

        try:
            command = self.parser.parse(message)
        except InvalidCommand as exc:
            logger.info("Rejected %s from %s: %s", exc.command.value, username, exc.reply)
            self.reply(exc.reply)
            return None

        if command is None:
            return None

        logger.info("%s issued %s %s", username, command.name.value, " ".join(command.args))
        try:
            self.handlers[command.name].handler(username, command)
        except Exception:
            logger.exception("Handler for %s crashed", command.name.value)
            self.reply(f"Something went wrong while handling {command.name.value}.")
        return command

    # =========================================================================
    # Movement Commands
    # =========================================================================

    def _cmd_come(self, issuer: str, command: Command) -> None:
        """Walk to the issuing player."""
        player = self.world.resolve_visible_player(issuer)
        if player is None or player.entity is None:
            self.reply("I can't see you.")
            return

        self.reply(f"Coming to @{player.display_name}!")
        self.client.movement.set_goal(
            GoalNear(position=player.entity.position.model_copy(), radius=self.config.goal_radius)
        )

    def _cmd_follow(self, issuer: str, command: Command) -> None:
        """Follow the named player, or the issuer."""
        username = command.arg(0, issuer)
        if username == self.username:
            self.reply("I can't follow myself.")
            return

        player = self.world.resolve_visible_player(username)
        if player is None:
            self.reply(f"I could not find {username}.")
            return

        self.coordinator.set_follow(player)
        self.reply(f"Following @{player.display_name}.")

    def _cmd_stop_follow(self, issuer: str, command: Command) -> None:
        self.reply("I will no longer follow anyone.")
        self.coordinator.clear_follow()

    # =========================================================================
    # Guard and Combat Commands
    # =========================================================================

    def _cmd_guard(self, issuer: str, command: Command) -> None:
        """Guard the spot the issuer is standing on."""
        player = self.world.resolve_visible_player(issuer)
        if player is None or player.entity is None:
            self.reply("I can't see you.")
            return

        self.reply(f"I will be guarding @{player.display_name}")
        self.coordinator.set_guard(player.entity.position)

    def _cmd_stop_guarding(self, issuer: str, command: Command) -> None:
        self.reply("I will no longer guard this area.")
        self.coordinator.clear_guard()

    def _cmd_attack(self, issuer: str, command: Command) -> None:
        """Attack a visible player."""
        username = command.arg(0, "")
        if username == self.username:
            self.reply("I can't attack myself.")
            return

        player = self.world.resolve_visible_player(username)
        if player is None or player.entity is None:
            self.reply(f"I could not find {username}.")
            return

        self.reply(f"Attacking @{player.display_name}!")
        self.completions.schedule(self.client.combat.attack(player.entity), label="attack")

    def _cmd_stop_attack(self, issuer: str, command: Command) -> None:
        """Stop the current fight and report whether it actually stopped."""
        if self.world.combat_target() is None:
            self.reply("I am not attacking anyone.")
            return

        def _done(error: BaseException | None) -> None:
            if error is None and self.world.combat_target() is None:
                self.reply("Stopped attacking.")
            else:
                self.reply("Failed to stop attacking.")

        self.completions.schedule(self.client.combat.stop(), _done, label="stop attack")

    # =========================================================================
    # Item Commands
    # =========================================================================

    def _cmd_inventory(self, issuer: str, command: Command) -> None:
        items = self.world.current_inventory()
        if not items:
            self.reply("I have nothing.")
            return

        lines = "\n".join(f"{name} ({count})" for name, count in items)
        self.reply(f"I have \n\n{lines}")

    def _cmd_equip(self, issuer: str, command: Command) -> None:
        """
        Equip an item.

        The collaborator gives no failure signal, so success is judged by
        what sits in the slot once the operation settles.
        """
        item_name, destination = command.args[0], command.args[1]
        item = self.world.find_item(item_name)
        if item is None:
            self.reply(f"I don't have {item_name} on me.")
            return

        def _done(error: BaseException | None) -> None:
            equipped = self.world.equipped(destination)
            if error is None and equipped is not None and equipped.name == item.name:
                self.reply(f"Succesfully equipped {item_name} to {destination}.")
            else:
                self.reply(f"Failed to equip {item_name} to {destination}.")

        self.completions.schedule(
            self.client.inventory.equip(item, destination), _done, label="equip"
        )

    def _cmd_unequip(self, issuer: str, command: Command) -> None:
        """Empty an equipment slot, judged the same way as equip."""
        destination = command.args[0]
        current = self.world.equipped(destination)
        if current is None:
            self.reply(f"I don't have anything equipped on {destination}.")
            return

        past_name = current.name

        def _done(error: BaseException | None) -> None:
            if error is None and self.world.equipped(destination) is None:
                self.reply(f"Succesfully unequipped {past_name} from {destination}.")
            else:
                self.reply(f"Failed to unequip {past_name} from {destination}.")

        self.completions.schedule(
            self.client.inventory.unequip(destination), _done, label="unequip"
        )

    def _cmd_toss(self, issuer: str, command: Command) -> None:
        """Drop some of an item."""
        item_name, count = command.args[0], int(command.args[1])
        item = self.world.find_item(item_name)
        if item is None:
            self.reply(f"I don't have {item_name} on me.")
            return

        held = self.world.count_item(item_name)
        if count > held:
            self.reply(f"I only have {held} {item_name}, cannot toss {count}.")
            return

        def _done(error: BaseException | None) -> None:
            if error is None:
                self.reply(f"Tossed {count} {item_name}.")
            else:
                logger.warning("Toss of %s x%d failed: %s", item_name, count, error)
                self.reply(f"Failed to toss {count} {item_name}.")

        self.completions.schedule(
            self.client.inventory.toss(item.type, count), _done, label="toss"
        )

    # =========================================================================
    # Meta Commands
    # =========================================================================

    def _cmd_plugin(self, issuer: str, command: Command) -> None:
        """Start or stop an auxiliary capability."""
        plugin, action = PluginName(command.args[0]), PluginAction(command.args[1])

        if plugin == PluginName.AUTOEAT:
            if action == PluginAction.START:
                self.client.consumption.enable()
            else:
                self.client.consumption.disable()

        self.reply(f"Successfully applied {action.value} to {plugin.value}.")

    def _cmd_help(self, issuer: str, command: Command) -> None:
        usages = ", ".join(USAGE[handler.name] for handler in self.handlers.values())
        self.reply(f"Commands: {usages}")
