"""
Command Parser for Warden.

Turns raw chat lines into validated Command objects.
Chat is a shared channel, so anything that does not start with a known
command word is ignored rather than treated as an error.
"""

from __future__ import annotations

from warden.engine.models import (
    Command,
    CommandName,
    EquipmentDestination,
    PluginAction,
    PluginName,
)


class InvalidCommand(Exception):
    """A recognised command whose arguments failed validation."""

    def __init__(self, command: CommandName, reply: str) -> None:
        super().__init__(reply)
        self.command = command
        self.reply = reply


# Usage lines shown for missing arguments and by `help`
USAGE: dict[CommandName, str] = {
    CommandName.COME: "come",
    CommandName.INVENTORY: "inventory",
    CommandName.EQUIP: "equip <item> [<destination>]",
    CommandName.UNEQUIP: "unequip [<destination>]",
    CommandName.GUARD: "guard",
    CommandName.STOP_GUARDING: "stop guarding",
    CommandName.ATTACK: "attack <username>",
    CommandName.STOP_ATTACK: "stop attack",
    CommandName.TOSS: "toss <item> [<count>]",
    CommandName.FOLLOW: "follow [<username>]",
    CommandName.STOP_FOLLOW: "stop follow",
    CommandName.PLUGIN: "plugin <name> <start|stop>",
    CommandName.HELP: "help",
}

# Single-word commands, keyed by their first token
_SIMPLE_COMMANDS = {
    name.value: name for name in CommandName if " " not in name.value
}

# "stop <what>" commands, keyed by the second token
_STOP_COMMANDS = {
    "guarding": CommandName.STOP_GUARDING,
    "attack": CommandName.STOP_ATTACK,
    "follow": CommandName.STOP_FOLLOW,
}

DEFAULT_DESTINATION = EquipmentDestination.HAND.value
DEFAULT_TOSS_COUNT = "1"


def invalid_destination_reply(destination: str) -> str:
    """Reply for an equipment destination outside the closed set."""
    valid = ", ".join(EquipmentDestination.names())
    return f"{destination} is not a valid destination. ({valid})"


def parse_count(raw: str) -> int | None:
    """Parse a positive item count, returning None if it is not one."""
    try:
        count = int(raw)
    except ValueError:
        return None
    return count if count > 0 else None


class CommandParser:
    """Whitespace tokenising parser for chat commands."""

    def parse(self, line: str) -> Command | None:
        """
        Parse a chat line into a Command.

        Args:
            line: Raw chat text

        Returns:
            The recognised Command with defaults filled in, or None if the
            line is not a command.

        Raises:
            InvalidCommand: The command was recognised but an argument is
                missing or outside its allowed domain.
        """
        tokens = line.split()
        if not tokens:
            return None

        head = tokens[0]
        args = tokens[1:]

        if head == "stop":
            if len(args) != 1:
                return None
            name = _STOP_COMMANDS.get(args[0])
            if name is None:
                return None
            return Command(name=name)

        name = _SIMPLE_COMMANDS.get(head)
        if name is None:
            return None

        if name == CommandName.EQUIP:
            return self._parse_equip(args)
        if name == CommandName.UNEQUIP:
            return self._parse_unequip(args)
        if name == CommandName.TOSS:
            return self._parse_toss(args)
        if name == CommandName.ATTACK:
            if not args:
                raise InvalidCommand(name, f"Attack whom? Usage: {USAGE[name]}")
            return Command(name=name, args=args[:1])
        if name == CommandName.FOLLOW:
            return Command(name=name, args=args[:1])
        if name == CommandName.PLUGIN:
            return self._parse_plugin(args)

        # Argument-less commands must match the whole line
        if args:
            return None
        return Command(name=name)

    def _parse_equip(self, args: list[str]) -> Command:
        name = CommandName.EQUIP
        if not args:
            raise InvalidCommand(name, f"Equip what? Usage: {USAGE[name]}")

        item_name = args[0]
        destination = args[1] if len(args) > 1 else DEFAULT_DESTINATION
        if destination not in EquipmentDestination.names():
            raise InvalidCommand(name, invalid_destination_reply(destination))

        return Command(name=name, args=[item_name, destination])

    def _parse_unequip(self, args: list[str]) -> Command:
        name = CommandName.UNEQUIP
        destination = args[0] if args else DEFAULT_DESTINATION
        if destination not in EquipmentDestination.names():
            raise InvalidCommand(name, invalid_destination_reply(destination))

        return Command(name=name, args=[destination])

    def _parse_toss(self, args: list[str]) -> Command:
        name = CommandName.TOSS
        if not args:
            raise InvalidCommand(name, f"Toss what? Usage: {USAGE[name]}")

        item_name = args[0]
        raw_count = args[1] if len(args) > 1 else DEFAULT_TOSS_COUNT
        if parse_count(raw_count) is None:
            raise InvalidCommand(name, f"{raw_count} is not a valid count.")

        return Command(name=name, args=[item_name, raw_count])

    def _parse_plugin(self, args: list[str]) -> Command:
        name = CommandName.PLUGIN
        if len(args) < 2:
            raise InvalidCommand(name, f"Usage: {USAGE[name]}")

        plugin, action = args[0], args[1]
        if plugin not in PluginName.names():
            valid = ", ".join(PluginName.names())
            raise InvalidCommand(name, f"{plugin} is not a valid plugin. ({valid})")
        if action not in PluginAction.names():
            valid = ", ".join(PluginAction.names())
            raise InvalidCommand(name, f"{action} is not a valid action. ({valid})")

        return Command(name=name, args=[plugin, action])
