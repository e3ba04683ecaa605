"""
Core Engine for Warden.

The engine orchestrates:
- Command parsing (understanding chat commands)
- World queries (snapshot reads of live state)
- Mode coordination (guard and follow, re-evaluated every tick)
- Action dispatch (collaborator calls and chat replies)
"""

from __future__ import annotations

from warden.engine.completions import CompletionTracker, Continuation
from warden.engine.dispatcher import ActionDispatcher, CommandHandler
from warden.engine.models import (
    AgentConfig,
    Command,
    CommandName,
    ConnectionConfig,
    EquipmentDestination,
    FollowMode,
    GuardMode,
    GuardState,
    PluginAction,
    PluginName,
)
from warden.engine.modes import ModeCoordinator
from warden.engine.parser import USAGE, CommandParser, InvalidCommand
from warden.engine.world import WorldQuery

__all__ = [
    # Dispatch
    "ActionDispatcher",
    "CommandHandler",
    # Completions
    "CompletionTracker",
    "Continuation",
    # Models
    "AgentConfig",
    "Command",
    "CommandName",
    "ConnectionConfig",
    "EquipmentDestination",
    "FollowMode",
    "GuardMode",
    "GuardState",
    "PluginAction",
    "PluginName",
    # Modes
    "ModeCoordinator",
    # Parsing
    "USAGE",
    "CommandParser",
    "InvalidCommand",
    # World
    "WorldQuery",
]
