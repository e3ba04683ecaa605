"""
Engine Data Models for Warden.

Defines the core data structures for the command loop:
- Command: A parsed chat command
- EquipmentDestination / PluginName / PluginAction: closed argument sets
- GuardMode / FollowMode: persistent behavioural modes
- AgentConfig / ConnectionConfig: tunables and connection settings
"""

from __future__ import annotations

import os
from enum import Enum

from pydantic import BaseModel, Field, model_validator

from warden.models.world import Player, Vec3


class CommandName(str, Enum):
    """Commands the agent understands."""

    # Movement
    COME = "come"
    FOLLOW = "follow"
    STOP_FOLLOW = "stop follow"

    # Guarding and combat
    GUARD = "guard"
    STOP_GUARDING = "stop guarding"
    ATTACK = "attack"
    STOP_ATTACK = "stop attack"

    # Items
    INVENTORY = "inventory"
    EQUIP = "equip"
    UNEQUIP = "unequip"
    TOSS = "toss"

    # Meta
    PLUGIN = "plugin"
    HELP = "help"


class EquipmentDestination(str, Enum):
    """Where an item can be equipped."""

    HAND = "hand"
    HEAD = "head"
    TORSO = "torso"
    LEGS = "legs"
    FEET = "feet"
    OFF_HAND = "off-hand"

    @classmethod
    def names(cls) -> list[str]:
        return [d.value for d in cls]


class PluginName(str, Enum):
    """Auxiliary capabilities that can be toggled from chat."""

    AUTOEAT = "autoeat"

    @classmethod
    def names(cls) -> list[str]:
        return [p.value for p in cls]


class PluginAction(str, Enum):
    """What to do with an auxiliary capability."""

    START = "start"
    STOP = "stop"

    @classmethod
    def names(cls) -> list[str]:
        return [a.value for a in cls]


class Command(BaseModel):
    """A chat command after tokenisation and validation."""

    name: CommandName
    args: list[str] = Field(default_factory=list)

    def arg(self, index: int, default: str | None = None) -> str | None:
        """Get a positional argument, or `default` if absent."""
        if index < len(self.args):
            return self.args[index]
        return default


class GuardState(str, Enum):
    """Observable states of guard mode."""

    INACTIVE = "inactive"
    IDLE = "idle"
    ENGAGED = "engaged"


class GuardMode(BaseModel):
    """Guard the anchor point; engage hostiles that come close."""

    active: bool = False
    anchor: Vec3 | None = None

    @model_validator(mode="after")
    def anchor_matches_active(self) -> GuardMode:
        if self.active != (self.anchor is not None):
            raise ValueError("Guard anchor must be set exactly when guard mode is active")
        return self


class FollowMode(BaseModel):
    """Keep moving towards a player."""

    active: bool = False
    target: Player | None = None

    @model_validator(mode="after")
    def target_matches_active(self) -> FollowMode:
        if self.active != (self.target is not None):
            raise ValueError("Follow target must be set exactly when follow mode is active")
        return self


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        return default


class AgentConfig(BaseModel):
    """Agent behaviour configuration."""

    guard_scan_radius: float = Field(default=16.0, gt=0, description="Hostile scan radius")
    goal_radius: float = Field(default=1.0, ge=0, description="How close movement goals get")
    tick_interval_seconds: float = Field(
        default=0.05, gt=0, description="Tick rate of the offline sandbox"
    )

    @classmethod
    def from_env(cls) -> AgentConfig:
        """
        Build a config with optional environment overrides.

        Environment variables:
            WARDEN_GUARD_RADIUS: Hostile scan radius while guarding
            WARDEN_GOAL_RADIUS: Radius of movement goals
            WARDEN_TICK_INTERVAL: Sandbox tick interval in seconds
        """
        default = cls()
        return cls(
            guard_scan_radius=_env_float("WARDEN_GUARD_RADIUS", default.guard_scan_radius),
            goal_radius=_env_float("WARDEN_GOAL_RADIUS", default.goal_radius),
            tick_interval_seconds=_env_float(
                "WARDEN_TICK_INTERVAL", default.tick_interval_seconds
            ),
        )


class ConnectionConfig(BaseModel):
    """How to reach the game server."""

    host: str = Field(min_length=1)
    port: int = Field(ge=1, le=65535)
    username: str = Field(default="warden", min_length=1)
    password: str | None = None
    hide_errors: bool = False

    address: str | None = Field(default=None, description="Resolved network address")
