"""
World collaborator layer for Warden.

Provides interfaces and implementations for the external subsystems the
agent drives: movement, combat, inventory and automatic eating, plus the
world client that bundles them with an event stream.

Implementations:
- InMemory*: For testing and the offline sandbox
- Real clients: Supplied by the caller through a client factory
"""

from __future__ import annotations

from warden.world.interfaces import (
    ClientFactory,
    CombatCollaborator,
    ConsumptionCollaborator,
    InventoryCollaborator,
    MovementCollaborator,
    WorldClient,
)
from warden.world.memory import (
    InMemoryCombat,
    InMemoryConsumption,
    InMemoryInventory,
    InMemoryMovement,
    InMemoryWorldClient,
)

__all__ = [
    # Protocol interfaces
    "ClientFactory",
    "CombatCollaborator",
    "ConsumptionCollaborator",
    "InventoryCollaborator",
    "MovementCollaborator",
    "WorldClient",
    # In-memory implementations
    "InMemoryCombat",
    "InMemoryConsumption",
    "InMemoryInventory",
    "InMemoryMovement",
    "InMemoryWorldClient",
]
