"""
Services for Warden.

- SessionSupervisor: connect, register plugins, reconnect on disconnect
- AgentSession: one connection's agent wiring
"""

from __future__ import annotations

from warden.services.session import (
    PLUGINS,
    AgentSession,
    HostResolutionError,
    SessionSupervisor,
    resolve_host,
)

__all__ = [
    "PLUGINS",
    "AgentSession",
    "HostResolutionError",
    "SessionSupervisor",
    "resolve_host",
]
