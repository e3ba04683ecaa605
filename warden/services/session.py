"""
Session Supervisor for Warden.

Owns the agent's connection lifecycle:
- Resolves the server hostname once, before the first connection
- Connects through a client factory and registers capability plugins
- Builds a fresh agent (world query, mode coordinator, dispatcher) on spawn
- Feeds chat and tick events to the agent, one at a time, in arrival order
- Throws all agent state away on disconnect and connects again
"""

from __future__ import annotations

import asyncio
import logging
import socket
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from warden.engine import (
    ActionDispatcher,
    AgentConfig,
    CompletionTracker,
    ConnectionConfig,
    ModeCoordinator,
    WorldQuery,
)
from warden.models import WorldEvent, WorldEventType
from warden.world.interfaces import ClientFactory, WorldClient

logger = logging.getLogger(__name__)

# Capability plugins registered on every connection
PLUGINS = ("pathfinder", "pvp", "autoeat")


class HostResolutionError(Exception):
    """The configured hostname could not be resolved."""


async def resolve_host(host: str, port: int) -> str:
    """
    Resolve a hostname to a network address.

    Raises:
        HostResolutionError: The name does not resolve.
    """
    loop = asyncio.get_running_loop()
    try:
        infos = await loop.getaddrinfo(host, port, type=socket.SOCK_STREAM)
    except (OSError, UnicodeError) as e:
        raise HostResolutionError(f"Could not resolve {host}: {e}") from e

    if not infos:
        raise HostResolutionError(f"Could not resolve {host}: no addresses")
    return str(infos[0][4][0])


Resolver = Callable[[str, int], Awaitable[str]]


@dataclass
class AgentSession:
    """
    One connection's worth of agent state.

    Nothing here outlives the connection; a reconnect builds a new session.
    """

    connection: ConnectionConfig
    client: WorldClient
    agent_config: AgentConfig = field(default_factory=AgentConfig)
    plugins: list[str] = field(default_factory=list)
    is_connected: bool = True

    completions: CompletionTracker = field(default_factory=CompletionTracker)
    world: WorldQuery | None = None
    coordinator: ModeCoordinator | None = None
    dispatcher: ActionDispatcher | None = None

    @property
    def spawned(self) -> bool:
        return self.dispatcher is not None

    def load_plugins(self, names: tuple[str, ...] = PLUGINS) -> None:
        for name in names:
            self.client.load_plugin(name)
            self.plugins.append(name)
            print(f"INFO: Loaded `{name}` plugin.")

    def spawn(self) -> None:
        """Wire up the agent once the client is in the world."""
        if self.spawned:
            return
        print("INFO: Spawned")
        self.world = WorldQuery(self.client)
        self.coordinator = ModeCoordinator(
            self.world,
            self.client.movement,
            self.client.combat,
            config=self.agent_config,
            completions=self.completions,
        )
        self.dispatcher = ActionDispatcher(self.client, self.world, self.coordinator)

    def handle_event(self, event: WorldEvent, now: float) -> bool:
        """
        Process one world event.

        Returns:
            False once the connection has ended, True otherwise.
        """
        if event.type == WorldEventType.END:
            logger.warning("Connection ended: %s", event.reason or "unknown reason")
            self.is_connected = False
            return False

        if event.type == WorldEventType.SPAWN:
            self.spawn()

        elif event.type == WorldEventType.CHAT:
            if self.dispatcher is not None and event.username and event.message:
                self.dispatcher.handle_chat(event.username, event.message)

        elif event.type == WorldEventType.PHYSICS_TICK:
            if self.coordinator is not None:
                try:
                    self.coordinator.on_tick(now)
                except Exception:
                    logger.exception("Tick evaluation failed")

        elif event.type == WorldEventType.AUTOEAT_STARTED:
            logger.info("Eating %s in %s", event.item, "offhand" if event.offhand else "hand")

        elif event.type == WorldEventType.AUTOEAT_FINISHED:
            logger.info(
                "Finished eating %s in %s", event.item, "offhand" if event.offhand else "hand"
            )

        elif event.type == WorldEventType.AUTOEAT_ERROR:
            logger.error("Autoeat error: %s", event.error)

        return True

    def close(self) -> None:
        """Drop everything still in flight."""
        self.is_connected = False
        self.completions.cancel_all()


class SessionSupervisor:
    """
    Keeps the agent connected.

    Host resolution failure is fatal. Any disconnect or connection error
    starts a new session; by default retries are unbounded with no delay.
    """

    def __init__(
        self,
        config: ConnectionConfig,
        client_factory: ClientFactory,
        agent_config: AgentConfig | None = None,
        *,
        resolver: Resolver = resolve_host,
        max_sessions: int | None = None,
        reconnect_delay: float = 0.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize the supervisor.

        Args:
            config: Connection settings from the command line
            client_factory: Opens a world client for a resolved connection
            agent_config: Agent tunables shared by every session
            resolver: Hostname resolver
            max_sessions: Stop after this many sessions (None = forever)
            reconnect_delay: Seconds to wait between sessions
            clock: Time source passed to tick evaluation
        """
        self.config = config
        self.client_factory = client_factory
        self.agent_config = agent_config or AgentConfig()
        self.resolver = resolver
        self.max_sessions = max_sessions
        self.reconnect_delay = reconnect_delay
        self.clock = clock
        self.sessions_started = 0
        self.session: AgentSession | None = None

    async def start(self) -> ConnectionConfig:
        """Resolve the host and report the connection settings."""
        address = await self.resolver(self.config.host, self.config.port)
        connection = self.config.model_copy(update={"address": address})
        print(connection.model_dump(exclude={"password"}))
        return connection

    async def run(self) -> None:
        """Resolve, then connect and reconnect until told to stop."""
        try:
            connection = await self.start()
        except HostResolutionError as e:
            logger.error("%s", e)
            raise

        while self.max_sessions is None or self.sessions_started < self.max_sessions:
            await self.run_session(connection)
            # Yield between sessions even with no delay
            await asyncio.sleep(self.reconnect_delay)

    async def run_session(self, connection: ConnectionConfig) -> AgentSession | None:
        """Run one connection from connect to disconnect."""
        self.sessions_started += 1
        try:
            client = await self.client_factory(connection)
        except Exception as e:
            logger.error("Connection to %s:%d failed: %s", connection.host, connection.port, e)
            return None

        session = AgentSession(
            connection=connection, client=client, agent_config=self.agent_config
        )
        self.session = session
        try:
            session.load_plugins()
            async for event in client.events():
                if not session.handle_event(event, self.clock()):
                    break
        except Exception:
            logger.exception("Session crashed")
        finally:
            session.close()
            self.session = None
            await client.close()

        logger.info("Session %d over; mode state discarded", self.sessions_started)
        return session
