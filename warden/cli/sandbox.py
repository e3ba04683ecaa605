"""
Offline sandbox world for Warden.

Stands in for a game server when no protocol client is configured: the
agent lives in an in-memory world, console lines become chat from the
operator, and a timer produces physics ticks.

Lines starting with "/" control the sandbox itself:
    /tp <x> <y> <z>        move the operator
    /hostile <x> <y> <z>   add a hostile mob
    /hide                  move the operator out of view
    /quit                  leave
"""

from __future__ import annotations

import asyncio
import threading

from warden.engine import AgentConfig, ConnectionConfig
from warden.models import EntityKind, Vec3, WorldEvent, WorldEventType, chat_event, tick_event
from warden.world import InMemoryWorldClient


class SandboxWorldClient(InMemoryWorldClient):
    """In-memory client that prints the agent's chat."""

    def chat(self, message: str) -> None:
        super().chat(message)
        print(f"<{self.username}> {message}")


class Sandbox:
    """Creates sandbox clients and drives them from the console."""

    def __init__(self, operator: str, config: AgentConfig | None = None) -> None:
        self.operator = operator
        self.config = config or AgentConfig()
        self.client: SandboxWorldClient | None = None
        self.stopped = asyncio.Event()

    async def connect(self, connection: ConnectionConfig) -> SandboxWorldClient:
        """Client factory: a fresh world with the operator standing nearby."""
        client = SandboxWorldClient(username=connection.username, position=Vec3(x=0, y=64, z=0))
        client.add_player(self.operator, Vec3(x=5, y=64, z=5))
        client.add_item("diamond_sword")
        client.add_item("bread", count=5)
        client.push(WorldEvent(type=WorldEventType.SPAWN))
        self.client = client
        return client

    async def pump_ticks(self) -> None:
        """Push a physics tick into the current client at a fixed rate."""
        while not self.stopped.is_set():
            await asyncio.sleep(self.config.tick_interval_seconds)
            if self.client is not None and not self.client.closed:
                self.client.push(tick_event())

    async def feed_console(self) -> None:
        """Turn console lines into operator chat until EOF or /quit."""
        lines: asyncio.Queue[str | None] = asyncio.Queue()
        loop = asyncio.get_running_loop()

        def _read() -> None:
            while True:
                try:
                    line = input("> ")
                except (EOFError, KeyboardInterrupt):
                    loop.call_soon_threadsafe(lines.put_nowait, None)
                    return
                loop.call_soon_threadsafe(lines.put_nowait, line)

        # Daemon thread so a pending input() never blocks interpreter exit
        threading.Thread(target=_read, name="sandbox-console", daemon=True).start()

        while not self.stopped.is_set():
            line = await lines.get()
            if line is None:
                break

            line = line.strip()
            if not line:
                continue
            if line.startswith("/"):
                if not self._control(line[1:].split()):
                    break
                continue
            if self.client is not None:
                self.client.push(chat_event(self.operator, line))

        self.stopped.set()

    def _control(self, parts: list[str]) -> bool:
        """Run a sandbox control line. Returns False to quit."""
        if not parts or self.client is None:
            return True

        name, args = parts[0].lower(), parts[1:]
        if name == "quit":
            return False

        if name in {"tp", "hostile"}:
            try:
                x, y, z = (float(a) for a in args[:3])
            except ValueError:
                print(f"Usage: /{name} <x> <y> <z>")
                return True
            position = Vec3(x=x, y=y, z=z)
            if name == "tp":
                self.client.hide_player(self.operator)
                self.client.add_player(self.operator, position)
            else:
                entity = self.client.add_entity("zombie", EntityKind.HOSTILE, position)
                print(f"Spawned zombie #{entity.id} at {position}")
        elif name == "hide":
            self.client.hide_player(self.operator)
        else:
            print(f"Unknown sandbox command: /{name}")
        return True
