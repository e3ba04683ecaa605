"""
Command-line entry point for Warden.

Usage:
    warden <host> <port> [<name>] [<password>]
    warden localhost 25565 guardbot --client mypkg.client:connect
"""

from __future__ import annotations

import argparse
import asyncio
import importlib
import logging
import sys

from warden.cli.sandbox import Sandbox
from warden.engine import AgentConfig, ConnectionConfig
from warden.services import HostResolutionError, SessionSupervisor
from warden.world.interfaces import ClientFactory


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="warden",
        description="Guard/follow agent driven by chat commands",
    )
    parser.add_argument("host", help="Server hostname")
    parser.add_argument("port", type=int, help="Server port")
    parser.add_argument("name", nargs="?", default="warden", help="Agent username")
    parser.add_argument("password", nargs="?", default=None, help="Account password")
    parser.add_argument(
        "--client",
        default=None,
        help="World client factory as module:attribute (default: offline sandbox)",
    )
    parser.add_argument(
        "--operator",
        default="operator",
        help="Username console lines are sent as in the sandbox",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Logging verbosity",
    )
    return parser


def load_client_factory(target: str) -> ClientFactory:
    """
    Import a client factory from a "module:attribute" string.

    Raises:
        ValueError: The string is malformed or the attribute is missing.
    """
    module_name, _, attribute = target.partition(":")
    if not module_name or not attribute:
        raise ValueError(f"Expected module:attribute, got {target!r}")

    module = importlib.import_module(module_name)
    try:
        factory = getattr(module, attribute)
    except AttributeError as e:
        raise ValueError(f"{module_name} has no attribute {attribute!r}") from e
    if not callable(factory):
        raise ValueError(f"{target} is not callable")
    return factory


async def run_agent(
    connection: ConnectionConfig,
    agent_config: AgentConfig,
    client_factory: ClientFactory | None = None,
    operator: str = "operator",
) -> None:
    """Run the supervisor against a real client, or the sandbox until /quit."""
    if client_factory is not None:
        await SessionSupervisor(connection, client_factory, agent_config).run()
        return

    sandbox = Sandbox(operator, agent_config)
    supervisor = SessionSupervisor(connection, sandbox.connect, agent_config)
    runner = asyncio.create_task(supervisor.run())
    helpers = [
        asyncio.create_task(sandbox.pump_ticks()),
        asyncio.create_task(sandbox.feed_console()),
    ]
    stopped = asyncio.create_task(sandbox.stopped.wait())

    try:
        await asyncio.wait({runner, stopped}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        sandbox.stopped.set()
        for task in [runner, stopped, *helpers]:
            task.cancel()

    if runner.done() and not runner.cancelled():
        runner.result()


def main(argv: list[str] | None = None) -> int:
    """Parse arguments and run until interrupted."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        connection = ConnectionConfig(
            host=args.host,
            port=args.port,
            username=args.name,
            password=args.password,
        )
    except ValueError as e:
        parser.error(str(e))

    client_factory = None
    if args.client:
        try:
            client_factory = load_client_factory(args.client)
        except (ImportError, ValueError) as e:
            parser.error(str(e))

    try:
        asyncio.run(
            run_agent(connection, AgentConfig.from_env(), client_factory, args.operator)
        )
    except HostResolutionError:
        return 1
    except KeyboardInterrupt:
        print("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
