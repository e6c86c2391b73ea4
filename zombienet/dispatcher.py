"""
Command dispatcher.

Runs the flow of each CLI command inside the lifecycle guardian:
resolve the invocation, start a network when the command needs one, then
hand over to the post-start action.
"""

import asyncio
import logging
import os
import sys
from typing import Any, Awaitable, Callable, MutableMapping, Optional, Protocol

from . import orchestrator, runner
from .config import NetworkConfig
from .errors import ConfigNotFoundError, CredsNotFoundError
from .invocation import resolve_spawn, resolve_test, resolve_version
from .lifecycle import LifecycleGuardian
from .log import enable_debug_logging
from .session_registry import SessionHandle, SessionRegistry

logger = logging.getLogger(__name__)


class OrchestrationEngine(Protocol):
    async def start(self, creds: str, config: NetworkConfig, monitor: bool) -> SessionHandle: ...


class TestEngine(Protocol):
    async def run(self, test_file: str, provider: str, in_container: bool) -> int: ...


async def wait_forever() -> None:
    """Keep a spawned network alive until a termination trigger fires."""
    await asyncio.Event().wait()


class CommandDispatcher:
    """
    Dispatches parsed CLI arguments to the spawn/test/version flows.

    Args:
        guardian: Lifecycle guardian owning process exit
        registry: Registry the spawned session is recorded in
        engine: Orchestration engine (default: zombienet.orchestrator)
        test_engine: Test engine (default: zombienet.runner)
        hold: Awaited after a spawned network is shown
        environ: Environment mapping (default: os.environ)
    """

    def __init__(
        self,
        guardian: LifecycleGuardian,
        registry: SessionRegistry,
        engine: Optional[OrchestrationEngine] = None,
        test_engine: Optional[TestEngine] = None,
        hold: Callable[[], Awaitable[Any]] = wait_forever,
        environ: Optional[MutableMapping[str, str]] = None,
    ):
        self.guardian = guardian
        self.registry = registry
        self.engine = engine or orchestrator
        self.test_engine = test_engine or runner
        self.hold = hold
        self.environ = os.environ if environ is None else environ

    async def dispatch(self, args) -> None:
        if args.command == "spawn":
            await self.spawn(args.network_config, args.creds, args.monitor, args.provider)
        elif args.command == "test":
            await self.test(args.test_file, args.provider)
        elif args.command == "version":
            await self.version()
        else:
            raise ValueError(f"Unknown command: {args.command}")

    async def spawn(
        self,
        config_file: str,
        creds_file: Optional[str] = None,
        monitor: Optional[str] = None,
        provider: Optional[str] = None,
    ) -> None:
        try:
            invocation = resolve_spawn(config_file, creds_file, monitor, provider)
        except (ConfigNotFoundError, CredsNotFoundError) as e:
            print(f"  ⚠ {e}", file=sys.stderr)
            self.guardian.abort()
            return

        logger.debug(f"Spawn invocation: {invocation}")

        # Failures from here on propagate to the guardian
        network = await self.engine.start(invocation.creds_path, invocation.config, invocation.monitor)
        self.registry.set(network)
        network.show_network_info()
        self.guardian.exit_code = 0

        await self.hold()

    async def test(self, test_file: str, provider: Optional[str] = None) -> None:
        enable_debug_logging(self.environ)
        invocation = resolve_test(test_file, provider, self.environ)
        logger.debug(f"Test invocation: {invocation}")

        self.guardian.exit_code = await self.test_engine.run(
            invocation.test_file, invocation.provider, invocation.in_container
        )

    async def version(self) -> None:
        print(resolve_version().version)
        self.guardian.exit_code = 0
