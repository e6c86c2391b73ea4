"""
Base provider interface for network infrastructure.

A provider client wraps the CLI of an infrastructure backend (kubectl,
podman) and exposes the handful of operations the orchestration engine
needs to create, inspect and destroy a network namespace.
"""

import asyncio
import logging
import shutil
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from ..config import NodeConfig
from ..errors import ProviderCommandError

logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    """Result of running a provider CLI command."""

    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class ProviderClient(ABC):
    """
    Abstract base class for provider clients.

    Subclasses build the command lines; running them is shared here.
    """

    binary: str = ""

    @abstractmethod
    def name(self) -> str:
        """
        Return the provider identifier.

        Returns:
            str: Provider name (e.g., 'podman', 'kubernetes')
        """
        pass

    @abstractmethod
    async def create_namespace(self, namespace: str) -> None:
        pass

    @abstractmethod
    async def destroy_namespace(self, namespace: str) -> None:
        pass

    @abstractmethod
    async def spawn_node(self, namespace: str, node: NodeConfig, image: str) -> None:
        pass

    @abstractmethod
    async def node_logs(self, namespace: str, node_name: str) -> str:
        pass

    @abstractmethod
    async def is_node_running(self, namespace: str, node_name: str) -> bool:
        pass

    async def schedule_teardown(self, namespace: str, timeout: int) -> None:
        """
        Ask the backend to remove the namespace after `timeout` seconds.

        Backends without such a facility leave this a no-op.
        """
        return None

    def is_available(self) -> bool:
        return shutil.which(self.binary) is not None

    def base_command(self) -> list[str]:
        return [self.binary]

    async def run(self, *args: str, check: bool = True, stdin: Optional[str] = None) -> CommandResult:
        """
        Run a provider command.

        Args:
            *args: Arguments after the provider binary
            check: Raise ProviderCommandError on non-zero exit
            stdin: Optional text fed to the command

        Returns:
            CommandResult with decoded output
        """
        command = self.base_command() + list(args)
        logger.debug(f"Running: {' '.join(command)}")

        try:
            proc = await asyncio.create_subprocess_exec(
                *command,
                stdin=asyncio.subprocess.PIPE if stdin is not None else None,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise ProviderCommandError(command, -1, str(e)) from e

        stdout, stderr = await proc.communicate(stdin.encode() if stdin is not None else None)
        result = CommandResult(
            returncode=proc.returncode,
            stdout=stdout.decode(errors="replace"),
            stderr=stderr.decode(errors="replace"),
        )

        if check and not result.ok:
            raise ProviderCommandError(command, result.returncode, result.stderr)
        return result
