"""
Podman provider: runs nodes as containers inside a podman pod.
"""

import logging
from typing import Optional

from ..config import NodeConfig
from .base import ProviderClient

logger = logging.getLogger(__name__)


class PodmanClient(ProviderClient):
    """
    Provider client backed by the podman CLI.

    The namespace maps to a pod; node containers are named
    `<namespace>-<node>` so several networks can coexist.
    """

    binary = "podman"

    def __init__(self, creds: Optional[str] = None):
        # Kept for a uniform registry call; podman runs locally
        self.creds = creds or None

    def name(self) -> str:
        return "podman"

    def container_name(self, namespace: str, node_name: str) -> str:
        return f"{namespace}-{node_name}"

    async def create_namespace(self, namespace: str) -> None:
        await self.run("pod", "create", "--name", namespace)
        logger.info(f"Created pod {namespace}")

    async def destroy_namespace(self, namespace: str) -> None:
        await self.run("pod", "rm", "--force", "--ignore", namespace)
        logger.info(f"Removed pod {namespace}")

    async def spawn_node(self, namespace: str, node: NodeConfig, image: str) -> None:
        args = ["run", "-d", "--pod", namespace, "--name", self.container_name(namespace, node.name)]
        if node.command:
            args += ["--entrypoint", node.command]
        await self.run(*args, image, *node.args)

    async def node_logs(self, namespace: str, node_name: str) -> str:
        result = await self.run("logs", self.container_name(namespace, node_name))
        return result.stdout

    async def is_node_running(self, namespace: str, node_name: str) -> bool:
        result = await self.run(
            "inspect", "-f", "{{.State.Running}}",
            self.container_name(namespace, node_name),
            check=False,
        )
        return result.ok and result.stdout.strip() == "true"
