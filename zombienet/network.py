"""
Network: the session handle for a running zombienet network.
"""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from .config import NetworkConfig, NodeConfig
from .providers import ProviderClient
from .session_registry import SessionHandle

logger = logging.getLogger(__name__)


class Network(SessionHandle):
    """
    A provisioned network living in one provider namespace.

    Tracks the nodes spawned so far so that teardown and log collection
    cover partially started networks too.
    """

    def __init__(
        self,
        client: ProviderClient,
        namespace: str,
        config: NetworkConfig,
        log_dir: Optional[str] = None,
    ):
        self.client = client
        self.namespace = namespace
        self.config = config
        self.log_dir = Path(log_dir) if log_dir else None
        self.nodes: list[str] = []
        self.started_at = datetime.now(timezone.utc)
        self.stopped = False

    @property
    def provider(self) -> str:
        return self.client.name()

    async def add_node(self, node: NodeConfig, image: str) -> None:
        await self.client.spawn_node(self.namespace, node, image)
        self.nodes.append(node.name)
        logger.debug(f"Spawned node {node.name} in {self.namespace}")

    async def is_node_up(self, node_name: str) -> bool:
        return await self.client.is_node_running(self.namespace, node_name)

    async def node_logs(self, node_name: str) -> str:
        return await self.client.node_logs(self.namespace, node_name)

    async def stop(self) -> None:
        if self.stopped:
            logger.debug(f"Namespace {self.namespace} already stopped")
            return
        await self.client.destroy_namespace(self.namespace)
        self.stopped = True

    async def upload_logs(self) -> None:
        """Write every node's logs to <log_dir>/<namespace>/<node>.log."""
        if self.log_dir is None:
            logger.debug("No log directory configured, skipping log upload")
            return

        target = self.log_dir / self.namespace
        target.mkdir(parents=True, exist_ok=True)
        for node_name in self.nodes:
            logs = await self.client.node_logs(self.namespace, node_name)
            (target / f"{node_name}.log").write_text(logs)
        logger.info(f"Uploaded logs for {len(self.nodes)} nodes to {target}")

    def show_network_info(self) -> None:
        print()
        print("=" * 60)
        print("NETWORK LAUNCHED")
        print("=" * 60)
        print(f"  Namespace:  {self.namespace}")
        print(f"  Provider:   {self.provider}")
        print(f"  Chain:      {self.config.relaychain.chain}")
        print(f"  Started:    {self.started_at.strftime('%Y-%m-%d %H:%M:%S')} UTC")
        print(f"  Nodes ({len(self.nodes)}):")
        for node_name in self.nodes:
            print(f"    - {node_name}")
        if self.config.parachains:
            ids = ", ".join(str(p.id) for p in self.config.parachains)
            print(f"  Parachains: {ids}")
        print("=" * 60)
