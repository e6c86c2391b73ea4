"""
Orchestration engine: brings a network up on a provider.
"""

import asyncio
import logging
import uuid
from typing import Optional

from .config import DEFAULT_PROVIDER, CLISettings, NetworkConfig
from .errors import EngineStartError
from .network import Network
from .providers import get_client

logger = logging.getLogger(__name__)


def generate_namespace() -> str:
    return f"zombie-{uuid.uuid4().hex[:12]}"


async def start(
    creds: str,
    config: NetworkConfig,
    monitor: bool = False,
    settings: Optional[CLISettings] = None,
) -> Network:
    """
    Spawn the network described by `config`.

    Args:
        creds: Credentials file for the provider ('' when unused)
        config: Validated network config
        monitor: Skip scheduling the automatic teardown
        settings: CLI settings (log directory); read from env if omitted

    Returns:
        Network: Handle to the running network

    Raises:
        EngineStartError: If any provisioning step fails. Whatever was
            created before the failure is removed first.
    """
    settings = settings or CLISettings.from_env()
    provider = config.provider or DEFAULT_PROVIDER
    client = get_client(provider, creds=creds)
    namespace = generate_namespace()

    network = Network(client, namespace, config, log_dir=settings.log_dir)
    logger.info(f"Launching network in {namespace} on {provider}")

    try:
        await client.create_namespace(namespace)
        if not monitor:
            await client.schedule_teardown(namespace, config.timeout)
        for node, image in config.iter_nodes():
            if not image:
                raise EngineStartError(f"Node {node.name} has no image configured")
            await network.add_node(node, image)
    except asyncio.CancelledError:
        # Not registered yet, so the guardian has nothing to stop
        logger.warning(f"Launch of {namespace} cancelled, removing it")
        await _cleanup(network)
        raise
    except Exception as e:
        logger.error(f"Failed to launch network in {namespace}: {e}")
        await _cleanup(network)
        if isinstance(e, EngineStartError):
            raise
        raise EngineStartError(f"Failed to launch network: {e}") from e

    return network


async def _cleanup(network: Network) -> None:
    try:
        await network.stop()
    except Exception as e:
        logger.warning(f"Cleanup of {network.namespace} failed: {e}")
