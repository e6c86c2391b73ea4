"""
Provider registry for network infrastructure backends.
"""

import logging
from typing import List, Type

from .base import ProviderClient, CommandResult
from .kubernetes import KubernetesClient
from .podman import PodmanClient


logger = logging.getLogger(__name__)


# Registry of available providers
_PROVIDERS: dict[str, Type[ProviderClient]] = {
    "podman": PodmanClient,
    "kubernetes": KubernetesClient,
}


def list_providers() -> List[str]:
    """
    List all registered provider names.

    Returns:
        List[str]: List of provider names
    """
    return list(_PROVIDERS.keys())


def get_client(name: str, creds: str = "") -> ProviderClient:
    """
    Get a provider client by name.

    Args:
        name: Provider name
        creds: Credentials file path (only used by kubernetes)

    Returns:
        ProviderClient: An initialized client

    Raises:
        ValueError: If the provider name is not registered
    """
    if name not in _PROVIDERS:
        available = ", ".join(list_providers())
        raise ValueError(f"Unknown provider '{name}'. Available: {available}")

    client = _PROVIDERS[name](creds=creds)
    if not client.is_available():
        logger.warning(f"Provider '{name}' CLI ({client.binary}) not found on PATH, using anyway")
    return client


__all__ = [
    "ProviderClient",
    "CommandResult",
    "KubernetesClient",
    "PodmanClient",
    "get_client",
    "list_providers",
]
