"""
Invocation resolution.

Turns raw command-line input into validated, immutable descriptors. The
only side effects are filesystem checks and loading the network config;
nothing here starts a network.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from . import __version__
from .config import (
    AVAILABLE_PROVIDERS,
    DEFAULT_CREDS_NAME,
    DEFAULT_PROVIDER,
    NetworkConfig,
    get_creds_file_path,
    read_network_config,
)
from .errors import ConfigNotFoundError, CredsNotFoundError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SpawnInvocation:
    config_path: str
    config: NetworkConfig
    creds_path: str = ""
    monitor: bool = False
    command: str = "spawn"

    @property
    def provider(self) -> Optional[str]:
        return self.config.provider


@dataclass(frozen=True)
class TestInvocation:
    __test__ = False

    test_file: str
    provider: str
    in_container: bool = False
    command: str = "test"


@dataclass(frozen=True)
class VersionInvocation:
    version: str = __version__
    command: str = "version"


def resolve_spawn(
    config_file: str,
    creds_file: Optional[str] = None,
    monitor: Optional[str] = None,
    provider: Optional[str] = None,
    cwd: Optional[str] = None,
) -> SpawnInvocation:
    """
    Resolve a `spawn` invocation.

    Args:
        config_file: Network config path, relative to cwd
        creds_file: Credentials file name or path (kubernetes only)
        monitor: Monitor positional; any value turns monitor mode on
        provider: --provider value; ignored unless in AVAILABLE_PROVIDERS
        cwd: Directory to resolve relative paths against (default: process cwd)

    Raises:
        ConfigNotFoundError: If the config file doesn't exist
        ConfigInvalidError: If the config can't be loaded
        CredsNotFoundError: If kubernetes credentials can't be located
    """
    config_path = Path(cwd or os.getcwd()) / config_file
    config_path = config_path.resolve()
    if not config_path.is_file():
        raise ConfigNotFoundError(str(config_path))

    config = read_network_config(config_path)
    logger.debug(f"Loaded network config from {config_path}")

    if config.override_provider(provider):
        logger.debug(f"Provider overridden to {provider}")

    creds = ""
    if config.provider == "kubernetes":
        creds = get_creds_file_path(creds_file or DEFAULT_CREDS_NAME) or ""
        if not creds:
            raise CredsNotFoundError(creds_file)

    return SpawnInvocation(
        config_path=str(config_path),
        config=config,
        creds_path=creds,
        monitor=monitor is not None,
    )


def resolve_test(
    test_file: str,
    provider: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> TestInvocation:
    """
    Resolve a `test` invocation.

    The test file is not checked here, the test runner reports it.
    """
    environ = os.environ if environ is None else environ
    provider_to_use = provider if provider in AVAILABLE_PROVIDERS else DEFAULT_PROVIDER
    return TestInvocation(
        test_file=test_file,
        provider=provider_to_use,
        in_container=environ.get("RUN_IN_CONTAINER") == "1",
    )


def resolve_version() -> VersionInvocation:
    return VersionInvocation()
