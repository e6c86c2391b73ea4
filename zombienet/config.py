"""
Configuration for the zombienet CLI.

Two kinds of configuration live here:

1. Network configs: the user-supplied description of the network to spawn,
   loaded from JSON, TOML or YAML and validated with pydantic.
2. CLI settings: environment-driven knobs (debug logging, CI container
   detection, log directory).

Also provides credential file lookup for the kubernetes provider.
"""

import json
import os
import tempfile
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ConfigInvalidError


AVAILABLE_PROVIDERS = ("podman", "kubernetes")
DEFAULT_PROVIDER = "kubernetes"
DEFAULT_GLOBAL_TIMEOUT = 1200  # seconds
DEFAULT_CREDS_NAME = "config"


# ============================================================================
# Network config
# ============================================================================

class NodeConfig(BaseModel):
    """A single node (validator or collator) of the network."""
    model_config = ConfigDict(extra="allow")

    name: str
    image: Optional[str] = None
    command: Optional[str] = None
    args: list[str] = Field(default_factory=list)


class RelayChainConfig(BaseModel):
    model_config = ConfigDict(extra="allow")

    default_image: Optional[str] = None
    default_command: Optional[str] = None
    chain: str = "rococo-local"
    nodes: list[NodeConfig] = Field(default_factory=list)


class ParachainConfig(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: int
    collator: Optional[NodeConfig] = None
    collators: list[NodeConfig] = Field(default_factory=list)

    def all_collators(self) -> list[NodeConfig]:
        collators = list(self.collators)
        if self.collator is not None:
            collators.insert(0, self.collator)
        return collators


class NetworkSettings(BaseModel):
    model_config = ConfigDict(extra="allow")

    provider: Optional[str] = None
    timeout: int = DEFAULT_GLOBAL_TIMEOUT


class NetworkConfig(BaseModel):
    """Validated network description."""
    model_config = ConfigDict(extra="allow")

    settings: Optional[NetworkSettings] = None
    relaychain: RelayChainConfig
    parachains: list[ParachainConfig] = Field(default_factory=list)

    @property
    def provider(self) -> Optional[str]:
        return self.settings.provider if self.settings else None

    @property
    def timeout(self) -> int:
        return self.settings.timeout if self.settings else DEFAULT_GLOBAL_TIMEOUT

    def override_provider(self, provider: Optional[str]) -> bool:
        """
        Override the configured provider.

        Values outside AVAILABLE_PROVIDERS (including None) are ignored and
        leave the config untouched. A missing settings block is created with
        the default global timeout.

        Returns:
            True if the provider was overridden
        """
        if not provider or provider not in AVAILABLE_PROVIDERS:
            return False

        if self.settings is None:
            self.settings = NetworkSettings(provider=provider, timeout=DEFAULT_GLOBAL_TIMEOUT)
        else:
            self.settings.provider = provider
        return True

    def iter_nodes(self) -> list[tuple[NodeConfig, str]]:
        """All nodes with their effective image, relaychain first."""
        nodes = []
        for node in self.relaychain.nodes:
            nodes.append((node, node.image or self.relaychain.default_image or ""))
        for parachain in self.parachains:
            for collator in parachain.all_collators():
                nodes.append((collator, collator.image or ""))
        return nodes


def _parse_config_text(path: Path, text: str) -> Any:
    suffix = path.suffix.lower()
    if suffix == ".json":
        return json.loads(text)
    if suffix == ".toml":
        return tomllib.loads(text)
    if suffix in (".yaml", ".yml"):
        return yaml.safe_load(text)
    raise ConfigInvalidError(str(path), f"unsupported config format '{suffix or path.name}'")


def read_network_config(path: str | Path) -> NetworkConfig:
    """
    Load and validate a network config file.

    Args:
        path: Path to a .json, .toml, .yaml or .yml file

    Returns:
        NetworkConfig: The validated config

    Raises:
        ConfigInvalidError: If the file can't be read, parsed or validated
    """
    path = Path(path)
    try:
        text = path.read_text()
    except OSError as e:
        raise ConfigInvalidError(str(path), str(e)) from e

    try:
        data = _parse_config_text(path, text)
    except (json.JSONDecodeError, tomllib.TOMLDecodeError, yaml.YAMLError) as e:
        raise ConfigInvalidError(str(path), str(e)) from e

    if not isinstance(data, dict):
        raise ConfigInvalidError(str(path), "top level must be a mapping")

    try:
        return NetworkConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigInvalidError(str(path), str(e)) from e


def get_creds_file_path(creds_file: str, home: Optional[str] = None) -> Optional[str]:
    """
    Find a kubernetes credentials file.

    Lookup order:
    1. The given name as a path
    2. ./<name>, ../<name>
    3. $HOME/.kube/<name>

    Returns:
        The first existing path, or None
    """
    if Path(creds_file).is_file():
        return str(Path(creds_file).resolve())

    home = home if home is not None else os.environ.get("HOME", str(Path.home()))
    for base in (".", "..", f"{home}/.kube"):
        candidate = Path(base) / creds_file
        if candidate.is_file():
            return str(candidate.resolve())

    return None


# ============================================================================
# CLI settings
# ============================================================================

def _default_log_dir() -> str:
    return str(Path(tempfile.gettempdir()) / "zombienet-logs")


@dataclass
class CLISettings:
    """Environment-driven settings for a CLI run."""
    debug: bool = False
    in_container: bool = False
    log_level: str = "WARNING"
    log_dir: str = field(default_factory=_default_log_dir)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "CLISettings":
        """
        Build settings from environment variables.

        - DEBUG: enables debug logging when it mentions "zombie"
        - RUN_IN_CONTAINER: "1" when running inside a CI container
        - ZOMBIENET_LOG_LEVEL: base log level (default WARNING)
        - ZOMBIENET_LOG_DIR: where uploaded node logs are written
        """
        environ = os.environ if environ is None else environ
        settings = cls()
        settings.debug = "zombie" in environ.get("DEBUG", "")
        settings.in_container = environ.get("RUN_IN_CONTAINER") == "1"
        settings.log_level = environ.get("ZOMBIENET_LOG_LEVEL", settings.log_level).upper()
        if environ.get("ZOMBIENET_LOG_DIR"):
            settings.log_dir = environ["ZOMBIENET_LOG_DIR"]
        return settings
