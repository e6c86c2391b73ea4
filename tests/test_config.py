"""
Tests for network config loading, credentials lookup and CLI settings.
"""

import json

import pytest

from zombienet.config import (
    DEFAULT_GLOBAL_TIMEOUT,
    CLISettings,
    NetworkConfig,
    get_creds_file_path,
    read_network_config,
)
from zombienet.errors import ConfigInvalidError


TOML_CONFIG = """
[settings]
provider = "podman"
timeout = 600

[relaychain]
default_image = "docker.io/parity/polkadot:latest"
chain = "rococo-local"

  [[relaychain.nodes]]
  name = "alice"

  [[relaychain.nodes]]
  name = "bob"
  image = "docker.io/parity/polkadot:v1.0.0"

[[parachains]]
id = 100

  [parachains.collator]
  name = "collator01"
  image = "docker.io/parity/polkadot-parachain:latest"
"""

YAML_CONFIG = """
relaychain:
  default_image: docker.io/parity/polkadot:latest
  nodes:
    - name: alice
      args: ["--alice"]
"""


class TestReadNetworkConfig:
    """Tests for read_network_config."""

    def test_json(self, write_config):
        config = read_network_config(write_config())

        assert isinstance(config, NetworkConfig)
        assert [n.name for n in config.relaychain.nodes] == ["alice", "bob"]
        assert config.provider is None
        assert config.timeout == DEFAULT_GLOBAL_TIMEOUT

    def test_toml(self, tmp_path):
        path = tmp_path / "network.toml"
        path.write_text(TOML_CONFIG)

        config = read_network_config(path)

        assert config.provider == "podman"
        assert config.timeout == 600
        assert config.parachains[0].id == 100

    def test_yaml(self, tmp_path):
        path = tmp_path / "network.yaml"
        path.write_text(YAML_CONFIG)

        config = read_network_config(path)

        assert config.relaychain.nodes[0].args == ["--alice"]
        assert config.relaychain.chain == "rococo-local"

    def test_unknown_keys_are_kept(self, tmp_path, network_config_data):
        network_config_data["settings"] = {"provider": "podman", "node_spawn_timeout": 60}
        path = tmp_path / "network.json"
        path.write_text(json.dumps(network_config_data))

        config = read_network_config(path)

        assert config.settings.model_dump()["node_spawn_timeout"] == 60

    def test_unparseable(self, tmp_path):
        path = tmp_path / "network.toml"
        path.write_text("[relaychain\n")

        with pytest.raises(ConfigInvalidError):
            read_network_config(path)

    def test_missing_relaychain(self, tmp_path):
        path = tmp_path / "network.json"
        path.write_text(json.dumps({"settings": {"provider": "podman"}}))

        with pytest.raises(ConfigInvalidError) as exc_info:
            read_network_config(path)

        assert "relaychain" in str(exc_info.value)

    def test_top_level_must_be_mapping(self, tmp_path):
        path = tmp_path / "network.json"
        path.write_text("[1, 2, 3]")

        with pytest.raises(ConfigInvalidError):
            read_network_config(path)

    def test_unsupported_format(self, tmp_path):
        path = tmp_path / "network.ini"
        path.write_text("[relaychain]\n")

        with pytest.raises(ConfigInvalidError):
            read_network_config(path)

    def test_unreadable(self, tmp_path):
        with pytest.raises(ConfigInvalidError):
            read_network_config(tmp_path / "gone.json")


class TestNetworkConfig:
    """Tests for NetworkConfig helpers."""

    def test_iter_nodes_uses_default_image(self, write_config):
        config = read_network_config(write_config())

        nodes = [(node.name, image) for node, image in config.iter_nodes()]

        assert nodes == [
            ("alice", "docker.io/parity/polkadot:latest"),
            ("bob", "docker.io/parity/polkadot:latest"),
            ("collator01", "docker.io/parity/polkadot-parachain:latest"),
        ]

    def test_override_provider_rejects_unknown(self, write_config):
        config = read_network_config(write_config(settings={"provider": "kubernetes"}))

        assert config.override_provider("docker") is False
        assert config.override_provider(None) is False
        assert config.provider == "kubernetes"

    def test_override_provider_keeps_timeout(self, write_config):
        config = read_network_config(write_config(settings={"provider": "kubernetes", "timeout": 42}))

        assert config.override_provider("podman") is True
        assert config.provider == "podman"
        assert config.timeout == 42


class TestGetCredsFilePath:
    """Tests for credentials lookup."""

    def test_direct_path(self, creds_file):
        assert get_creds_file_path(str(creds_file)) == str(creds_file.resolve())

    def test_current_directory(self, tmp_path, monkeypatch):
        (tmp_path / "config").write_text("kind: Config\n")
        monkeypatch.chdir(tmp_path)

        assert get_creds_file_path("config", home=str(tmp_path / "nohome")) == str((tmp_path / "config").resolve())

    def test_parent_directory(self, tmp_path, monkeypatch):
        (tmp_path / "my-creds").write_text("kind: Config\n")
        child = tmp_path / "child"
        child.mkdir()
        monkeypatch.chdir(child)

        assert get_creds_file_path("my-creds", home=str(tmp_path / "nohome")) == str((tmp_path / "my-creds").resolve())

    def test_home_kube_directory(self, tmp_path, monkeypatch):
        kube = tmp_path / "home" / ".kube"
        kube.mkdir(parents=True)
        (kube / "cluster-a").write_text("kind: Config\n")
        work = tmp_path / "work"
        work.mkdir()
        monkeypatch.chdir(work)

        assert get_creds_file_path("cluster-a", home=str(tmp_path / "home")) == str((kube / "cluster-a").resolve())

    def test_not_found(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        assert get_creds_file_path("missing-creds-file", home=str(tmp_path)) is None


class TestCLISettings:
    """Tests for CLISettings.from_env."""

    def test_defaults(self):
        settings = CLISettings.from_env({})

        assert settings.debug is False
        assert settings.in_container is False
        assert settings.log_level == "WARNING"
        assert settings.log_dir.endswith("zombienet-logs")

    def test_from_env(self):
        settings = CLISettings.from_env({
            "DEBUG": "zombie*",
            "RUN_IN_CONTAINER": "1",
            "ZOMBIENET_LOG_LEVEL": "info",
            "ZOMBIENET_LOG_DIR": "/var/log/zombienet",
        })

        assert settings.debug is True
        assert settings.in_container is True
        assert settings.log_level == "INFO"
        assert settings.log_dir == "/var/log/zombienet"
