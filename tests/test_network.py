"""
Tests for the Network session handle.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from zombienet.config import NodeConfig, read_network_config
from zombienet.network import Network


@pytest.fixture
def client():
    client = MagicMock()
    client.name.return_value = "podman"
    client.spawn_node = AsyncMock()
    client.destroy_namespace = AsyncMock()
    client.node_logs = AsyncMock(side_effect=lambda ns, node: f"logs of {node}")
    client.is_node_running = AsyncMock(return_value=True)
    return client


@pytest.fixture
def network(client, write_config, tmp_path):
    config = read_network_config(write_config())
    return Network(client, "zombie-abc", config, log_dir=str(tmp_path / "logs"))


class TestNetwork:
    """Tests for Network."""

    @pytest.mark.asyncio
    async def test_add_node_tracks_names(self, network, client):
        await network.add_node(NodeConfig(name="alice"), "parity/polkadot")

        assert network.nodes == ["alice"]
        client.spawn_node.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_stop_is_idempotent(self, network, client):
        await network.stop()
        await network.stop()

        client.destroy_namespace.assert_awaited_once_with("zombie-abc")
        assert network.stopped

    @pytest.mark.asyncio
    async def test_upload_logs_writes_one_file_per_node(self, network, tmp_path):
        await network.add_node(NodeConfig(name="alice"), "img")
        await network.add_node(NodeConfig(name="bob"), "img")

        await network.upload_logs()

        target = tmp_path / "logs" / "zombie-abc"
        assert (target / "alice.log").read_text() == "logs of alice"
        assert (target / "bob.log").read_text() == "logs of bob"

    @pytest.mark.asyncio
    async def test_upload_logs_without_log_dir(self, client, write_config):
        network = Network(client, "zombie-abc", read_network_config(write_config()))
        await network.add_node(NodeConfig(name="alice"), "img")

        await network.upload_logs()

        client.node_logs.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_show_network_info(self, network, capsys):
        await network.add_node(NodeConfig(name="alice"), "img")

        network.show_network_info()

        out = capsys.readouterr().out
        assert "zombie-abc" in out
        assert "podman" in out
        assert "- alice" in out
        assert "Parachains: 100" in out
