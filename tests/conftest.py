"""Shared fixtures for zombienet tests"""

import json

import pytest

from zombienet.lifecycle import LifecycleGuardian
from zombienet.session_registry import SessionRegistry

from fakes import FakeSession


@pytest.fixture
def calls():
    """Ordered record of session operations."""
    return []


@pytest.fixture
def session(calls):
    return FakeSession(calls=calls)


@pytest.fixture
def registry():
    return SessionRegistry()


@pytest.fixture
def guardian(registry):
    return LifecycleGuardian(registry)


@pytest.fixture
def network_config_data():
    """Minimal valid network config."""
    return {
        "relaychain": {
            "default_image": "docker.io/parity/polkadot:latest",
            "chain": "rococo-local",
            "nodes": [
                {"name": "alice"},
                {"name": "bob"},
            ],
        },
        "parachains": [
            {
                "id": 100,
                "collator": {"name": "collator01", "image": "docker.io/parity/polkadot-parachain:latest"},
            }
        ],
    }


@pytest.fixture
def write_config(tmp_path, network_config_data):
    """Write a network config (optionally with settings) and return its path."""
    def _write(settings=None, name="network.json"):
        data = dict(network_config_data)
        if settings is not None:
            data["settings"] = settings
        path = tmp_path / name
        path.write_text(json.dumps(data))
        return path
    return _write


@pytest.fixture
def creds_file(tmp_path):
    path = tmp_path / "kubeconfig"
    path.write_text("apiVersion: v1\nkind: Config\n")
    return path
