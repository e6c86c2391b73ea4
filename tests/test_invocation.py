"""
Tests for invocation resolution.
"""

import pytest

from zombienet.config import DEFAULT_GLOBAL_TIMEOUT
from zombienet.errors import ConfigInvalidError, ConfigNotFoundError, CredsNotFoundError
from zombienet.invocation import (
    SpawnInvocation,
    resolve_spawn,
    resolve_test,
    resolve_version,
)


class TestResolveSpawn:
    """Tests for resolve_spawn."""

    def test_missing_config(self, tmp_path):
        with pytest.raises(ConfigNotFoundError) as exc_info:
            resolve_spawn("nope.json", cwd=str(tmp_path))

        assert exc_info.value.path == str(tmp_path / "nope.json")

    def test_relative_path_resolved_against_cwd(self, write_config, tmp_path):
        write_config(settings={"provider": "podman"})

        invocation = resolve_spawn("network.json", cwd=str(tmp_path))

        assert isinstance(invocation, SpawnInvocation)
        assert invocation.config_path == str((tmp_path / "network.json").resolve())
        assert invocation.command == "spawn"

    def test_invalid_config(self, tmp_path):
        (tmp_path / "broken.json").write_text("{not json")

        with pytest.raises(ConfigInvalidError):
            resolve_spawn("broken.json", cwd=str(tmp_path))

    def test_provider_override_replaces_config_provider(self, write_config, tmp_path, creds_file):
        path = write_config(settings={"provider": "podman", "timeout": 300})

        invocation = resolve_spawn(str(path), str(creds_file), provider="kubernetes")

        assert invocation.provider == "kubernetes"
        assert invocation.config.timeout == 300

    def test_provider_override_creates_settings(self, write_config):
        invocation = resolve_spawn(str(write_config()), provider="podman")

        assert invocation.config.settings is not None
        assert invocation.provider == "podman"
        assert invocation.config.timeout == DEFAULT_GLOBAL_TIMEOUT

    def test_unset_provider_keeps_config_provider(self, write_config):
        invocation = resolve_spawn(str(write_config(settings={"provider": "podman"})))

        assert invocation.provider == "podman"

    @pytest.mark.parametrize("bogus", ["docker", "native", "Kubernetes", ""])
    def test_unknown_provider_is_ignored(self, write_config, bogus):
        invocation = resolve_spawn(str(write_config(settings={"provider": "podman"})), provider=bogus)

        assert invocation.provider == "podman"

    def test_unknown_provider_without_settings_leaves_none(self, write_config):
        invocation = resolve_spawn(str(write_config()), provider="docker")

        assert invocation.config.settings is None
        assert invocation.creds_path == ""

    def test_kubernetes_requires_creds(self, write_config, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("HOME", str(tmp_path))
        path = write_config(settings={"provider": "kubernetes"})

        with pytest.raises(CredsNotFoundError):
            resolve_spawn(str(path))

    def test_kubernetes_default_creds_name_from_home(self, write_config, tmp_path, monkeypatch):
        home = tmp_path / "home"
        (home / ".kube").mkdir(parents=True)
        (home / ".kube" / "config").write_text("kind: Config\n")
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("HOME", str(home))

        invocation = resolve_spawn(str(write_config(settings={"provider": "kubernetes"})))

        assert invocation.creds_path == str((home / ".kube" / "config").resolve())

    def test_monitor_flag(self, write_config):
        path = str(write_config(settings={"provider": "podman"}))

        assert resolve_spawn(path).monitor is False
        assert resolve_spawn(path, monitor="anything").monitor is True


class TestResolveTest:
    """Tests for resolve_test."""

    def test_supplied_provider(self):
        invocation = resolve_test("smoke.feature", "podman", environ={})

        assert invocation.provider == "podman"
        assert invocation.in_container is False
        assert invocation.command == "test"

    @pytest.mark.parametrize("provider", [None, "docker"])
    def test_falls_back_to_kubernetes(self, provider):
        assert resolve_test("smoke.feature", provider, environ={}).provider == "kubernetes"

    def test_in_container_signal(self):
        assert resolve_test("f", environ={"RUN_IN_CONTAINER": "1"}).in_container is True
        assert resolve_test("f", environ={"RUN_IN_CONTAINER": "true"}).in_container is False

    def test_does_not_check_test_file(self):
        invocation = resolve_test("/does/not/exist.feature", environ={})

        assert invocation.test_file == "/does/not/exist.feature"


def test_resolve_version():
    invocation = resolve_version()

    assert invocation.version == "1.2.0"
    assert invocation.command == "version"
