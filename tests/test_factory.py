"""
Unit tests for controller composition.
"""

import threading
import time
from unittest.mock import MagicMock, patch

import pytest
from kubernetes import client as k8s_client

from conftest import DUMMY_KUBECONFIG, FakeCoreV1Api, StaticResolver, make_secret
from secretbridge.config.provider import ClusterConfig, SyncConfig
from secretbridge.errors import ConfigurationError
from secretbridge.modules.controller import ControllerFactory, SecretController, load_management_client
from secretbridge.modules.resolver import CachingResolver, KubeconfigResolver


class TestLoadManagementClient:
    def test_outside_cluster_is_configuration_error(self, monkeypatch):
        """Without service account env the in-cluster loader fails cleanly."""
        monkeypatch.delenv("KUBERNETES_SERVICE_HOST", raising=False)
        monkeypatch.delenv("KUBERNETES_SERVICE_PORT", raising=False)

        with pytest.raises(ConfigurationError):
            load_management_client(ClusterConfig(kubeconfig_path=None, context=None))

    def test_missing_kubeconfig_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_management_client(
                ClusterConfig(kubeconfig_path=str(tmp_path / "absent"), context=None)
            )

    def test_kubeconfig_file(self, tmp_path):
        path = tmp_path / "kubeconfig"
        path.write_bytes(DUMMY_KUBECONFIG)

        api = load_management_client(ClusterConfig(kubeconfig_path=str(path), context="dummy"))

        assert isinstance(api, k8s_client.CoreV1Api)
        assert api.api_client.configuration.host == "https://dummy"


class TestControllerFactory:
    def _provider(self, **sync):
        provider = MagicMock()
        provider.get_sync_config.return_value = SyncConfig(**sync)
        provider.get_cluster_config.return_value = ClusterConfig(kubeconfig_path=None, context=None)
        return provider

    def test_build_default(self):
        with patch(
            "secretbridge.modules.controller.factory.load_management_client",
            return_value=FakeCoreV1Api(),
        ):
            controller = ControllerFactory.build(self._provider())

        assert isinstance(controller, SecretController)
        assert isinstance(controller.resolver, KubeconfigResolver)
        assert controller.handler.bootstrap_secret_name == "tenant-kubeconfig"
        assert controller.handler.retry_policy.max_attempts == 1
        assert controller.feed.resync_period == 600

    def test_build_with_cache_and_retries(self):
        provider = self._provider(
            cache_tenant_clients=True,
            write_max_attempts=4,
            label_selector="sync=true",
            access_descriptor_key="config",
        )
        with patch(
            "secretbridge.modules.controller.factory.load_management_client",
            return_value=FakeCoreV1Api(),
        ):
            controller = ControllerFactory.build(provider)

        assert isinstance(controller.resolver, CachingResolver)
        assert isinstance(controller.resolver.inner, KubeconfigResolver)
        assert controller.resolver.inner.access_key == "config"
        assert controller.handler.retry_policy.max_attempts == 4
        assert controller.feed.label_selector == "sync=true"

    def test_configuration_error_propagates(self):
        with patch(
            "secretbridge.modules.controller.factory.load_management_client",
            side_effect=ConfigurationError("no credentials"),
        ):
            with pytest.raises(ConfigurationError):
                ControllerFactory.build(self._provider())


class TestSecretController:
    def test_end_to_end_with_fakes(self, fake_management_api, fake_tenant_api, monkeypatch):
        """A listed secret flows from the feed through the handler into the tenant."""
        from secretbridge.modules.feed import feed as feed_module

        release = threading.Event()

        def blocking_stream(*args, **kwargs):
            release.wait(5)
            return iter(())

        watch = MagicMock()
        watch.return_value.stream.side_effect = blocking_stream
        monkeypatch.setattr(feed_module.watch, "Watch", watch)

        fake_management_api.add(make_secret("default", "my-secret", {"key": b"value"}))
        controller = ControllerFactory.build_with(
            fake_management_api, StaticResolver(fake_tenant_api), SyncConfig()
        )

        controller.start()
        try:
            assert controller.wait_for_sync(2)
            assert controller.has_synced
            for _ in range(200):
                if fake_tenant_api.get("default", "my-secret") is not None:
                    break
                time.sleep(0.01)
        finally:
            release.set()
            controller.stop()

        assert fake_tenant_api.get("default", "my-secret") is not None

    def test_stop_clears_cache(self):
        feed = MagicMock()
        resolver = CachingResolver(MagicMock())
        resolver.clear = MagicMock()

        SecretController(feed, MagicMock(), resolver).stop()

        feed.stop.assert_called_once()
        resolver.clear.assert_called_once()
