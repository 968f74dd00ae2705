"""
Controller factory following Black Box Design principles.

This factory:
- Loads management cluster credentials
- Builds the tenant client resolver
- Wires the sync handler into the change feed
"""

import logging

import yaml
from kubernetes import client as k8s_client
from kubernetes import config as k8s_config
from kubernetes.config import ConfigException

from ...config.provider import ClusterConfig, ConfigProvider
from ...errors import ConfigurationError
from ..feed import ChangeFeed
from ..resolver import CachingResolver, KubeconfigResolver, TenantClientResolver
from ..sync import RetryPolicy, SyncHandler
from .controller import SecretController

logger = logging.getLogger(__name__)


def load_management_client(cluster_config: ClusterConfig) -> k8s_client.CoreV1Api:
    """
    Build a CoreV1Api for the management cluster.

    Uses the kubeconfig file when one is configured, otherwise the pod's
    service account. The global kubernetes client configuration is left
    untouched.

    Raises:
        ConfigurationError: If credentials cannot be loaded
    """
    try:
        if cluster_config.in_cluster:
            configuration = k8s_client.Configuration()
            k8s_config.load_incluster_config(client_configuration=configuration)
            api_client = k8s_client.ApiClient(configuration=configuration)
            logger.info("Using in-cluster management credentials")
        else:
            api_client = k8s_config.new_client_from_config(
                config_file=cluster_config.kubeconfig_path,
                context=cluster_config.context,
                persist_config=False,
            )
            logger.info(f"Using management kubeconfig {cluster_config.kubeconfig_path}")
    except (ConfigException, OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Failed to load management cluster config: {e}") from e

    return k8s_client.CoreV1Api(api_client)


class ControllerFactory:
    """
    Factory for building the controller.

    This is the composition root that:
    - Creates all controller components
    - Wires them together via dependency injection
    - Returns only the running controller facade
    """

    @staticmethod
    def build(config_provider: ConfigProvider) -> SecretController:
        """
        Build the complete controller from configuration.

        Args:
            config_provider: Configuration provider

        Returns:
            SecretController, not yet started
        """
        sync_config = config_provider.get_sync_config()
        management_api = load_management_client(config_provider.get_cluster_config())

        resolver: TenantClientResolver = KubeconfigResolver(sync_config.access_descriptor_key)
        if sync_config.cache_tenant_clients:
            logger.info("Tenant client caching enabled")
            resolver = CachingResolver(resolver, access_key=sync_config.access_descriptor_key)

        return ControllerFactory.build_with(management_api, resolver, sync_config)

    @staticmethod
    def build_with(management_api, resolver, sync_config) -> SecretController:
        """Build a controller around already constructed collaborators."""
        retry_policy = RetryPolicy(
            max_attempts=sync_config.write_max_attempts,
            base_delay=sync_config.write_backoff_base,
            max_delay=sync_config.write_backoff_max,
        )
        handler = SyncHandler(
            management_api,
            resolver,
            bootstrap_secret_name=sync_config.bootstrap_secret_name,
            access_key=sync_config.access_descriptor_key,
            retry_policy=retry_policy,
        )
        feed = ChangeFeed(
            management_api,
            handler.on_create,
            resync_period=sync_config.resync_period,
            label_selector=sync_config.label_selector,
        )
        return SecretController(feed, handler, resolver)
