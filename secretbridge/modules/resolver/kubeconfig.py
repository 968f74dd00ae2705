"""Kubeconfig-based tenant client resolution."""

import logging
from typing import Mapping, Optional

import yaml
from kubernetes import client as k8s_client
from kubernetes.config import ConfigException
from kubernetes.config.kube_config import KubeConfigLoader

from ...errors import (
    ClientConstructionError,
    InvalidAccessDescriptorError,
    MissingAccessDescriptorError,
)

logger = logging.getLogger(__name__)

DEFAULT_ACCESS_KEY = "kubeconfig"


class KubeconfigResolver:
    """
    Resolve tenant clients from a kubeconfig stored in the bootstrap payload.

    Every call builds an isolated ApiClient; the process-wide kubernetes
    client configuration is never touched, so tenants cannot leak auth
    headers or TLS settings into each other.
    """

    def __init__(self, access_key: str = DEFAULT_ACCESS_KEY):
        self.access_key = access_key

    def resolve(
        self, payload: Mapping[str, bytes], namespace: Optional[str] = None
    ) -> k8s_client.CoreV1Api:
        """
        Build a CoreV1Api for the cluster described by payload[access_key].

        Args:
            payload: Decoded bootstrap secret data
            namespace: Unused; accepted for protocol compatibility

        Returns:
            CoreV1Api bound to the tenant cluster
        """
        if self.access_key not in payload:
            raise MissingAccessDescriptorError(self.access_key)

        loader = self._parse(payload[self.access_key])

        configuration = k8s_client.Configuration()
        try:
            loader.load_and_set(configuration)
        except (ConfigException, ValueError, TypeError, OSError) as e:
            raise ClientConstructionError(f"failed to configure tenant client: {e}") from e

        # The loader only sets host when the cluster names a server; the
        # Configuration default would otherwise point at localhost or nowhere
        if not getattr(loader, "host", None):
            raise InvalidAccessDescriptorError("kubeconfig cluster has no server")

        logger.debug(f"Resolved tenant client for {configuration.host}")
        return k8s_client.CoreV1Api(k8s_client.ApiClient(configuration=configuration))

    def _parse(self, raw: bytes) -> KubeConfigLoader:
        """Parse access descriptor bytes into a kubeconfig loader."""
        try:
            document = yaml.safe_load(raw)
        except yaml.YAMLError as e:
            raise InvalidAccessDescriptorError(f"kubeconfig is not valid YAML: {e}") from e

        if not isinstance(document, dict):
            raise InvalidAccessDescriptorError(
                f"kubeconfig must be a mapping, got {type(document).__name__}"
            )

        try:
            return KubeConfigLoader(config_dict=document)
        except (ConfigException, KeyError, TypeError, AttributeError, ValueError) as e:
            raise InvalidAccessDescriptorError(f"invalid kubeconfig: {e}") from e
