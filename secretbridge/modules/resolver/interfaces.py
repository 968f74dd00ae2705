"""Resolver interfaces following Black Box Design principles."""
from typing import Mapping, Optional, Protocol

from kubernetes import client as k8s_client


class TenantClientResolver(Protocol):
    """Protocol for tenant client resolution - allows swappable implementations."""

    def resolve(
        self, payload: Mapping[str, bytes], namespace: Optional[str] = None
    ) -> k8s_client.CoreV1Api:
        """
        Build a client for the tenant cluster described by a bootstrap payload.

        Args:
            payload: Decoded bootstrap secret data
            namespace: Namespace the bootstrap secret was read from

        Returns:
            CoreV1Api bound to the tenant cluster

        Raises:
            MalformedCredentialError: Access descriptor missing or unparseable
            ResolutionError: Client could not be constructed
        """
        ...
