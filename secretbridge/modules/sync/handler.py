"""
Sync handler - one synchronization attempt per created Secret.

Flow per event:
1. Check the delivered object is a V1Secret
2. Read the bootstrap secret from the same namespace
3. Decode the access descriptor payload
4. Resolve a tenant client
5. Build the tenant copy (namespace, name, data, type)
6. Create it in the tenant cluster
7. Log success

Each step either advances or aborts the event. Nothing is retried except the
tenant write, and only when the retry policy allows it.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

import urllib3
from kubernetes import client as k8s_client
from kubernetes.client.rest import ApiException

from ...errors import (
    MissingAccessDescriptorError,
    NotFoundError,
    RemoteWriteError,
    SecretBridgeError,
)
from ..resolver import TenantClientResolver
from .retry import RetryPolicy
from .secrets import build_tenant_secret, decode_secret_data

DEFAULT_BOOTSTRAP_SECRET = "tenant-kubeconfig"
DEFAULT_ACCESS_KEY = "kubeconfig"


class SyncStatus(str, Enum):
    """Terminal state of one sync attempt."""

    SYNCED = "synced"
    ABORTED = "aborted"


@dataclass
class SyncOutcome:
    """Result of handling one event. Never persisted."""

    status: SyncStatus
    namespace: Optional[str] = None
    name: Optional[str] = None
    reason: Optional[str] = None

    @property
    def synced(self) -> bool:
        return self.status is SyncStatus.SYNCED


class SyncHandler:
    """Copies newly created Secrets into the tenant cluster of their namespace."""

    def __init__(
        self,
        management_api: k8s_client.CoreV1Api,
        resolver: TenantClientResolver,
        bootstrap_secret_name: str = DEFAULT_BOOTSTRAP_SECRET,
        access_key: str = DEFAULT_ACCESS_KEY,
        retry_policy: Optional[RetryPolicy] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize sync handler.

        Args:
            management_api: CoreV1Api for the management cluster
            resolver: Strategy that turns a bootstrap payload into a tenant client
            bootstrap_secret_name: Name of the bootstrap secret in each namespace
            access_key: Bootstrap data key holding the kubeconfig
            retry_policy: Policy wrapping the tenant write (default: single attempt)
            logger: Logger for event outcomes (default: module logger)
        """
        self.management_api = management_api
        self.resolver = resolver
        self.bootstrap_secret_name = bootstrap_secret_name
        self.access_key = access_key
        self.retry_policy = retry_policy or RetryPolicy()
        self.logger = logger or logging.getLogger(__name__)

    def __call__(self, obj: Any) -> SyncOutcome:
        return self.on_create(obj)

    def on_create(self, obj: Any) -> SyncOutcome:
        """
        Handle one "secret created" notification.

        Args:
            obj: Object delivered by the change feed, expected to be a V1Secret

        Returns:
            SyncOutcome describing how the attempt ended
        """
        if not isinstance(obj, k8s_client.V1Secret) or obj.metadata is None:
            self.logger.warning(f"Ignoring object of unexpected type {type(obj).__name__}")
            return SyncOutcome(SyncStatus.ABORTED, reason="type mismatch")

        namespace = obj.metadata.namespace
        name = obj.metadata.name
        self.logger.info(f"Secret added: {namespace}/{name}")

        try:
            self._sync(obj)
        except SecretBridgeError as e:
            self.logger.error(f"Sync of {namespace}/{name} aborted: {e}")
            return SyncOutcome(SyncStatus.ABORTED, namespace, name, reason=str(e))
        except Exception as e:
            # Pluggable resolvers may raise anything
            self.logger.exception(f"Unexpected error syncing {namespace}/{name}: {e}")
            return SyncOutcome(SyncStatus.ABORTED, namespace, name, reason=str(e))

        self.logger.info(f"Successfully synced Secret to tenant cluster: {namespace}/{name}")
        return SyncOutcome(SyncStatus.SYNCED, namespace, name)

    def _sync(self, source: k8s_client.V1Secret) -> None:
        namespace = source.metadata.namespace

        bootstrap = self._read_bootstrap(namespace)

        payload = decode_secret_data(bootstrap.data)
        if self.access_key not in payload:
            raise MissingAccessDescriptorError(self.access_key)

        tenant_api = self.resolver.resolve(payload, namespace=namespace)

        self._create_in_tenant(tenant_api, build_tenant_secret(source))

    def _read_bootstrap(self, namespace: str) -> k8s_client.V1Secret:
        """Read the bootstrap secret from namespace (never any other)."""
        try:
            return self.management_api.read_namespaced_secret(
                name=self.bootstrap_secret_name, namespace=namespace
            )
        except ApiException as e:
            if e.status == 404:
                raise NotFoundError(namespace, self.bootstrap_secret_name) from e
            raise SecretBridgeError(
                f"failed to read {namespace}/{self.bootstrap_secret_name}: {e.status} {e.reason}"
            ) from e
        except urllib3.exceptions.HTTPError as e:
            raise SecretBridgeError(
                f"failed to read {namespace}/{self.bootstrap_secret_name}: {e}"
            ) from e

    def _create_in_tenant(self, tenant_api: k8s_client.CoreV1Api, body: k8s_client.V1Secret) -> None:
        namespace = body.metadata.namespace
        name = body.metadata.name
        try:
            self.retry_policy.call(
                lambda: tenant_api.create_namespaced_secret(namespace=namespace, body=body),
                key=f"{namespace}/{name}",
            )
        except ApiException as e:
            raise RemoteWriteError(namespace, name, status=e.status, reason=e.reason or "") from e
        except urllib3.exceptions.HTTPError as e:
            raise RemoteWriteError(namespace, name, reason=str(e)) from e
