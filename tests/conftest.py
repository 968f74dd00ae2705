"""
Shared pytest fixtures for secretbridge tests.

This module provides common fixtures including:
- FakeCoreV1Api: In-memory stand-in for a cluster's Secret API
- Secret builders with base64-encoded data
- Sample kubeconfig documents
"""

import base64
import os
import sys
from typing import Dict, List, Optional, Tuple

import pytest
from kubernetes import client as k8s_client
from kubernetes.client.rest import ApiException

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


# =============================================================================
# Secret helpers
# =============================================================================

def encode(value: bytes) -> str:
    """Base64-encode a value the way the API server returns Secret data."""
    if isinstance(value, str):
        value = value.encode()
    return base64.b64encode(value).decode()


def make_secret(
    namespace: str,
    name: str,
    data: Optional[Dict[str, bytes]] = None,
    secret_type: Optional[str] = None,
    uid: Optional[str] = None,
    labels: Optional[Dict[str, str]] = None,
) -> k8s_client.V1Secret:
    """Build a V1Secret with raw values encoded into data."""
    return k8s_client.V1Secret(
        metadata=k8s_client.V1ObjectMeta(
            namespace=namespace,
            name=name,
            uid=uid or f"uid-{namespace}-{name}",
            labels=labels,
        ),
        data={key: encode(value) for key, value in data.items()} if data is not None else None,
        type=secret_type,
    )


DUMMY_KUBECONFIG = b"""apiVersion: v1
clusters:
- cluster:
    server: https://dummy
  name: dummy
contexts:
- context:
    cluster: dummy
    user: dummy
  name: dummy
current-context: dummy
kind: Config
preferences: {}
users:
- name: dummy
  user:
    token: dummy
"""


# =============================================================================
# Fake Kubernetes API
# =============================================================================

class FakeCoreV1Api:
    """
    In-memory Secret API for a single cluster.

    Reads and writes go to a dict keyed by (namespace, name), and every call
    is recorded so tests can assert which namespaces were touched.

    Usage:
        def test_copy(fake_management_api, fake_tenant_api):
            fake_management_api.add(make_secret("default", "tenant-kubeconfig", ...))
            ...
            assert fake_tenant_api.get("default", "my-secret") is not None
    """

    def __init__(self, resource_version: str = "100"):
        self.secrets: Dict[Tuple[str, str], k8s_client.V1Secret] = {}
        self.calls: List[Tuple[str, str, Optional[str]]] = []
        self.resource_version = resource_version
        self.create_errors: List[Exception] = []
        self.read_error: Optional[Exception] = None

    def add(self, secret: k8s_client.V1Secret) -> "FakeCoreV1Api":
        self.secrets[(secret.metadata.namespace, secret.metadata.name)] = secret
        return self

    def get(self, namespace: str, name: str) -> Optional[k8s_client.V1Secret]:
        return self.secrets.get((namespace, name))

    def read_namespaced_secret(self, name: str, namespace: str, **kwargs) -> k8s_client.V1Secret:
        self.calls.append(("read", namespace, name))
        if self.read_error is not None:
            raise self.read_error
        secret = self.secrets.get((namespace, name))
        if secret is None:
            raise ApiException(status=404, reason="Not Found")
        return secret

    def create_namespaced_secret(self, namespace: str, body: k8s_client.V1Secret, **kwargs):
        self.calls.append(("create", namespace, body.metadata.name))
        if self.create_errors:
            raise self.create_errors.pop(0)
        key = (namespace, body.metadata.name)
        if key in self.secrets:
            raise ApiException(status=409, reason="Conflict")
        self.secrets[key] = body
        return body

    def list_secret_for_all_namespaces(self, **kwargs) -> k8s_client.V1SecretList:
        self.calls.append(("list", "*", kwargs.get("label_selector")))
        return k8s_client.V1SecretList(
            items=list(self.secrets.values()),
            metadata=k8s_client.V1ListMeta(resource_version=self.resource_version),
        )

    def creates(self) -> List[Tuple[str, str, Optional[str]]]:
        return [call for call in self.calls if call[0] == "create"]


class StaticResolver:
    """Resolver returning a fixed client and recording every payload it saw."""

    def __init__(self, tenant_api=None, error: Optional[Exception] = None):
        self.tenant_api = tenant_api
        self.error = error
        self.calls: List[Tuple[dict, Optional[str]]] = []

    def resolve(self, payload, namespace=None):
        self.calls.append((dict(payload), namespace))
        if self.error is not None:
            raise self.error
        return self.tenant_api


@pytest.fixture
def fake_management_api():
    """Management cluster API holding a valid bootstrap secret in 'default'."""
    api = FakeCoreV1Api()
    api.add(make_secret("default", "tenant-kubeconfig", {"kubeconfig": DUMMY_KUBECONFIG}))
    return api


@pytest.fixture
def fake_tenant_api():
    """Empty tenant cluster API."""
    return FakeCoreV1Api()


@pytest.fixture
def static_resolver(fake_tenant_api):
    """Resolver that always returns the fake tenant API."""
    return StaticResolver(fake_tenant_api)


# =============================================================================
# Test Markers Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: Integration tests requiring a real cluster"
    )
