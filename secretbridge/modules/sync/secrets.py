"""Helpers for reading and building Secret objects."""

import base64
import binascii
from typing import Dict, Mapping, Optional

from kubernetes import client as k8s_client

from ...errors import MalformedCredentialError

# Only these fields travel to the tenant cluster. Labels, annotations and
# owner references stay behind.
COPIED_FIELDS = ("namespace", "name", "data", "type")


def decode_secret_data(data: Optional[Mapping[str, str]]) -> Dict[str, bytes]:
    """
    Decode the base64 values of a Secret's data field.

    Args:
        data: Secret.data as returned by the API server

    Returns:
        Mapping of key to raw bytes

    Raises:
        MalformedCredentialError: If a value is not valid base64
    """
    decoded = {}
    for key, value in (data or {}).items():
        try:
            decoded[key] = base64.b64decode(value or "", validate=True)
        except (binascii.Error, ValueError) as e:
            raise MalformedCredentialError(f"value of {key} is not valid base64") from e
    return decoded


def build_tenant_secret(source: k8s_client.V1Secret) -> k8s_client.V1Secret:
    """Build the tenant-side copy of source from COPIED_FIELDS."""
    return k8s_client.V1Secret(
        metadata=k8s_client.V1ObjectMeta(
            namespace=source.metadata.namespace,
            name=source.metadata.name,
        ),
        data=dict(source.data) if source.data is not None else None,
        type=source.type,
    )
