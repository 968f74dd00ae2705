"""Error taxonomy for secretbridge.

Startup errors (ConfigurationError) are fatal. Everything else is raised per
event and absorbed at the sync handler boundary.
"""

from typing import Optional


class SecretBridgeError(Exception):
    """Base class for all secretbridge errors."""


class ConfigurationError(SecretBridgeError):
    """Management cluster credentials or settings cannot be loaded."""


class NotFoundError(SecretBridgeError):
    """The bootstrap credential does not exist in the namespace."""

    def __init__(self, namespace: str, name: str):
        self.namespace = namespace
        self.name = name
        super().__init__(f"secret {namespace}/{name} not found")


class MalformedCredentialError(SecretBridgeError):
    """The bootstrap credential cannot be used to resolve a tenant client."""


class MissingAccessDescriptorError(MalformedCredentialError):
    """The access descriptor key is absent from the bootstrap payload."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"missing {key} key in secret")


class InvalidAccessDescriptorError(MalformedCredentialError):
    """The access descriptor bytes do not parse as a kubeconfig."""


class ResolutionError(SecretBridgeError):
    """A tenant client cannot be built from a well-formed descriptor."""


class ClientConstructionError(ResolutionError):
    """Client configuration failed while loading auth or TLS material."""


class RemoteWriteError(SecretBridgeError):
    """Creating the secret in the tenant cluster failed."""

    def __init__(self, namespace: str, name: str, status: Optional[int] = None, reason: str = ""):
        self.namespace = namespace
        self.name = name
        self.status = status
        self.reason = reason
        detail = f"{status} {reason}".strip() if status else reason
        super().__init__(f"failed to create secret {namespace}/{name} in tenant cluster: {detail}")
