"""Configuration provider following Black Box Design principles."""
import os
from dataclasses import dataclass
from typing import Optional, Protocol

from ..errors import ConfigurationError


@dataclass
class ClusterConfig:
    """Management cluster access configuration."""
    kubeconfig_path: Optional[str]
    context: Optional[str]

    @property
    def in_cluster(self) -> bool:
        """True when credentials come from the pod service account."""
        return not self.kubeconfig_path


@dataclass
class SyncConfig:
    """Secret synchronization configuration."""
    bootstrap_secret_name: str = "tenant-kubeconfig"
    access_descriptor_key: str = "kubeconfig"
    label_selector: Optional[str] = None
    resync_period: int = 600
    cache_sync_timeout: int = 60
    cache_tenant_clients: bool = False
    write_max_attempts: int = 1
    write_backoff_base: float = 0.5
    write_backoff_max: float = 10.0


@dataclass
class APIConfig:
    """Health API configuration."""
    host: str
    port: int
    log_level: str


class ConfigProvider(Protocol):
    """Protocol for configuration providers."""

    def get_cluster_config(self) -> ClusterConfig:
        """Get management cluster configuration."""
        ...

    def get_sync_config(self) -> SyncConfig:
        """Get synchronization configuration."""
        ...

    def get_api_config(self) -> APIConfig:
        """Get health API configuration."""
        ...


def _env_int(name: str, default: int, minimum: int = 0) -> int:
    raw = os.getenv(name, str(default))
    try:
        value = int(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from e
    if value < minimum:
        raise ConfigurationError(f"{name} must be >= {minimum}, got {value}")
    return value


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, str(default))
    try:
        value = float(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from e
    if value < 0:
        raise ConfigurationError(f"{name} must not be negative, got {value}")
    return value


class EnvConfigProvider:
    """Environment-based configuration provider."""

    def get_cluster_config(self) -> ClusterConfig:
        """Get management cluster configuration from environment variables."""
        return ClusterConfig(
            kubeconfig_path=os.getenv("MANAGEMENT_KUBECONFIG") or None,
            context=os.getenv("MANAGEMENT_CONTEXT") or None,
        )

    def get_sync_config(self) -> SyncConfig:
        """Get synchronization configuration from environment variables."""
        return SyncConfig(
            bootstrap_secret_name=os.getenv("BOOTSTRAP_SECRET_NAME", "tenant-kubeconfig"),
            access_descriptor_key=os.getenv("ACCESS_DESCRIPTOR_KEY", "kubeconfig"),
            label_selector=os.getenv("SECRET_LABEL_SELECTOR") or None,
            resync_period=_env_int("RESYNC_PERIOD", 600, minimum=1),
            cache_sync_timeout=_env_int("CACHE_SYNC_TIMEOUT", 60, minimum=1),
            cache_tenant_clients=os.getenv("TENANT_CLIENT_CACHE", "false").lower() == "true",
            write_max_attempts=_env_int("WRITE_MAX_ATTEMPTS", 1, minimum=1),
            write_backoff_base=_env_float("WRITE_BACKOFF_BASE", 0.5),
            write_backoff_max=_env_float("WRITE_BACKOFF_MAX", 10.0),
        )

    def get_api_config(self) -> APIConfig:
        """Get health API configuration from environment variables."""
        return APIConfig(
            host=os.getenv("API_HOST", "0.0.0.0"),
            port=_env_int("API_PORT", 8081, minimum=1),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )
