"""Per-namespace caching of resolved tenant clients."""

import hashlib
import logging
import threading
from dataclasses import dataclass
from typing import Dict, Mapping, Optional

from kubernetes import client as k8s_client

from .interfaces import TenantClientResolver
from .kubeconfig import DEFAULT_ACCESS_KEY

logger = logging.getLogger(__name__)


@dataclass
class _CacheEntry:
    digest: str
    client: k8s_client.CoreV1Api


class CachingResolver:
    """
    Cache tenant clients per namespace on top of another resolver.

    An entry is reused while the access descriptor bytes are unchanged and
    rebuilt when the bootstrap credential changes. Construction is
    single-flight per namespace: concurrent callers for one namespace wait
    on the same lock, and only the first one builds the client.
    """

    def __init__(self, inner: TenantClientResolver, access_key: str = DEFAULT_ACCESS_KEY):
        self.inner = inner
        self.access_key = access_key
        self._entries: Dict[str, _CacheEntry] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._guard = threading.Lock()

    def resolve(
        self, payload: Mapping[str, bytes], namespace: Optional[str] = None
    ) -> k8s_client.CoreV1Api:
        """Return the cached client for namespace, building it when stale."""
        if namespace is None or self.access_key not in payload:
            return self.inner.resolve(payload, namespace=namespace)

        digest = hashlib.sha256(payload[self.access_key]).hexdigest()

        with self._namespace_lock(namespace):
            entry = self._entries.get(namespace)
            if entry is not None and entry.digest == digest:
                return entry.client

            if entry is not None:
                logger.info(f"Bootstrap credential changed in {namespace}, rebuilding tenant client")

            tenant_client = self.inner.resolve(payload, namespace=namespace)

            with self._guard:
                stale = self._entries.get(namespace)
                self._entries[namespace] = _CacheEntry(digest=digest, client=tenant_client)
            if stale is not None:
                self._close(stale)
            return tenant_client

    def invalidate(self, namespace: str) -> None:
        """Drop the cached client for namespace."""
        with self._guard:
            entry = self._entries.pop(namespace, None)
            self._release_lock(namespace)
        if entry is not None:
            self._close(entry)

    def clear(self) -> None:
        """Drop every cached client."""
        with self._guard:
            entries = list(self._entries.values())
            self._entries.clear()
            for namespace in list(self._locks):
                self._release_lock(namespace)
        for entry in entries:
            self._close(entry)

    def __len__(self) -> int:
        return len(self._entries)

    def _namespace_lock(self, namespace: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(namespace)
            if lock is None:
                lock = self._locks[namespace] = threading.Lock()
            return lock

    def _release_lock(self, namespace: str) -> None:
        # Caller holds _guard; a lock held by a builder is kept
        lock = self._locks.get(namespace)
        if lock is not None and not lock.locked():
            del self._locks[namespace]

    @staticmethod
    def _close(entry: _CacheEntry) -> None:
        api_client = getattr(entry.client, "api_client", None)
        if api_client is None:
            return
        try:
            api_client.close()
        except Exception as e:
            logger.warning(f"Failed to close tenant client: {e}")
