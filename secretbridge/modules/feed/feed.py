"""
Change feed - list/watch of Secrets across all namespaces.

A watcher thread lists existing Secrets, marks the feed synced, then watches
from the list's resourceVersion. Creations are put on a queue drained by a
single dispatcher thread, so the handler never runs concurrently with itself.

The watch is restarted with a fresh list every resync period and whenever
the server reports the resourceVersion as expired (410 Gone). A local store
of known Secret UIDs keeps relists from redelivering objects already seen.
"""

import logging
import threading
from queue import Empty, Queue
from typing import Any, Callable, Dict, Optional, Tuple

from kubernetes import client as k8s_client
from kubernetes import watch
from kubernetes.client.rest import ApiException

logger = logging.getLogger(__name__)

HTTP_GONE = 410

_STOP = object()

ObjectKey = Tuple[str, str]


class ChangeFeed:
    """Delivers "secret created" notifications to a handler, one at a time."""

    def __init__(
        self,
        core_api: k8s_client.CoreV1Api,
        handler: Callable[[Any], Any],
        resync_period: int = 600,
        label_selector: Optional[str] = None,
        retry_interval: float = 5.0,
    ):
        """
        Initialize change feed.

        Args:
            core_api: CoreV1Api for the management cluster
            handler: Called with each newly created V1Secret
            resync_period: Seconds a single watch runs before relisting
            label_selector: Optional server-side label filter
            retry_interval: Seconds to wait after a failed list or watch
        """
        self.core_api = core_api
        self.handler = handler
        self.resync_period = resync_period
        self.label_selector = label_selector
        self.retry_interval = retry_interval

        self.event_queue: Queue = Queue()
        self._known: Dict[ObjectKey, str] = {}
        self._synced = threading.Event()
        self._stopping = threading.Event()
        self._watch: Optional[watch.Watch] = None
        self._threads = []

    @property
    def has_synced(self) -> bool:
        return self._synced.is_set()

    def start(self) -> None:
        """Start the watcher and dispatcher threads."""
        if self._threads:
            raise RuntimeError("change feed already started")

        logger.info("Starting secret change feed")
        self._threads = [
            threading.Thread(target=self._dispatch_loop, name="secretbridge-dispatch", daemon=True),
            threading.Thread(target=self._watch_loop, name="secretbridge-watch", daemon=True),
        ]
        for thread in self._threads:
            thread.start()

    def wait_for_sync(self, timeout: Optional[float] = None) -> bool:
        """Block until the initial list has been queued. Returns False on timeout."""
        return self._synced.wait(timeout)

    def stop(self, timeout: float = 5.0) -> None:
        """
        Stop watching and dispatching.

        A handler call already in progress is allowed to finish; it is not
        cancelled.
        """
        logger.info("Shutting down change feed")
        self._stopping.set()
        if self._watch is not None:
            self._watch.stop()
        self.event_queue.put(_STOP)
        for thread in self._threads:
            thread.join(timeout)

    # Watcher

    def _watch_loop(self) -> None:
        while not self._stopping.is_set():
            try:
                resource_version = self._list()
                self._watch_from(resource_version)
            except ApiException as e:
                if e.status == HTTP_GONE:
                    logger.info("Watch resourceVersion expired, relisting")
                    continue
                logger.error(f"Secret watch failed: {e.status} {e.reason}")
                self._stopping.wait(self.retry_interval)
            except Exception as e:
                logger.error(f"Secret watch error: {e}")
                logger.info(f"Relisting in {self.retry_interval} seconds...")
                self._stopping.wait(self.retry_interval)

    def _list(self) -> str:
        """List all secrets, queue the unseen ones, return the list resourceVersion."""
        secrets = self.core_api.list_secret_for_all_namespaces(**self._selector())

        seen = set()
        for secret in secrets.items:
            key = self._key(secret)
            seen.add(key)
            self._observe_added(secret)

        # Drop objects deleted while we were not watching
        for key in list(self._known):
            if key not in seen:
                del self._known[key]

        if not self._synced.is_set():
            logger.info(f"Initial secret list complete ({len(secrets.items)} objects)")
            self._synced.set()

        return secrets.metadata.resource_version

    def _watch_from(self, resource_version: str) -> None:
        self._watch = watch.Watch()
        stream = self._watch.stream(
            self.core_api.list_secret_for_all_namespaces,
            resource_version=resource_version,
            timeout_seconds=self.resync_period,
            **self._selector(),
        )
        for event in stream:
            if self._stopping.is_set():
                break
            self._on_event(event)
        logger.debug("Watch window closed")

    def _on_event(self, event: Dict[str, Any]) -> None:
        event_type = event.get("type")
        obj = event.get("object")

        if event_type == "ADDED":
            self._observe_added(obj)
        elif event_type == "MODIFIED":
            if isinstance(obj, k8s_client.V1Secret):
                self._known[self._key(obj)] = obj.metadata.uid
        elif event_type == "DELETED":
            if isinstance(obj, k8s_client.V1Secret):
                self._known.pop(self._key(obj), None)
        elif event_type == "ERROR":
            raw = event.get("raw_object") or {}
            raise ApiException(status=raw.get("code"), reason=raw.get("message"))

    def _observe_added(self, obj: Any) -> None:
        """Queue obj if it is a secret this feed has not delivered yet."""
        if not isinstance(obj, k8s_client.V1Secret) or obj.metadata is None:
            # Let the handler decide what to do with it
            self.event_queue.put(obj)
            return

        key = self._key(obj)
        uid = obj.metadata.uid
        if key in self._known and self._known[key] == uid:
            return
        self._known[key] = uid
        self.event_queue.put(obj)

    def _selector(self) -> Dict[str, str]:
        return {"label_selector": self.label_selector} if self.label_selector else {}

    @staticmethod
    def _key(secret: k8s_client.V1Secret) -> ObjectKey:
        return secret.metadata.namespace, secret.metadata.name

    # Dispatcher

    def _dispatch_loop(self) -> None:
        logger.info("Event dispatcher started")
        while True:
            try:
                obj = self.event_queue.get(timeout=1.0)
            except Empty:
                if self._stopping.is_set():
                    break
                continue

            if obj is _STOP:
                break

            try:
                self.handler(obj)
            except Exception as e:
                logger.error(f"Error handling secret event: {e}")
        logger.info("Event dispatcher stopped")
