"""Running controller: a change feed feeding a sync handler."""

import logging
from typing import Optional

from ..feed import ChangeFeed
from ..resolver import CachingResolver, TenantClientResolver
from ..sync import SyncHandler

logger = logging.getLogger(__name__)


class SecretController:
    """Owns the change feed and handler for the lifetime of the process."""

    def __init__(self, feed: ChangeFeed, handler: SyncHandler, resolver: TenantClientResolver):
        self.feed = feed
        self.handler = handler
        self.resolver = resolver

    @property
    def has_synced(self) -> bool:
        return self.feed.has_synced

    def start(self) -> None:
        logger.info("Starting secret controller")
        self.feed.start()

    def wait_for_sync(self, timeout: Optional[float] = None) -> bool:
        """Wait for the initial secret list. Returns False on timeout."""
        return self.feed.wait_for_sync(timeout)

    def stop(self) -> None:
        logger.info("Shutting down controller")
        self.feed.stop()
        if isinstance(self.resolver, CachingResolver):
            self.resolver.clear()
