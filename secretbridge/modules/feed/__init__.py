"""
Feed Module - Black Box Interface

Purpose: Deliver "secret created" notifications from the management cluster
Interface: start(), wait_for_sync(), stop(), has_synced
Hidden: list/watch mechanics, relisting, deduplication, dispatch threading

Can be replaced with any watch mechanism that keeps dispatch serialized.
"""

from .feed import ChangeFeed

__all__ = ["ChangeFeed"]
