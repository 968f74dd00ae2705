"""
Sync Module - Black Box Interface

Purpose: Propagate one created Secret into its tenant cluster
Interface: SyncHandler.on_create(obj) -> SyncOutcome
Hidden: bootstrap lookup, payload decoding, tenant write retries

Every per-event failure is logged and absorbed here; nothing is requeued.
"""

from .handler import SyncHandler, SyncOutcome, SyncStatus
from .retry import DeadLetter, RetryPolicy
from .secrets import COPIED_FIELDS, build_tenant_secret, decode_secret_data

__all__ = [
    "SyncHandler",
    "SyncOutcome",
    "SyncStatus",
    "RetryPolicy",
    "DeadLetter",
    "COPIED_FIELDS",
    "build_tenant_secret",
    "decode_secret_data",
]
