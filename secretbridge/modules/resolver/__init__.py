"""
Resolver Module - Black Box Interface

Purpose: Build an authenticated tenant cluster client from a bootstrap payload
Interface: TenantClientResolver.resolve(payload, namespace=None)
Hidden: kubeconfig parsing, TLS material handling, client caching

Can be replaced with other resolution strategies (mutual TLS, token exchange).
"""

from .cache import CachingResolver
from .interfaces import TenantClientResolver
from .kubeconfig import KubeconfigResolver

__all__ = ["TenantClientResolver", "KubeconfigResolver", "CachingResolver"]
