"""
secretbridge - Tenant Secret Synchronization

Propagates Secrets created in a management cluster namespace into the
matching namespace of a tenant cluster, authenticating with a per-namespace
bootstrap kubeconfig Secret.

Architecture:
- Each module is self-contained with clear interfaces
- Modules are completely replaceable
- No module knows the internals of another
- All communication through defined interfaces

Modules:
- resolver: Tenant client construction from bootstrap credentials
- feed: Secret list/watch and serialized event dispatch
- sync: Per-event synchronization into the tenant cluster
- controller: Composition root wiring the modules together
- api: Health and readiness endpoints
"""

__version__ = "1.0.0"
