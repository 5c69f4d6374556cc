"""Resource stores for hub cluster custom resources.

Stores: InMemoryStore, K8sResourceStore.
"""

from acm_exporter.store.base import (
    CLUSTER_VERSION_KIND,
    INFO_KIND,
    PROVISIONING_KIND,
    REGISTRATION_KIND,
    InMemoryStore,
    ResourceKind,
    ResourceStore,
    StoreError,
    WatchEvent,
)

__all__ = [
    "CLUSTER_VERSION_KIND",
    "INFO_KIND",
    "InMemoryStore",
    "PROVISIONING_KIND",
    "REGISTRATION_KIND",
    "ResourceKind",
    "ResourceStore",
    "StoreError",
    "WatchEvent",
]
