"""acm-exporter: managed cluster info metrics for an Open Cluster Management hub."""

__version__ = "0.1.0"

from acm_exporter.cache import MetricCache, MetricCacheCollector
from acm_exporter.collector import (
    ClusterInfoJoiner,
    FamilyGenerator,
    managed_cluster_info_families,
    wrap_family_generator,
)
from acm_exporter.config import ExporterConfig, find_config, load_config
from acm_exporter.models import (
    CapacityFields,
    ClusterInfo,
    ClusterRegistration,
    CreatedVia,
    KubeVendor,
    MetricFamily,
    MetricRecord,
    ProvisioningRecord,
)
from acm_exporter.reflector import Reflector
from acm_exporter.store import InMemoryStore, ResourceStore, StoreError

__all__ = [
    "CapacityFields",
    "ClusterInfo",
    "ClusterInfoJoiner",
    "ClusterRegistration",
    "CreatedVia",
    "ExporterConfig",
    "FamilyGenerator",
    "find_config",
    "InMemoryStore",
    "KubeVendor",
    "load_config",
    "managed_cluster_info_families",
    "MetricCache",
    "MetricCacheCollector",
    "MetricFamily",
    "MetricRecord",
    "ProvisioningRecord",
    "Reflector",
    "ResourceStore",
    "StoreError",
    "wrap_family_generator",
    "__version__",
]
