"""Record builder for the managed cluster info metric."""

from __future__ import annotations

from acm_exporter.models import CapacityFields, MetricFamily, MetricRecord, MetricType

FAMILY_NAME = "acm_managed_cluster_info"
FAMILY_HELP = "Managed cluster information"
FAMILY_TYPE = MetricType.GAUGE

LABEL_KEYS: tuple[str, ...] = (
    "hub_cluster_id",
    "managed_cluster_id",
    "vendor",
    "cloud",
    "version",
    "created_via",
    "cpu",
    "cpu_worker",
    "core",
    "core_worker",
    "socket",
    "socket_worker",
)


def build_record(
    hub_cluster_id: str,
    cluster_id: str,
    kube_vendor: str,
    cloud_vendor: str,
    version: str,
    created_via: str,
    capacity: CapacityFields,
) -> MetricRecord:
    """Assemble one sample with labels in :data:`LABEL_KEYS` order."""
    values = [
        hub_cluster_id,
        cluster_id,
        str(kube_vendor),
        str(cloud_vendor),
        version,
        str(created_via),
        *(str(v) for v in capacity.as_tuple()),
    ]
    return MetricRecord(label_keys=list(LABEL_KEYS), label_values=values, value=1)


def build_family(records: list[MetricRecord]) -> MetricFamily:
    return MetricFamily(
        name=FAMILY_NAME,
        type=FAMILY_TYPE,
        help=FAMILY_HELP,
        metrics=records,
    )


__all__ = [
    "FAMILY_HELP",
    "FAMILY_NAME",
    "FAMILY_TYPE",
    "LABEL_KEYS",
    "MetricFamily",
    "build_family",
    "build_record",
]
