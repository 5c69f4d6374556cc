"""Core data models for acm-exporter.

Defines the typed views the join pipeline works on:
- Cluster info (vendor, cloud, version, nodes)
- Cluster registration (capacity quantities)
- Provisioning record (existence only)
- Derived capacity fields
- Metric records and families (output)

All views are rebuilt from raw resources on every join; nothing here is
persisted or mutated after construction.
"""

from __future__ import annotations

import enum
from typing import Any

from pydantic import BaseModel, Field

# --- Enums ---


class KubeVendor(enum.StrEnum):
    OPENSHIFT = "OpenShift"
    AKS = "AKS"
    EKS = "EKS"
    GKE = "GKE"
    IKS = "IKS"
    OTHER = "Other"


class CreatedVia(enum.StrEnum):
    HIVE = "Hive"
    OTHER = "Other"


class MetricType(enum.StrEnum):
    GAUGE = "gauge"
    COUNTER = "counter"


# --- Resource views ---


class NodeInfo(BaseModel):
    """A node descriptor from the cluster info node list."""

    name: str = ""
    labels: dict[str, str] = Field(default_factory=dict)


class ClusterInfo(BaseModel):
    """Registration and status facts about a managed cluster.

    ``kube_vendor`` is kept as a plain string: vendors outside
    :class:`KubeVendor` are valid and an empty value means unknown.
    """

    name: str
    namespace: str = ""
    cluster_id: str = ""
    kube_vendor: str = ""
    cloud_vendor: str = ""
    version: str = ""
    ocp_version: str = ""
    nodes: list[NodeInfo] = Field(default_factory=list)


class ClusterRegistration(BaseModel):
    """Capability and capacity facts about a managed cluster.

    ``capacity`` holds raw Kubernetes quantities (``"16"``, ``"8000m"``,
    or plain numbers) keyed by resource name.
    """

    name: str
    capacity: dict[str, Any] = Field(default_factory=dict)


class ProvisioningRecord(BaseModel):
    """Marks a cluster created through the automated provisioning path."""

    name: str
    namespace: str = ""


class CapacityFields(BaseModel):
    cpu: int = Field(default=0, ge=0)
    cpu_worker: int = Field(default=0, ge=0)
    core: int = Field(default=0, ge=0)
    core_worker: int = Field(default=0, ge=0)
    socket: int = Field(default=0, ge=0)
    socket_worker: int = Field(default=0, ge=0)

    def as_tuple(self) -> tuple[int, int, int, int, int, int]:
        return (
            self.cpu,
            self.cpu_worker,
            self.core,
            self.core_worker,
            self.socket,
            self.socket_worker,
        )


# --- Output ---


class MetricRecord(BaseModel):
    """A single labeled sample.

    Label keys and values correspond positionally.
    """

    label_keys: list[str]
    label_values: list[str]
    value: float = 1.0

    def labels(self) -> dict[str, str]:
        return dict(zip(self.label_keys, self.label_values, strict=True))


class MetricFamily(BaseModel):
    """A named group of samples sharing one type and help text."""

    name: str
    type: MetricType = MetricType.GAUGE
    help: str = ""
    metrics: list[MetricRecord] = Field(default_factory=list)
