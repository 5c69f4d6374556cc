"""Field extraction: raw resource records to typed views.

Raw records are the plain dicts the Kubernetes API returns for custom
resources. Decoding happens once at the store boundary; the rest of the
pipeline only sees the typed views from :mod:`acm_exporter.models`.
"""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from acm_exporter.models import (
    ClusterInfo,
    ClusterRegistration,
    KubeVendor,
    NodeInfo,
    ProvisioningRecord,
)


class DecodeError(Exception):
    """Raised when a raw record cannot be decoded into a typed view."""


def _mapping(raw: Any, path: str) -> dict[str, Any]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise DecodeError(f"Expected a mapping at '{path}', got {type(raw).__name__}")
    return raw


def _string(raw: Any, path: str) -> str:
    if raw is None:
        return ""
    if not isinstance(raw, str):
        raise DecodeError(f"Expected a string at '{path}', got {type(raw).__name__}")
    return raw


def _metadata(raw: Any) -> tuple[str, str]:
    obj = _mapping(raw, "<root>")
    metadata = _mapping(obj.get("metadata"), "metadata")
    name = _string(metadata.get("name"), "metadata.name")
    if not name:
        raise DecodeError("Resource has no metadata.name")
    return name, _string(metadata.get("namespace"), "metadata.namespace")


def decode_info(raw: Any) -> ClusterInfo:
    """Decode a ManagedClusterInfo record.

    Raises:
        DecodeError: If the record is not shaped like a cluster info.
    """
    name, namespace = _metadata(raw)
    status = _mapping(raw.get("status"), "status")
    distribution = _mapping(status.get("distributionInfo"), "status.distributionInfo")
    ocp = _mapping(distribution.get("ocp"), "status.distributionInfo.ocp")

    raw_nodes = status.get("nodeList") or []
    if not isinstance(raw_nodes, list):
        raise DecodeError("'status.nodeList' must be a list")

    try:
        nodes: list[NodeInfo] = []
        for i, entry in enumerate(raw_nodes):
            node = _mapping(entry, f"status.nodeList[{i}]")
            nodes.append(NodeInfo(
                name=_string(node.get("name"), f"status.nodeList[{i}].name"),
                labels=_mapping(node.get("labels"), f"status.nodeList[{i}].labels"),
            ))
        return ClusterInfo(
            name=name,
            namespace=namespace,
            cluster_id=_string(status.get("clusterID"), "status.clusterID"),
            kube_vendor=_string(status.get("kubeVendor"), "status.kubeVendor"),
            cloud_vendor=_string(status.get("cloudVendor"), "status.cloudVendor"),
            version=_string(status.get("version"), "status.version"),
            ocp_version=_string(ocp.get("version"), "status.distributionInfo.ocp.version"),
            nodes=nodes,
        )
    except ValidationError as e:
        raise DecodeError(f"Invalid cluster info {name}: {e}") from e


def decode_registration(raw: Any) -> ClusterRegistration:
    """Decode a ManagedCluster record.

    Raises:
        DecodeError: If the record is not shaped like a cluster registration.
    """
    name, _ = _metadata(raw)
    status = _mapping(raw.get("status"), "status")
    capacity = _mapping(status.get("capacity"), "status.capacity")
    return ClusterRegistration(name=name, capacity=dict(capacity))


def decode_provisioning(raw: Any) -> ProvisioningRecord:
    """Decode a ClusterDeployment record (only its identity is kept)."""
    name, namespace = _metadata(raw)
    return ProvisioningRecord(name=name, namespace=namespace)


def resolve_cluster_id(info: ClusterInfo) -> str:
    """Return the managed cluster ID to publish.

    Non-OpenShift clusters without an explicit ID use their name instead;
    an OpenShift cluster without an ID is left empty.
    """
    if info.cluster_id:
        return info.cluster_id
    if info.kube_vendor != KubeVendor.OPENSHIFT:
        return info.name
    return ""


def resolve_version(info: ClusterInfo) -> str:
    """Return the distribution version for the cluster's vendor.

    OpenShift reports its version in a nested distribution field; every
    other vendor uses the generic version field.
    """
    if not info.kube_vendor:
        return ""
    if info.kube_vendor == KubeVendor.OPENSHIFT:
        return info.ocp_version
    return info.version
