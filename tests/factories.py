"""Builders for raw hub resources shaped like the Kubernetes API returns them."""

from __future__ import annotations

from typing import Any

from acm_exporter.capacity import WORKER_LABEL
from acm_exporter.store import (
    INFO_KIND,
    PROVISIONING_KIND,
    REGISTRATION_KIND,
)


def make_info(
    name: str = "c1",
    cluster_id: str | None = None,
    kube_vendor: str = "OpenShift",
    cloud_vendor: str = "AWS",
    version: str = "",
    ocp_version: str = "4.10.2",
    worker: bool = True,
) -> dict[str, Any]:
    if cluster_id is None:
        cluster_id = f"0b7f2c61-cluster-{name}"
    labels: dict[str, str] = {"kubernetes.io/hostname": f"{name}-node-0"}
    if worker:
        labels[WORKER_LABEL] = ""
    return {
        "apiVersion": INFO_KIND.api_version,
        "kind": INFO_KIND.kind,
        "metadata": {"name": name, "namespace": name},
        "status": {
            "clusterID": cluster_id,
            "kubeVendor": kube_vendor,
            "cloudVendor": cloud_vendor,
            "version": version,
            "distributionInfo": {"type": "OCP", "ocp": {"version": ocp_version}},
            "nodeList": [{"name": f"{name}-node-0", "labels": labels}],
        },
    }


def make_registration(name: str = "c1", **capacity: Any) -> dict[str, Any]:
    if not capacity:
        capacity = {
            "cpu": "16",
            "cpu_worker": "8",
            "core": "8",
            "core_worker": "4",
            "socket": "2",
            "socket_worker": "1",
        }
    return {
        "apiVersion": REGISTRATION_KIND.api_version,
        "kind": REGISTRATION_KIND.kind,
        "metadata": {"name": name},
        "status": {"capacity": capacity},
    }


def make_provisioning(name: str = "c1") -> dict[str, Any]:
    return {
        "apiVersion": PROVISIONING_KIND.api_version,
        "kind": PROVISIONING_KIND.kind,
        "metadata": {"name": name, "namespace": name},
        "spec": {"clusterName": name},
    }
