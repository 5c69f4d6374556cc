"""Completeness gate for managed cluster records.

A sample with missing dimensions is worse than no sample, so a record
is only published when every dimension is known.
"""

from __future__ import annotations


def missing_fields(
    cluster_id: str,
    kube_vendor: str,
    cloud_vendor: str,
    version: str,
    cpu: int,
    cpu_worker: int,
    has_worker: bool,
) -> list[str]:
    """Return the names of the checks that fail, in a stable order."""
    missing: list[str] = []
    if not cluster_id:
        missing.append("cluster_id")
    if not kube_vendor:
        missing.append("kube_vendor")
    if not cloud_vendor:
        missing.append("cloud_vendor")
    if not version:
        missing.append("version")
    if cpu == 0:
        missing.append("cpu")
    # Worker nodes exist but report no worker CPU: stale, not a real zero
    if cpu_worker == 0 and has_worker:
        missing.append("cpu_worker")
    return missing


def is_complete(
    cluster_id: str,
    kube_vendor: str,
    cloud_vendor: str,
    version: str,
    cpu: int,
    cpu_worker: int,
    has_worker: bool,
) -> bool:
    """True if the record has enough information to be published."""
    return not missing_fields(
        cluster_id, kube_vendor, cloud_vendor, version, cpu, cpu_worker, has_worker,
    )
