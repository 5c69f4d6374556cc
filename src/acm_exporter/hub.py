"""Hub cluster identity."""

from __future__ import annotations

import logging

from acm_exporter.store import CLUSTER_VERSION_KIND, ResourceStore, StoreError

logger = logging.getLogger(__name__)

CLUSTER_VERSION_NAME = "version"


def resolve_hub_cluster_id(store: ResourceStore, configured: str | None = None) -> str:
    """Return the hub's cluster ID.

    A configured value wins. Otherwise the ID is read from the hub's
    ClusterVersion ``version`` object; if that is unavailable the hub ID
    is empty.
    """
    if configured:
        return configured
    try:
        cv = store.get(CLUSTER_VERSION_KIND, CLUSTER_VERSION_NAME)
    except StoreError as e:
        logger.warning("Cannot read hub cluster version: %s", e)
        return ""
    if cv is None:
        logger.warning("Hub cluster version %r not found", CLUSTER_VERSION_NAME)
        return ""
    spec = cv.get("spec") or {}
    cluster_id = spec.get("clusterID") or ""
    if not isinstance(cluster_id, str):
        logger.warning("Hub cluster version has a non-string clusterID: %r", cluster_id)
        return ""
    if not cluster_id:
        logger.warning("Hub cluster version has no clusterID")
    return cluster_id
