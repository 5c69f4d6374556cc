"""Join orchestrator for the ``acm_managed_cluster_info`` metric.

For every cluster info change, fetches the cluster's registration and
provisioning record, derives the published fields, applies the
completeness gate, and produces zero or one metric record.

Failures never propagate to the caller: missing data for one cluster
must not stop collection for the rest of the fleet. Every failure path
is logged and yields no records.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from acm_exporter.capacity import derive_capacity, has_worker_node
from acm_exporter.extract import (
    DecodeError,
    decode_info,
    decode_provisioning,
    decode_registration,
    resolve_cluster_id,
    resolve_version,
)
from acm_exporter.gate import missing_fields
from acm_exporter.models import ClusterInfo, CreatedVia, MetricFamily, MetricRecord, MetricType
from acm_exporter.record import (
    FAMILY_HELP,
    FAMILY_NAME,
    FAMILY_TYPE,
    build_family,
    build_record,
)
from acm_exporter.store import (
    PROVISIONING_KIND,
    REGISTRATION_KIND,
    ResourceStore,
    StoreError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FamilyGenerator:
    """A metric family and the function generating it for one object."""

    name: str
    type: MetricType
    help: str
    generate: Callable[[Any], MetricFamily]


class ClusterInfoJoiner:
    """Joins cluster info, registration, and provisioning into one record.

    Holds no per-cluster state; one instance can serve concurrent
    invocations for different clusters.
    """

    def __init__(self, hub_cluster_id: str, store: ResourceStore) -> None:
        self._hub_cluster_id = hub_cluster_id
        self._store = store

    @property
    def hub_cluster_id(self) -> str:
        return self._hub_cluster_id

    def on_info_changed(self, obj: dict[str, Any] | ClusterInfo) -> list[MetricRecord]:
        """Return the record for a changed cluster info, or an empty list."""
        try:
            record = self._join(obj)
        except Exception:
            logger.exception("Unexpected error joining cluster info")
            return []
        return [record] if record is not None else []

    def generate_family(self, obj: dict[str, Any] | ClusterInfo) -> MetricFamily:
        return build_family(self.on_info_changed(obj))

    # --- Private: join steps ---

    def _join(self, obj: dict[str, Any] | ClusterInfo) -> MetricRecord | None:
        if isinstance(obj, ClusterInfo):
            info = obj
        else:
            try:
                info = decode_info(obj)
            except DecodeError as e:
                logger.error("Cannot decode cluster info: %s", e)
                return None

        name = info.name
        logger.debug("Joining cluster info %s", name)

        try:
            raw_registration = self._store.get(REGISTRATION_KIND, name)
        except StoreError as e:
            logger.error("Error fetching cluster registration %s: %s", name, e)
            return None
        if raw_registration is None:
            logger.error("Cluster registration %s not found", name)
            return None
        try:
            registration = decode_registration(raw_registration)
        except DecodeError as e:
            logger.error("Cannot decode cluster registration %s: %s", name, e)
            return None

        created_via = self._created_via(name)
        if created_via is None:
            return None
        cluster_id = resolve_cluster_id(info)
        version = resolve_version(info)
        capacity = derive_capacity(registration)
        has_worker = has_worker_node(info)

        missing = missing_fields(
            cluster_id,
            info.kube_vendor,
            info.cloud_vendor,
            version,
            capacity.cpu,
            capacity.cpu_worker,
            has_worker,
        )
        if missing:
            logger.info(
                "Not enough information available for %s (missing: %s)",
                name, ", ".join(missing),
            )
            logger.debug(
                "Cluster %s: cluster_id=%r kube_vendor=%r cloud_vendor=%r version=%r "
                "capacity=%s has_worker=%s",
                name, cluster_id, info.kube_vendor, info.cloud_vendor, version,
                capacity.model_dump(), has_worker,
            )
            return None

        return build_record(
            hub_cluster_id=self._hub_cluster_id,
            cluster_id=cluster_id,
            kube_vendor=info.kube_vendor,
            cloud_vendor=info.cloud_vendor,
            version=version,
            created_via=created_via,
            capacity=capacity,
        )

    def _created_via(self, name: str) -> CreatedVia | None:
        """Hive if a provisioning record exists, Other otherwise.

        A fetch error other than not-found also counts as Other; it is
        only logged louder. A record that exists but cannot be decoded
        returns None and aborts the join.
        """
        try:
            raw = self._store.get(PROVISIONING_KIND, name, namespace=name)
        except StoreError as e:
            logger.warning("Error fetching cluster deployment %s, assuming Other: %s", name, e)
            return CreatedVia.OTHER
        if raw is None:
            logger.info("Cluster deployment %s not found", name)
            return CreatedVia.OTHER
        try:
            decode_provisioning(raw)
        except DecodeError as e:
            logger.error("Cannot decode cluster deployment %s: %s", name, e)
            return None
        return CreatedVia.HIVE


def wrap_family_generator(
    func: Callable[[Any], MetricFamily],
) -> Callable[[Any], MetricFamily]:
    """Wrap *func* so every returned metric owns fresh label lists."""

    def wrapper(obj: Any) -> MetricFamily:
        family = func(obj)
        return family.model_copy(update={
            "metrics": [
                m.model_copy(update={
                    "label_keys": list(m.label_keys),
                    "label_values": list(m.label_values),
                })
                for m in family.metrics
            ],
        })

    return wrapper


def managed_cluster_info_families(
    hub_cluster_id: str, store: ResourceStore,
) -> list[FamilyGenerator]:
    """Return the metric families published for cluster info objects."""
    joiner = ClusterInfoJoiner(hub_cluster_id, store)
    return [
        FamilyGenerator(
            name=FAMILY_NAME,
            type=FAMILY_TYPE,
            help=FAMILY_HELP,
            generate=wrap_family_generator(joiner.generate_family),
        ),
    ]
