"""Capacity derivation from a cluster registration.

Each capacity field is read from the registration's capacity map. A
missing entry means zero, not unknown; so does an entry that cannot be
parsed as a non-negative quantity.
"""

from __future__ import annotations

import logging
import math
from typing import Any

from kubernetes.utils.quantity import parse_quantity

from acm_exporter.models import CapacityFields, ClusterInfo, ClusterRegistration

logger = logging.getLogger(__name__)

WORKER_LABEL = "node-role.kubernetes.io/worker"

RESOURCE_CPU = "cpu"
RESOURCE_CPU_WORKER = "cpu_worker"
RESOURCE_CORE = "core"
RESOURCE_CORE_WORKER = "core_worker"
RESOURCE_SOCKET = "socket"
RESOURCE_SOCKET_WORKER = "socket_worker"

# Field name on CapacityFields -> resource name in the capacity map
CAPACITY_RESOURCES: dict[str, str] = {
    "cpu": RESOURCE_CPU,
    "cpu_worker": RESOURCE_CPU_WORKER,
    "core": RESOURCE_CORE,
    "core_worker": RESOURCE_CORE_WORKER,
    "socket": RESOURCE_SOCKET,
    "socket_worker": RESOURCE_SOCKET_WORKER,
}


def quantity_value(raw: Any) -> int:
    """Convert a Kubernetes quantity to an integer count.

    Fractional quantities round up (``"1500m"`` is 2). Absent, malformed,
    or negative quantities are 0.
    """
    if raw is None or isinstance(raw, bool):
        return 0
    try:
        value = parse_quantity(raw)
    except (ValueError, TypeError, ArithmeticError):
        logger.debug("Ignoring malformed quantity %r", raw)
        return 0
    if not value.is_finite() or value < 0:
        logger.debug("Ignoring out-of-range quantity %r", raw)
        return 0
    return math.ceil(value)


def derive_capacity(registration: ClusterRegistration) -> CapacityFields:
    """Read the six capacity fields from a registration's capacity map."""
    return CapacityFields(**{
        field_name: quantity_value(registration.capacity.get(resource))
        for field_name, resource in CAPACITY_RESOURCES.items()
    })


def has_worker_node(info: ClusterInfo) -> bool:
    """True if any node carries the worker role label, whatever its value."""
    return any(WORKER_LABEL in node.labels for node in info.nodes)
