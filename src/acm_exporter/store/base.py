"""Resource store protocol, resource kinds, and the built-in InMemoryStore.

The ResourceStore protocol defines read access to the hub cluster's
custom resources. Any object with ``get()``, ``list()``, and ``watch()``
methods satisfies the protocol; no inheritance is required.
"""

from __future__ import annotations

import copy
import threading
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable


class StoreError(Exception):
    """Raised when a resource cannot be read (anything but not-found)."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


@dataclass(frozen=True)
class ResourceKind:
    """Identifies a custom resource type by group, version, and plural."""

    kind: str
    group: str
    version: str
    plural: str
    namespaced: bool = True

    @property
    def api_version(self) -> str:
        return f"{self.group}/{self.version}"

    def __str__(self) -> str:
        return f"{self.plural}.{self.group}"


INFO_KIND = ResourceKind(
    kind="ManagedClusterInfo",
    group="internal.open-cluster-management.io",
    version="v1beta1",
    plural="managedclusterinfos",
)

REGISTRATION_KIND = ResourceKind(
    kind="ManagedCluster",
    group="cluster.open-cluster-management.io",
    version="v1",
    plural="managedclusters",
    namespaced=False,
)

PROVISIONING_KIND = ResourceKind(
    kind="ClusterDeployment",
    group="hive.openshift.io",
    version="v1",
    plural="clusterdeployments",
)

CLUSTER_VERSION_KIND = ResourceKind(
    kind="ClusterVersion",
    group="config.openshift.io",
    version="v1",
    plural="clusterversions",
    namespaced=False,
)


@dataclass(frozen=True)
class WatchEvent:
    """A single list/watch notification."""

    type: str  # ADDED, MODIFIED, DELETED
    object: dict[str, Any]


@runtime_checkable
class ResourceStore(Protocol):
    """Protocol for read-only resource stores.

    ``get()`` returns ``None`` when the resource does not exist and raises
    :class:`StoreError` for every other failure.
    """

    def get(
        self,
        kind: ResourceKind,
        name: str,
        namespace: str | None = None,
    ) -> dict[str, Any] | None:
        """Fetch one resource by name."""
        ...

    def list(
        self,
        kind: ResourceKind,
        namespace: str | None = None,
    ) -> tuple[list[dict[str, Any]], str]:
        """List resources. Returns the items and the list's resource version."""
        ...

    def watch(
        self,
        kind: ResourceKind,
        namespace: str | None = None,
        resource_version: str | None = None,
        timeout_seconds: int | None = None,
    ) -> Iterator[WatchEvent]:
        """Stream change notifications after *resource_version*."""
        ...


def _key(kind: ResourceKind, name: str, namespace: str | None) -> tuple[str, str, str]:
    return (str(kind), namespace or "", name)


class InMemoryStore:
    """Store backed by plain dicts.

    Useful for tests, offline ``collect`` runs against exported YAML, and
    anywhere a live cluster is not wanted. Every ``put()``/``remove()``
    bumps the resource version and is replayed by ``watch()``.
    """

    def __init__(self) -> None:
        self._objects: dict[tuple[str, str, str], dict[str, Any]] = {}
        self._errors: dict[tuple[str, str, str], StoreError] = {}
        self._events: list[tuple[int, ResourceKind, WatchEvent]] = []
        self._revision = 0
        self._lock = threading.Lock()

    def put(self, kind: ResourceKind, obj: dict[str, Any]) -> None:
        metadata = obj.get("metadata") or {}
        name = metadata.get("name", "")
        namespace = metadata.get("namespace") if kind.namespaced else None
        key = _key(kind, name, namespace)
        with self._lock:
            event_type = "MODIFIED" if key in self._objects else "ADDED"
            stored = copy.deepcopy(obj)
            stored.setdefault("metadata", {})["resourceVersion"] = str(self._revision + 1)
            self._objects[key] = stored
            self._record(kind, event_type, stored)

    def remove(self, kind: ResourceKind, name: str, namespace: str | None = None) -> None:
        key = _key(kind, name, namespace if kind.namespaced else None)
        with self._lock:
            obj = self._objects.pop(key, None)
            if obj is not None:
                obj["metadata"]["resourceVersion"] = str(self._revision + 1)
                self._record(kind, "DELETED", obj)

    def set_error(
        self,
        kind: ResourceKind,
        name: str,
        namespace: str | None = None,
        error: StoreError | None = None,
    ) -> None:
        """Make ``get()`` for this resource raise *error* (None clears it)."""
        key = _key(kind, name, namespace if kind.namespaced else None)
        with self._lock:
            if error is None:
                self._errors.pop(key, None)
            else:
                self._errors[key] = error

    @property
    def resource_version(self) -> str:
        return str(self._revision)

    def get(
        self,
        kind: ResourceKind,
        name: str,
        namespace: str | None = None,
    ) -> dict[str, Any] | None:
        key = _key(kind, name, namespace if kind.namespaced else None)
        with self._lock:
            if key in self._errors:
                raise self._errors[key]
            obj = self._objects.get(key)
            return copy.deepcopy(obj) if obj is not None else None

    def list(
        self,
        kind: ResourceKind,
        namespace: str | None = None,
    ) -> tuple[list[dict[str, Any]], str]:
        prefix = str(kind)
        with self._lock:
            items = [
                copy.deepcopy(obj)
                for (k, ns, _), obj in sorted(self._objects.items())
                if k == prefix and (namespace is None or ns == namespace)
            ]
            return items, str(self._revision)

    def watch(
        self,
        kind: ResourceKind,
        namespace: str | None = None,
        resource_version: str | None = None,
        timeout_seconds: int | None = None,
    ) -> Iterator[WatchEvent]:
        since = int(resource_version or 0)
        with self._lock:
            pending = [
                event for rev, k, event in self._events
                if rev > since and k == kind and (
                    namespace is None
                    or (event.object.get("metadata") or {}).get("namespace") == namespace
                )
            ]
        yield from pending

    def _record(self, kind: ResourceKind, event_type: str, obj: dict[str, Any]) -> None:
        self._revision += 1
        self._events.append((self._revision, kind, WatchEvent(event_type, copy.deepcopy(obj))))
