"""Resource file loader.

Loads exported custom resources (``kubectl get -o yaml`` output) from
YAML files into an :class:`InMemoryStore`, so the pipeline can run
without a live hub cluster.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from typing import Any

import yaml

from acm_exporter.store.base import (
    CLUSTER_VERSION_KIND,
    INFO_KIND,
    PROVISIONING_KIND,
    REGISTRATION_KIND,
    InMemoryStore,
    ResourceKind,
)

KNOWN_KINDS: dict[str, ResourceKind] = {
    k.kind: k
    for k in (INFO_KIND, REGISTRATION_KIND, PROVISIONING_KIND, CLUSTER_VERSION_KIND)
}


class StoreLoadError(Exception):
    """Raised when a resource file cannot be read or understood."""


def _iter_documents(path: Path) -> Iterable[Any]:
    try:
        docs = list(yaml.safe_load_all(path.read_text(encoding="utf-8")))
    except yaml.YAMLError as e:
        raise StoreLoadError(f"Invalid YAML in {path}: {e}") from e
    for doc in docs:
        if doc is None:
            continue
        if isinstance(doc, dict) and doc.get("kind") == "List":
            yield from doc.get("items") or []
        else:
            yield doc


def load_store(paths: Iterable[str | Path], store: InMemoryStore | None = None) -> InMemoryStore:
    """Load every resource found in *paths* into a store.

    Resources of kinds the exporter does not read are skipped.

    Raises:
        StoreLoadError: If a file is missing, is not valid YAML, or holds
            something other than Kubernetes resources.
    """
    store = store if store is not None else InMemoryStore()
    for p in paths:
        path = Path(p)
        if not path.is_file():
            raise StoreLoadError(f"Resource file not found: {path}")
        for i, obj in enumerate(_iter_documents(path)):
            if not isinstance(obj, dict) or "kind" not in obj:
                raise StoreLoadError(f"Document {i} in {path} is not a Kubernetes resource")
            kind = KNOWN_KINDS.get(obj["kind"])
            if kind is None:
                continue
            if not (obj.get("metadata") or {}).get("name"):
                raise StoreLoadError(f"{obj['kind']} at document {i} in {path} has no name")
            store.put(kind, obj)
    return store
