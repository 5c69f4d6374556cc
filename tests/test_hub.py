"""Tests for hub cluster ID resolution."""

from acm_exporter.hub import resolve_hub_cluster_id
from acm_exporter.store import CLUSTER_VERSION_KIND, InMemoryStore, StoreError


def _cluster_version(cluster_id) -> dict:
    return {
        "apiVersion": CLUSTER_VERSION_KIND.api_version,
        "kind": CLUSTER_VERSION_KIND.kind,
        "metadata": {"name": "version"},
        "spec": {"clusterID": cluster_id},
    }


class TestResolveHubClusterId:
    def test_configured_wins(self):
        store = InMemoryStore()
        store.put(CLUSTER_VERSION_KIND, _cluster_version("from-cluster"))
        assert resolve_hub_cluster_id(store, "from-config") == "from-config"

    def test_read_from_cluster_version(self):
        store = InMemoryStore()
        store.put(CLUSTER_VERSION_KIND, _cluster_version("hub-uuid"))
        assert resolve_hub_cluster_id(store) == "hub-uuid"

    def test_missing_cluster_version(self, caplog):
        assert resolve_hub_cluster_id(InMemoryStore()) == ""
        assert "not found" in caplog.text

    def test_store_error(self, caplog):
        store = InMemoryStore()
        store.set_error(CLUSTER_VERSION_KIND, "version", error=StoreError("forbidden", status=403))
        assert resolve_hub_cluster_id(store) == ""
        assert "forbidden" in caplog.text

    def test_empty_cluster_id(self):
        store = InMemoryStore()
        store.put(CLUSTER_VERSION_KIND, _cluster_version(""))
        assert resolve_hub_cluster_id(store) == ""

    def test_non_string_cluster_id(self):
        store = InMemoryStore()
        store.put(CLUSTER_VERSION_KIND, _cluster_version(1234))
        assert resolve_hub_cluster_id(store) == ""
