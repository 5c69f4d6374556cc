"""Tests for K8sResourceStore.

All kubernetes client calls are mocked, so no real cluster is needed.
"""

from __future__ import annotations

import sys
from contextlib import contextmanager
from unittest.mock import MagicMock, patch

import pytest

from acm_exporter.store import (
    INFO_KIND,
    PROVISIONING_KIND,
    REGISTRATION_KIND,
    ResourceStore,
    StoreError,
)
from acm_exporter.store.k8s_store import K8sResourceStore

# --- Helpers ---


class ApiException(Exception):
    """Stand-in matching the kubernetes client's exception by class name."""

    def __init__(self, status: int, reason: str = "") -> None:
        super().__init__(reason)
        self.status = status
        self.reason = reason


@contextmanager
def _mock_kubernetes_modules():
    """Context manager that injects mock kubernetes into sys.modules.

    This allows `from kubernetes import client, config, watch` to resolve
    to mocks inside the store.
    """
    mock_k8s = MagicMock()
    modules = {
        "kubernetes": mock_k8s,
        "kubernetes.client": mock_k8s.client,
        "kubernetes.config": mock_k8s.config,
        "kubernetes.watch": mock_k8s.watch,
    }
    with patch.dict(sys.modules, modules):
        yield mock_k8s


def _store_with_api(api: MagicMock, **kwargs) -> K8sResourceStore:
    store = K8sResourceStore(**kwargs)
    store._api = api
    return store


# --- get ---


class TestGet:
    def test_namespaced_get(self):
        api = MagicMock()
        api.get_namespaced_custom_object.return_value = {"metadata": {"name": "c1"}}
        store = _store_with_api(api)

        obj = store.get(PROVISIONING_KIND, "c1", namespace="c1")
        assert obj == {"metadata": {"name": "c1"}}
        api.get_namespaced_custom_object.assert_called_once_with(
            group="hive.openshift.io",
            version="v1",
            namespace="c1",
            plural="clusterdeployments",
            name="c1",
        )

    def test_cluster_scoped_get(self):
        api = MagicMock()
        api.get_cluster_custom_object.return_value = {"metadata": {"name": "c1"}}
        store = _store_with_api(api)

        store.get(REGISTRATION_KIND, "c1")
        api.get_cluster_custom_object.assert_called_once_with(
            group="cluster.open-cluster-management.io",
            version="v1",
            plural="managedclusters",
            name="c1",
        )
        api.get_namespaced_custom_object.assert_not_called()

    def test_request_timeout_passed(self):
        api = MagicMock()
        store = _store_with_api(api, request_timeout=7.5)
        store.get(REGISTRATION_KIND, "c1")
        assert api.get_cluster_custom_object.call_args.kwargs["_request_timeout"] == 7.5

    def test_not_found_returns_none(self):
        api = MagicMock()
        api.get_namespaced_custom_object.side_effect = ApiException(404, "Not Found")
        store = _store_with_api(api)
        assert store.get(PROVISIONING_KIND, "c1", namespace="c1") is None

    def test_api_error_raises_store_error(self):
        api = MagicMock()
        api.get_cluster_custom_object.side_effect = ApiException(403, "Forbidden")
        store = _store_with_api(api)
        with pytest.raises(StoreError, match="Forbidden") as exc_info:
            store.get(REGISTRATION_KIND, "c1")
        assert exc_info.value.status == 403

    def test_other_error_raises_store_error(self):
        api = MagicMock()
        api.get_cluster_custom_object.side_effect = ConnectionError("refused")
        store = _store_with_api(api)
        with pytest.raises(StoreError, match="refused") as exc_info:
            store.get(REGISTRATION_KIND, "c1")
        assert exc_info.value.status is None


# --- list ---


class TestList:
    def test_cluster_wide_list(self):
        api = MagicMock()
        api.list_cluster_custom_object.return_value = {
            "metadata": {"resourceVersion": "123"},
            "items": [{"metadata": {"name": "c1"}}],
        }
        store = _store_with_api(api)
        items, rv = store.list(INFO_KIND)
        assert rv == "123"
        assert len(items) == 1

    def test_namespaced_list(self):
        api = MagicMock()
        api.list_namespaced_custom_object.return_value = {"metadata": {}, "items": []}
        store = _store_with_api(api)
        items, rv = store.list(INFO_KIND, namespace="c1")
        assert items == []
        assert rv == ""
        assert api.list_namespaced_custom_object.call_args.kwargs["namespace"] == "c1"

    def test_list_error(self):
        api = MagicMock()
        api.list_cluster_custom_object.side_effect = ApiException(500, "Internal")
        store = _store_with_api(api)
        with pytest.raises(StoreError):
            store.list(INFO_KIND)


# --- watch ---


class TestWatch:
    def test_yields_events(self):
        with _mock_kubernetes_modules() as mock_k8s:
            w = mock_k8s.watch.Watch.return_value
            w.stream.return_value = iter([
                {"type": "ADDED", "object": {"metadata": {"name": "c1"}}},
                {"type": "DELETED", "object": {"metadata": {"name": "c2"}}},
            ])
            api = MagicMock()
            store = _store_with_api(api)

            events = list(store.watch(INFO_KIND, resource_version="10", timeout_seconds=30))

            assert [(e.type, e.object["metadata"]["name"]) for e in events] == [
                ("ADDED", "c1"),
                ("DELETED", "c2"),
            ]
            args, kwargs = w.stream.call_args
            assert args[0] is api.list_cluster_custom_object
            assert kwargs["resource_version"] == "10"
            assert kwargs["timeout_seconds"] == 30
            w.stop.assert_called_once()

    def test_error_event_raises_with_code(self):
        with _mock_kubernetes_modules() as mock_k8s:
            mock_k8s.watch.Watch.return_value.stream.return_value = iter([
                {"type": "ERROR", "object": {"code": 410, "message": "too old"}},
            ])
            store = _store_with_api(MagicMock())
            with pytest.raises(StoreError, match="too old") as exc_info:
                list(store.watch(INFO_KIND))
            assert exc_info.value.status == 410

    def test_api_exception_wrapped(self):
        with _mock_kubernetes_modules() as mock_k8s:
            mock_k8s.watch.Watch.return_value.stream.side_effect = ApiException(410, "Gone")
            store = _store_with_api(MagicMock())
            with pytest.raises(StoreError) as exc_info:
                list(store.watch(INFO_KIND, namespace="c1"))
            assert exc_info.value.status == 410


# --- client setup ---


class TestClientSetup:
    def test_in_cluster(self):
        with _mock_kubernetes_modules() as mock_k8s:
            store = K8sResourceStore(in_cluster=True)
            store._get_api_client()
            mock_k8s.config.load_incluster_config.assert_called_once()

    def test_kubeconfig_and_context(self):
        with _mock_kubernetes_modules() as mock_k8s:
            store = K8sResourceStore(kubeconfig="/home/.kube/config", context="hub")
            store._get_api_client()
            mock_k8s.config.load_kube_config.assert_called_once_with(
                config_file="/home/.kube/config",
                context="hub",
            )

    def test_default_kubeconfig(self):
        with _mock_kubernetes_modules() as mock_k8s:
            K8sResourceStore()._get_api_client()
            mock_k8s.config.load_kube_config.assert_called_once_with()

    def test_custom_api_built_once(self):
        with _mock_kubernetes_modules() as mock_k8s:
            store = K8sResourceStore(in_cluster=True)
            first = store._custom_api()
            second = store._custom_api()
            assert first is second
            mock_k8s.client.CustomObjectsApi.assert_called_once()


class TestProtocol:
    def test_satisfies_resource_store(self):
        assert isinstance(K8sResourceStore(), ResourceStore)
