"""K8sResourceStore — reads custom resources via the kubernetes Python client.

Uses ``CustomObjectsApi`` for get/list and ``kubernetes.watch`` for
change streams. Supports kubeconfig file or in-cluster config.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from typing import Any

from acm_exporter.store.base import ResourceKind, StoreError, WatchEvent

logger = logging.getLogger(__name__)


def _is_api_exception(exc: Exception) -> bool:
    # Detect kubernetes ApiException by class name to avoid import
    return type(exc).__name__ == "ApiException"


class K8sResourceStore:
    """Resource store backed by a live Kubernetes API server.

    Client configuration:
    - ``in_cluster=True`` uses the pod's service account
    - otherwise loads *kubeconfig* (default location when None) and *context*
    """

    def __init__(
        self,
        kubeconfig: str | None = None,
        context: str | None = None,
        in_cluster: bool = False,
        request_timeout: float | None = None,
    ) -> None:
        self._kubeconfig = kubeconfig
        self._context = context
        self._in_cluster = in_cluster
        self._request_timeout = request_timeout
        self._api: Any = None
        self._lock = threading.Lock()

    def get(
        self,
        kind: ResourceKind,
        name: str,
        namespace: str | None = None,
    ) -> dict[str, Any] | None:
        api = self._custom_api()
        kwargs = self._request_kwargs()
        try:
            if kind.namespaced:
                return api.get_namespaced_custom_object(
                    group=kind.group,
                    version=kind.version,
                    namespace=namespace or name,
                    plural=kind.plural,
                    name=name,
                    **kwargs,
                )
            return api.get_cluster_custom_object(
                group=kind.group,
                version=kind.version,
                plural=kind.plural,
                name=name,
                **kwargs,
            )
        except Exception as exc:
            if _is_api_exception(exc):
                if exc.status == 404:
                    return None
                raise StoreError(
                    f"K8s API error reading {kind} {name} ({exc.status}): {exc.reason}",
                    status=exc.status,
                ) from exc
            raise StoreError(f"Error reading {kind} {name}: {exc}") from exc

    def list(
        self,
        kind: ResourceKind,
        namespace: str | None = None,
    ) -> tuple[list[dict[str, Any]], str]:
        api = self._custom_api()
        kwargs = self._request_kwargs()
        try:
            if namespace and kind.namespaced:
                result = api.list_namespaced_custom_object(
                    group=kind.group,
                    version=kind.version,
                    namespace=namespace,
                    plural=kind.plural,
                    **kwargs,
                )
            else:
                result = api.list_cluster_custom_object(
                    group=kind.group,
                    version=kind.version,
                    plural=kind.plural,
                    **kwargs,
                )
        except Exception as exc:
            if _is_api_exception(exc):
                raise StoreError(
                    f"K8s API error listing {kind} ({exc.status}): {exc.reason}",
                    status=exc.status,
                ) from exc
            raise StoreError(f"Error listing {kind}: {exc}") from exc

        items = result.get("items") or []
        resource_version = (result.get("metadata") or {}).get("resourceVersion", "")
        return items, resource_version

    def watch(
        self,
        kind: ResourceKind,
        namespace: str | None = None,
        resource_version: str | None = None,
        timeout_seconds: int | None = None,
    ) -> Iterator[WatchEvent]:
        from kubernetes import watch

        api = self._custom_api()
        kwargs: dict[str, Any] = {
            "group": kind.group,
            "version": kind.version,
            "plural": kind.plural,
        }
        if namespace and kind.namespaced:
            func = api.list_namespaced_custom_object
            kwargs["namespace"] = namespace
        else:
            func = api.list_cluster_custom_object
        if resource_version:
            kwargs["resource_version"] = resource_version
        if timeout_seconds is not None:
            kwargs["timeout_seconds"] = timeout_seconds

        w = watch.Watch()
        try:
            for event in w.stream(func, **kwargs):
                event_type = event.get("type", "")
                obj = event.get("object") or {}
                if event_type == "ERROR":
                    code = obj.get("code")
                    raise StoreError(
                        f"Watch error on {kind}: {obj.get('message', '')}",
                        status=code,
                    )
                yield WatchEvent(type=event_type, object=obj)
        except StoreError:
            raise
        except Exception as exc:
            if _is_api_exception(exc):
                raise StoreError(
                    f"K8s API error watching {kind} ({exc.status}): {exc.reason}",
                    status=exc.status,
                ) from exc
            raise StoreError(f"Error watching {kind}: {exc}") from exc
        finally:
            w.stop()

    # --- Private: client setup ---

    def _custom_api(self) -> Any:
        with self._lock:
            if self._api is None:
                from kubernetes import client

                self._api = client.CustomObjectsApi(self._get_api_client())
            return self._api

    def _get_api_client(self) -> Any:
        """Build a kubernetes ApiClient from constructor config."""
        from kubernetes import client, config

        if self._in_cluster:
            config.load_incluster_config()
        else:
            kwargs: dict[str, Any] = {}
            if self._kubeconfig:
                kwargs["config_file"] = self._kubeconfig
            if self._context:
                kwargs["context"] = self._context
            config.load_kube_config(**kwargs)
        logger.debug(
            "Kubernetes client configured (in_cluster=%s, context=%s)",
            self._in_cluster, self._context,
        )
        return client.ApiClient()

    def _request_kwargs(self) -> dict[str, Any]:
        if self._request_timeout is None:
            return {}
        return {"_request_timeout": self._request_timeout}
