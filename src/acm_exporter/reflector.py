"""List-then-watch loop feeding object changes to a handler.

The reflector lists every object of one kind, hands the full set to
``handler.replace()``, then watches from the list's resource version and
forwards each change to ``handler.upsert()`` or ``handler.delete()``.
When a watch stream ends on its timeout the whole kind is listed again,
so every object is re-joined at least once per ``watch_timeout``.
An expired resource version (HTTP 410) triggers an immediate re-list;
any other store error waits ``backoff`` seconds first.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from typing import Any, Protocol

from acm_exporter.store import ResourceKind, ResourceStore, StoreError

logger = logging.getLogger(__name__)

HTTP_GONE = 410


class EventHandler(Protocol):
    def upsert(self, obj: dict[str, Any]) -> None: ...

    def delete(self, obj: dict[str, Any]) -> None: ...

    def replace(self, objs: Iterable[dict[str, Any]]) -> None: ...


class Reflector:
    """Keeps a handler in sync with one resource kind."""

    def __init__(
        self,
        store: ResourceStore,
        kind: ResourceKind,
        handler: EventHandler,
        namespace: str | None = None,
        watch_timeout: int = 300,
        backoff: float = 5.0,
    ) -> None:
        self._store = store
        self._kind = kind
        self._handler = handler
        self._namespace = namespace
        self._watch_timeout = watch_timeout
        self._backoff = backoff
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self._resource_version: str | None = None

    @property
    def resource_version(self) -> str | None:
        return self._resource_version

    def start(self) -> threading.Thread:
        """Run the loop in a daemon thread."""
        self._stop.clear()
        self._thread = threading.Thread(
            target=self.run, name=f"reflector-{self._kind.plural}", daemon=True,
        )
        self._thread.start()
        return self._thread

    def stop(self, timeout: float | None = None) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)

    @property
    def stopped(self) -> bool:
        return self._stop.is_set()

    def run(self) -> None:
        """Loop until :meth:`stop` is called."""
        while not self._stop.is_set():
            try:
                if self._resource_version is None:
                    self.list()
                self.watch()
                # A watch that ends on its own timeout is followed by a full re-list
                if not self._stop.is_set():
                    logger.debug("Watch on %s ended, resyncing", self._kind)
                    self._resource_version = None
            except StoreError as e:
                self._resource_version = None
                if e.status == HTTP_GONE:
                    logger.info("Watch on %s expired, re-listing", self._kind)
                    continue
                logger.warning("Reflector for %s failed, retrying in %.1fs: %s",
                               self._kind, self._backoff, e)
                self._stop.wait(self._backoff)
            except Exception:
                self._resource_version = None
                logger.exception("Unexpected error in reflector for %s", self._kind)
                self._stop.wait(self._backoff)

    def list(self) -> None:
        items, resource_version = self._store.list(self._kind, self._namespace)
        self._handler.replace(items)
        self._resource_version = resource_version
        logger.info("Listed %d %s at resource version %s",
                    len(items), self._kind, resource_version)

    def watch(self) -> None:
        """Consume one watch stream, ending on timeout or :meth:`stop`."""
        events = self._store.watch(
            self._kind,
            self._namespace,
            resource_version=self._resource_version,
            timeout_seconds=self._watch_timeout,
        )
        for event in events:
            if self._stop.is_set():
                return
            if event.type == "DELETED":
                self._handler.delete(event.object)
            elif event.type in ("ADDED", "MODIFIED"):
                self._handler.upsert(event.object)
            else:
                logger.debug("Ignoring %s event on %s", event.type, self._kind)
                continue
            rv = (event.object.get("metadata") or {}).get("resourceVersion")
            if rv:
                self._resource_version = rv
