"""acm-exporter CLI — command-line interface for acm-exporter.

Commands:
    serve           Watch cluster info objects and serve /metrics
    collect         Run one collection pass and print the samples
    config show     Show the effective configuration
"""

from __future__ import annotations

import json
import logging
import sys
import threading
from dataclasses import asdict, replace

import click

from acm_exporter import __version__
from acm_exporter.cache import MetricCache, MetricCacheCollector
from acm_exporter.collector import managed_cluster_info_families
from acm_exporter.config import LOG_LEVELS, ConfigError, ExporterConfig, load_config
from acm_exporter.hub import resolve_hub_cluster_id
from acm_exporter.reflector import Reflector
from acm_exporter.store import INFO_KIND, ResourceStore, StoreError
from acm_exporter.store.loader import StoreLoadError, load_store

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _load_cfg(config_path: str | None) -> ExporterConfig:
    try:
        return load_config(config_path)
    except (ConfigError, FileNotFoundError) as e:
        click.echo(f"Error loading config: {e}", err=True)
        sys.exit(1)


def _apply_overrides(cfg: ExporterConfig, **overrides: object) -> ExporterConfig:
    """Return *cfg* with every non-None CLI value applied (flag > file > default)."""
    changes = {k: v for k, v in overrides.items() if v is not None}
    return replace(cfg, **changes)


def _setup_logging(level: str) -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)


def _k8s_store(cfg: ExporterConfig) -> ResourceStore:
    from acm_exporter.store.k8s_store import K8sResourceStore

    return K8sResourceStore(
        kubeconfig=cfg.kubeconfig,
        context=cfg.context,
        in_cluster=cfg.in_cluster,
        request_timeout=cfg.request_timeout,
    )


# --- Shared options ---


def _store_options(func):
    options = [
        click.option("--config", "config_path", default=None,
                     help="Path to acm-exporter.yaml (default: auto-discover)"),
        click.option("--kubeconfig", default=None, help="Path to kubeconfig file"),
        click.option("--context", default=None, help="Kubeconfig context to use"),
        click.option("--in-cluster", is_flag=True, default=None,
                     help="Use the pod service account"),
        click.option("--namespace", default=None,
                     help="Only watch cluster info objects in this namespace"),
        click.option("--hub-cluster-id", default=None,
                     help="Hub cluster ID (default: read from ClusterVersion)"),
        click.option("--log-level", default=None,
                     type=click.Choice(LOG_LEVELS, case_sensitive=False),
                     help="Logging level"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


# --- Root group ---


@click.group()
@click.version_option(version=__version__)
def cli() -> None:
    """acm-exporter: managed cluster info metrics for a hub cluster."""


# --- serve command ---


@cli.command()
@_store_options
@click.option("--host", default=None, help="Address to bind the metrics endpoint")
@click.option("--port", default=None, type=int, help="Port for the metrics endpoint")
def serve(
    config_path: str | None,
    kubeconfig: str | None,
    context: str | None,
    in_cluster: bool | None,
    namespace: str | None,
    hub_cluster_id: str | None,
    log_level: str | None,
    host: str | None,
    port: int | None,
) -> None:
    """Watch cluster info objects and serve /metrics."""
    from prometheus_client import CollectorRegistry, start_http_server

    cfg = _apply_overrides(
        _load_cfg(config_path),
        kubeconfig=kubeconfig, context=context, in_cluster=in_cluster,
        namespace=namespace, hub_cluster_id=hub_cluster_id, log_level=log_level,
        host=host, port=port,
    )
    _setup_logging(cfg.log_level)

    store = _k8s_store(cfg)
    hub_id = resolve_hub_cluster_id(store, cfg.hub_cluster_id)
    logger.info("Hub cluster ID: %s", hub_id or "<unknown>")

    cache = MetricCache(managed_cluster_info_families(hub_id, store))
    registry = CollectorRegistry()
    registry.register(MetricCacheCollector(cache))
    start_http_server(cfg.port, addr=cfg.host, registry=registry)
    logger.info("Metrics available at http://%s:%d/metrics", cfg.host, cfg.port)

    reflector = Reflector(
        store, INFO_KIND, cache,
        namespace=cfg.namespace, watch_timeout=cfg.watch_timeout,
    )
    reflector.start()
    try:
        threading.Event().wait()
    except KeyboardInterrupt:
        logger.info("Shutting down")
    finally:
        reflector.stop(timeout=5)


# --- collect command ---


@cli.command()
@_store_options
@click.option("--from-file", "files", multiple=True,
              help="Read resources from exported YAML instead of a cluster (repeatable)")
@click.option("--json-output", is_flag=True, help="Output as JSON")
def collect(
    config_path: str | None,
    kubeconfig: str | None,
    context: str | None,
    in_cluster: bool | None,
    namespace: str | None,
    hub_cluster_id: str | None,
    log_level: str | None,
    files: tuple[str, ...],
    json_output: bool,
) -> None:
    """Run one collection pass and print the samples."""
    from prometheus_client import CollectorRegistry, generate_latest

    cfg = _apply_overrides(
        _load_cfg(config_path),
        kubeconfig=kubeconfig, context=context, in_cluster=in_cluster,
        namespace=namespace, hub_cluster_id=hub_cluster_id, log_level=log_level,
    )
    _setup_logging(cfg.log_level)

    try:
        store: ResourceStore = load_store(files) if files else _k8s_store(cfg)
    except StoreLoadError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    hub_id = resolve_hub_cluster_id(store, cfg.hub_cluster_id)
    cache = MetricCache(managed_cluster_info_families(hub_id, store))
    try:
        items, _ = store.list(INFO_KIND, cfg.namespace)
    except StoreError as e:
        click.echo(f"Error listing cluster info: {e}", err=True)
        sys.exit(1)
    cache.replace(items)

    if json_output:
        data = [f.model_dump(mode="json") for f in cache.families()]
        click.echo(json.dumps(data, indent=2))
    else:
        registry = CollectorRegistry()
        registry.register(MetricCacheCollector(cache))
        click.echo(generate_latest(registry).decode("utf-8"), nl=False)


# --- config group ---


@cli.group()
def config() -> None:
    """Inspect acm-exporter configuration."""


@config.command("show")
@click.option("--config", "config_path", default=None,
              help="Path to acm-exporter.yaml (default: auto-discover)")
def config_show(config_path: str | None) -> None:
    """Show the effective configuration."""
    cfg = _load_cfg(config_path)
    data = asdict(cfg)
    data["config_path"] = str(cfg.config_path) if cfg.config_path else None
    click.echo(json.dumps(data, indent=2))
