"""Settings file for acm-exporter.

The exporter reads ``acm-exporter.yaml`` from ``--config`` or the nearest
ancestor of the working directory. A relative ``kubeconfig`` in the file
is taken relative to the file itself, not to where the exporter runs.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

CONFIG_FILENAME = "acm-exporter.yaml"

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8080
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_WATCH_TIMEOUT = 300

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigError(Exception):
    """Raised when the config file is invalid."""


@dataclass(frozen=True)
class ExporterConfig:
    """Parsed acm-exporter configuration."""

    config_path: Path | None = None
    hub_cluster_id: str | None = None
    kubeconfig: str | None = None
    context: str | None = None
    in_cluster: bool = False
    namespace: str | None = None
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    log_level: str = DEFAULT_LOG_LEVEL
    request_timeout: float | None = None
    watch_timeout: int = DEFAULT_WATCH_TIMEOUT


def find_config(start: Path | None = None) -> Path | None:
    """Return the nearest ``acm-exporter.yaml`` at or above *start*.

    *start* defaults to the working directory, so an exporter launched
    from inside a checkout of its deployment manifests picks up the file
    at the checkout root.
    """
    here = (start or Path.cwd()).resolve()
    for directory in (here, *here.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def load_config(
    path: str | Path | None = None,
    *,
    auto_discover: bool = True,
) -> ExporterConfig:
    """Build the file layer of the exporter's settings.

    A ``--config`` *path* must exist. Without one, the nearest
    ``acm-exporter.yaml`` found by :func:`find_config` is used, and with
    neither the built-in defaults apply. The CLI then lays its own flags
    over the result, so a flag beats the file and the file beats the
    default.
    """
    if path is not None:
        explicit = Path(path).resolve()
        if not explicit.is_file():
            raise FileNotFoundError(f"Config file not found: {explicit}")
        return _parse_config(explicit)

    discovered = find_config() if auto_discover else None
    return _parse_config(discovered) if discovered else ExporterConfig()


def _parse_config(config_path: Path) -> ExporterConfig:
    """Read and parse a YAML config file, resolving relative paths."""
    text = config_path.read_text(encoding="utf-8")
    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

    if not isinstance(data, dict):
        msg = f"Expected a YAML mapping in {config_path}, got {type(data).__name__}"
        raise ConfigError(msg)

    base = config_path.parent

    kubeconfig = data.get("kubeconfig")
    if kubeconfig is not None:
        kubeconfig = str((base / Path(kubeconfig).expanduser()).resolve())

    log_level = str(data.get("log_level", DEFAULT_LOG_LEVEL)).upper()
    if log_level not in LOG_LEVELS:
        raise ConfigError(f"Invalid log_level {log_level!r} in {config_path}")

    return ExporterConfig(
        config_path=config_path,
        hub_cluster_id=_optional_str(data.get("hub_cluster_id")),
        kubeconfig=kubeconfig,
        context=_optional_str(data.get("context")),
        in_cluster=bool(data.get("in_cluster", False)),
        namespace=_optional_str(data.get("namespace")),
        host=str(data.get("host", DEFAULT_HOST)),
        port=_port(data.get("port", DEFAULT_PORT), config_path),
        log_level=log_level,
        request_timeout=_optional_number(data.get("request_timeout"), "request_timeout", config_path),
        watch_timeout=int(
            _optional_number(data.get("watch_timeout"), "watch_timeout", config_path)
            or DEFAULT_WATCH_TIMEOUT
        ),
    )


def _optional_str(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


def _port(value: Any, config_path: Path) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or not 0 < value < 65536:
        raise ConfigError(f"Invalid port {value!r} in {config_path}")
    return value


def _optional_number(value: Any, key: str, config_path: Path) -> float | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int | float) or value <= 0:
        raise ConfigError(f"Invalid {key} {value!r} in {config_path}")
    return float(value)
