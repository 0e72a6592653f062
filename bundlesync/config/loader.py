"""
Configuration loading and merging for bundlesync.

The synchronizer is driven by one immutable SyncConfig value. It is built
from three layers with "last wins" semantics:

1. **Built-in defaults** (DEFAULT_CONFIG)
   - Track the @sentry/browser npm package and its CDN bundles
   - Two variants: the full tracing+replay+feedback bundle and replay.js

2. **Config file** (bundlesync.yaml, optional)
   - Overrides any default (package, registry, CDN, variants, paths)

3. **Call-site overrides** (CLI flags such as --output-dir)

Merge Behavior
--------------
  - **Dicts**: Recursively merged (keys from overlay override base)
  - **Lists**: Completely replaced (NOT appended/extended)
  - **Scalars**: Overwritten

Path Resolution
---------------
Relative output_dir and state_file values are resolved against the CONFIG
FILE location, so a config committed next to the bundles directory works
from any working directory. Without a config file they resolve against the
current working directory.

Examples
--------
    >>> from pathlib import Path
    >>> from bundlesync.config import load_config
    >>> cfg = load_config(Path("bundlesync.yaml"))
    >>> [v.file_name for v in cfg.variants]
    ['bundle.tracing.replay.feedback.js', 'replay.js']
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from bundlesync.exceptions import ConfigError
from bundlesync.logging import get_global_logger
from bundlesync.versioning import parse_stable

DEFAULT_CONFIG_FILE = "bundlesync.yaml"

# First release that published replay.js on the CDN. Requests for older
# versions answer 403 and are served from this release instead.
REPLAY_FALLBACK_VERSION = "7.27.0"

DEFAULT_CONFIG: dict[str, Any] = {
    "package": "@sentry/browser",
    "registry": {
        "url": "https://registry.npmjs.org",
        "versions_path": "versions",
    },
    "cdn": {
        "root": "https://browser.sentry-cdn.com",
    },
    "variants": [
        {"name": "full", "file": "bundle.tracing.replay.feedback.js"},
        {
            "name": "replay",
            "file": "replay.js",
            "fallback_version": REPLAY_FALLBACK_VERSION,
        },
    ],
    "output_dir": "bundles",
    "state_file": "bundles/latestVersion.json",
    "http": {
        "timeout": 60,
        "retries": 0,
    },
}


# -------------------------------
# Data types
# -------------------------------


@dataclass(frozen=True)
class BundleVariant:
    """One distributable file tracked for every version.

    Attributes:
        name: Short identifier used in logs and errors (e.g., "replay").
        file_name: File name on the CDN and on disk (e.g., "replay.js").
        fallback_version: Version to re-host from when the CDN answers 403
            for a requested version, or None if this variant never falls back.

    """

    name: str
    file_name: str
    fallback_version: str | None = None


@dataclass(frozen=True)
class SyncConfig:
    """Immutable settings for one synchronizer run."""

    package_name: str
    registry_url: str
    versions_path: str
    cdn_root: str
    variants: tuple[BundleVariant, ...]
    output_dir: Path
    state_file: Path
    timeout: int = 60
    retries: int = 0


# -------------------------------
# YAML helpers
# -------------------------------


def _load_yaml_file(p: Path) -> dict[str, Any]:
    """Load a YAML mapping from disk.

    Raises:
        ConfigError: If the file is missing, unparseable, empty, or not a
            mapping.
    """
    if not p.exists():
        raise ConfigError(f"Config file not found: {p}")
    try:
        with p.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as err:
        raise ConfigError(f"Error parsing YAML: {p}: {err}") from err
    except OSError as err:
        raise ConfigError(f"Could not read config file {p}: {err}") from err
    if data is None:
        raise ConfigError(f"Config file is empty: {p}")
    if not isinstance(data, dict):
        raise ConfigError(f"Top-level YAML must be a mapping (dict): {p}")
    return data


# -------------------------------
# Merge logic
# -------------------------------


def _deep_merge_dicts(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    """
    Deep-merge two dicts with "overlay wins".

    Rules:
      - dict + dict -> deep merge
      - list + list -> overlay REPLACES base (not concatenated)
      - everything else -> overlay overwrites base

    This function does not mutate inputs; returns a new dict.
    """
    result: dict[str, Any] = dict(base)
    for k, v in overlay.items():
        if k in result and isinstance(result[k], dict) and isinstance(v, dict):
            result[k] = _deep_merge_dicts(result[k], v)
        else:
            result[k] = v
    return result


# -------------------------------
# Validation
# -------------------------------


def _check_non_empty_str(raw: dict[str, Any], key: str, label: str) -> list[str]:
    value = raw.get(key)
    if not isinstance(value, str) or not value.strip():
        return [f"{label} must be a non-empty string"]
    return []


def _collect_errors(raw: dict[str, Any]) -> list[str]:
    """Check a merged raw config for problems without touching the network."""
    errors: list[str] = []

    errors += _check_non_empty_str(raw, "package", "package")
    errors += _check_non_empty_str(raw, "output_dir", "output_dir")
    errors += _check_non_empty_str(raw, "state_file", "state_file")

    registry = raw.get("registry")
    if not isinstance(registry, dict):
        errors.append("registry must be a mapping")
    else:
        errors += _check_non_empty_str(registry, "url", "registry.url")
        errors += _check_non_empty_str(
            registry, "versions_path", "registry.versions_path"
        )

    cdn = raw.get("cdn")
    if not isinstance(cdn, dict):
        errors.append("cdn must be a mapping")
    else:
        errors += _check_non_empty_str(cdn, "root", "cdn.root")

    http = raw.get("http", {})
    if not isinstance(http, dict):
        errors.append("http must be a mapping")
    else:
        timeout = http.get("timeout", 60)
        if isinstance(timeout, bool) or not isinstance(timeout, int) or timeout <= 0:
            errors.append("http.timeout must be a positive integer")
        retries = http.get("retries", 0)
        if isinstance(retries, bool) or not isinstance(retries, int) or retries < 0:
            errors.append("http.retries must be a non-negative integer")

    variants = raw.get("variants")
    if not isinstance(variants, list) or not variants:
        errors.append("variants must be a non-empty list")
        return errors

    names: set[str] = set()
    files: set[str] = set()
    for i, entry in enumerate(variants):
        label = f"variants[{i}]"
        if not isinstance(entry, dict):
            errors.append(f"{label} must be a mapping")
            continue
        name = entry.get("name")
        file_name = entry.get("file")
        if not isinstance(name, str) or not name.strip():
            errors.append(f"{label}.name must be a non-empty string")
        elif name in names:
            errors.append(f"{label}.name {name!r} is duplicated")
        else:
            names.add(name)
        if not isinstance(file_name, str) or not file_name.strip():
            errors.append(f"{label}.file must be a non-empty string")
        elif "/" in file_name or "\\" in file_name:
            errors.append(f"{label}.file must be a bare file name: {file_name!r}")
        elif file_name in files:
            errors.append(f"{label}.file {file_name!r} is duplicated")
        else:
            files.add(file_name)
        fallback = entry.get("fallback_version")
        if fallback is not None and parse_stable(fallback) is None:
            errors.append(
                f"{label}.fallback_version must be a stable semantic version: "
                f"{fallback!r}"
            )

    return errors


def _resolve_path(value: str, base_dir: Path) -> Path:
    p = Path(value)
    if not p.is_absolute():
        p = base_dir / p
    return p.resolve()


def _build_config(raw: dict[str, Any], base_dir: Path) -> SyncConfig:
    http = raw.get("http", {})
    variants = tuple(
        BundleVariant(
            name=entry["name"],
            file_name=entry["file"],
            fallback_version=entry.get("fallback_version"),
        )
        for entry in raw["variants"]
    )
    return SyncConfig(
        package_name=raw["package"],
        registry_url=raw["registry"]["url"].rstrip("/"),
        versions_path=raw["registry"]["versions_path"],
        cdn_root=raw["cdn"]["root"].rstrip("/"),
        variants=variants,
        output_dir=_resolve_path(raw["output_dir"], base_dir),
        state_file=_resolve_path(raw["state_file"], base_dir),
        timeout=http.get("timeout", 60),
        retries=http.get("retries", 0),
    )


# -------------------------------
# Public API
# -------------------------------


def load_raw_config(
    config_path: Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> tuple[dict[str, Any], Path]:
    """Merge defaults, the config file, and overrides into a raw dict.

    Returns:
        A tuple (raw_config, base_dir) where base_dir is the directory that
            relative paths resolve against.
    """
    logger = get_global_logger()

    merged = copy.deepcopy(DEFAULT_CONFIG)
    base_dir = Path.cwd()

    if config_path is not None:
        config_path = config_path.resolve()
        logger.verbose("CONFIG", f"Loading: {config_path}")
        merged = _deep_merge_dicts(merged, _load_yaml_file(config_path))
        base_dir = config_path.parent
    else:
        logger.verbose("CONFIG", "No config file given, using built-in defaults")

    if overrides:
        merged = _deep_merge_dicts(merged, overrides)

    logger.debug("CONFIG", f"Effective config: {merged}")
    return merged, base_dir


def load_config(
    config_path: Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> SyncConfig:
    """Load the effective synchronizer configuration.

    Args:
        config_path: Optional YAML file layered over the built-in defaults.
        overrides: Optional dict layered last (e.g., from CLI flags).

    Returns:
        The immutable configuration for one run.

    Raises:
        ConfigError: If the file cannot be read or any value is invalid. The
            message lists every problem found.

    """
    raw, base_dir = load_raw_config(config_path, overrides)
    errors = _collect_errors(raw)
    if errors:
        raise ConfigError("Invalid configuration:\n  - " + "\n  - ".join(errors))
    return _build_config(raw, base_dir)


def validate_config(config_path: Path | None = None) -> list[str]:
    """Validate configuration without building it or making network calls.

    Returns:
        List of error messages. Empty list if the configuration is valid.
    """
    try:
        raw, _ = load_raw_config(config_path)
    except ConfigError as err:
        return [str(err)]
    return _collect_errors(raw)
