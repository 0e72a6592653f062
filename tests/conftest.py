"""
Pytest configuration and shared fixtures for bundlesync tests.

This module provides reusable fixtures and test utilities used across
the test suite.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest
import yaml

from bundlesync.config import BundleVariant, SyncConfig
from bundlesync.logging import SilentLogger, set_global_logger

REGISTRY_URL = "https://registry.example.com"
PACKAGE_URL = "https://registry.example.com/@sentry%2Fbrowser"
CDN_ROOT = "https://cdn.example.com"
FALLBACK_VERSION = "7.27.0"


def bundle_source(version: str) -> str:
    """Minimal stand-in for a CDN bundle that embeds its own version."""
    return f"(function(){{const SDK_VERSION = '{version}';window.Sentry={{}};}})();\n"


@pytest.fixture(autouse=True)
def silent_logger():
    """Reset the global logger so tests never depend on CLI state."""
    set_global_logger(SilentLogger())
    yield
    set_global_logger(SilentLogger())


@pytest.fixture
def tmp_test_dir(tmp_path: Path) -> Path:
    """
    Provide a temporary directory for test artifacts.

    Automatically cleaned up after test completion.
    """
    return tmp_path


@pytest.fixture
def variants() -> tuple[BundleVariant, ...]:
    """The two default bundle variants, with the replay fallback pinned."""
    return (
        BundleVariant(name="full", file_name="bundle.tracing.replay.feedback.js"),
        BundleVariant(
            name="replay", file_name="replay.js", fallback_version=FALLBACK_VERSION
        ),
    )


@pytest.fixture
def sync_config(tmp_test_dir: Path, variants) -> SyncConfig:
    """SyncConfig pointing at mock endpoints and a temporary cache."""
    output_dir = tmp_test_dir / "bundles"
    return SyncConfig(
        package_name="@sentry/browser",
        registry_url=REGISTRY_URL,
        versions_path="versions",
        cdn_root=CDN_ROOT,
        variants=variants,
        output_dir=output_dir,
        state_file=output_dir / "latestVersion.json",
        timeout=5,
        retries=0,
    )


@pytest.fixture
def write_state():
    """
    Factory fixture for writing a state document.

    Usage:
        path = write_state(path, "7.112.1", ["7.110.0", "7.112.1"])
    """

    def _write(path: Path, latest: str, versions: list[str] | None = None) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        doc: dict[str, Any] = {"latestVersion": latest}
        if versions is not None:
            doc["versions"] = versions
        path.write_text(json.dumps(doc), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def create_yaml_file(tmp_test_dir: Path):
    """
    Factory fixture for creating temporary YAML files.

    Usage:
        yaml_path = create_yaml_file("test.yaml", {"key": "value"})
    """

    def _create(filename: str, data: dict[str, Any]) -> Path:
        path = tmp_test_dir / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as f:
            yaml.dump(data, f)
        return path

    return _create


def registry_document(versions: list[str]) -> dict[str, Any]:
    """npm-style package document listing the given versions."""
    return {
        "name": "@sentry/browser",
        "dist-tags": {"latest": versions[-1] if versions else None},
        "versions": {v: {"version": v} for v in versions},
    }
