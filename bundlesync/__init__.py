"""
bundlesync - SDK bundle cache synchronizer

A small batch tool that keeps a local cache of third-party SDK CDN bundles
up to date with a public package registry. It is meant to run in CI or by
hand; it never serves requests.

bundlesync provides:
  - Registry version listing (npm by default)
  - Semantic version filtering (stable releases newer than the cache)
  - Per-version download of a fixed set of bundle variants
  - A narrow fallback for replay.js on releases that predate it
  - A version-tracking JSON file written once per successful run

Quick Start
-----------
Create the state file once:

    $ bundlesync init 7.112.1

Download everything newer:

    $ bundlesync sync

For full CLI documentation:

    $ bundlesync --help

Package Structure
-----------------
cli : module
    Command-line interface with argparse.
core : module
    Synchronization orchestrator.
fetcher : module
    Bundle download and replay fallback policy.
config : package
    Defaults + YAML configuration loading.
registry : package
    Package registry client.
versioning : package
    Semantic version model.
state : package
    Version-tracking state file.
io : package
    HTTP and atomic file write primitives.

Public API
----------
    from bundlesync.core import sync_bundles
    from bundlesync.config import load_config

Project Information
-------------------
Author: Roger Cibrian
License: Apache-2.0
"""

__version__ = "0.1.0"
__author__ = "Roger Cibrian"
__license__ = "Apache-2.0"
__description__ = "Keep a local cache of SDK CDN bundles in sync with the package registry"

# Re-export commonly used functions for convenience
from bundlesync.config import load_config
from bundlesync.core import check_for_updates, sync_bundles
from bundlesync.exceptions import (
    BundleFetchError,
    BundleSyncError,
    ConfigError,
    NetworkError,
    RegistryError,
    StateError,
    StorageError,
)
from bundlesync.results import SyncResult

__all__ = [
    "__version__",
    "__author__",
    "__license__",
    "__description__",
    "load_config",
    "sync_bundles",
    "check_for_updates",
    "SyncResult",
    "BundleSyncError",
    "BundleFetchError",
    "ConfigError",
    "NetworkError",
    "RegistryError",
    "StateError",
    "StorageError",
]
