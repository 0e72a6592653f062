# Copyright 2025 Roger Cibrian
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Configuration loading for bundlesync.

Settings come from built-in defaults, an optional YAML file, and call-site
overrides, deep-merged in that order. The result is a frozen SyncConfig that
is passed into the orchestrator and the bundle fetcher.

Public API:

- load_config: Build the effective SyncConfig
- validate_config: Report configuration problems without network calls
- SyncConfig, BundleVariant: Configuration value types

Example:
    Basic usage:

        from pathlib import Path
        from bundlesync.config import load_config

        config = load_config(Path("bundlesync.yaml"))
        print(config.package_name)  # "@sentry/browser"

"""

from .loader import (
    DEFAULT_CONFIG,
    DEFAULT_CONFIG_FILE,
    REPLAY_FALLBACK_VERSION,
    BundleVariant,
    SyncConfig,
    load_config,
    validate_config,
)

__all__ = [
    "DEFAULT_CONFIG",
    "DEFAULT_CONFIG_FILE",
    "REPLAY_FALLBACK_VERSION",
    "BundleVariant",
    "SyncConfig",
    "load_config",
    "validate_config",
]
