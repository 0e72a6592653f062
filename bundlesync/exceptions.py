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

"""Exception hierarchy for bundlesync.

This module defines a custom exception hierarchy that allows callers to
distinguish between different types of errors:

- ConfigError: Configuration-related errors (YAML parse, invalid values)
- StateError: Missing or corrupt version-tracking state file
- NetworkError: Network-related errors (transport failures)
- RegistryError: The registry version listing could not be obtained
- BundleFetchError: A bundle download returned a non-success status
- StorageError: Writing a bundle or the state file to disk failed

All exceptions inherit from BundleSyncError, allowing users to catch all
bundlesync errors with a single except clause if needed.

Example:
    Catching specific error types:
        ```python
        from bundlesync.core import sync_bundles
        from bundlesync.exceptions import BundleFetchError, StateError

        try:
            result = sync_bundles(config)
        except StateError as e:
            print(f"State file problem: {e}")
        except BundleFetchError as e:
            print(f"{e.version}/{e.variant} failed with HTTP {e.status_code}")
        ```
"""

from __future__ import annotations

__all__ = [
    "BundleSyncError",
    "ConfigError",
    "StateError",
    "NetworkError",
    "RegistryError",
    "BundleFetchError",
    "StorageError",
]


class BundleSyncError(Exception):
    """Base exception for all bundlesync errors.

    All bundlesync-specific exceptions inherit from this class, allowing users
    to catch all errors with a single except clause if needed.
    """

    pass


class ConfigError(BundleSyncError):
    """Raised for configuration-related errors.

    This exception is raised when there are problems with:

    - YAML parsing (syntax errors, invalid structure)
    - Missing or invalid configuration fields
    - Invalid bundle variant definitions
    """

    pass


class StateError(ConfigError):
    """Raised when the state file is missing or malformed.

    The state file is expected to be committed once and then maintained by
    the synchronizer, so a missing or corrupt document is a configuration
    problem rather than something to recover from silently.
    """

    pass


class NetworkError(BundleSyncError):
    """Raised for network-related errors.

    This exception is raised when there are problems with:

    - Connection failures and timeouts
    - Registry API failures
    - Bundle downloads returning non-success responses
    """

    pass


class RegistryError(NetworkError):
    """Raised when the registry version listing cannot be obtained."""

    pass


class BundleFetchError(NetworkError):
    """Raised when a bundle file cannot be downloaded.

    Attributes:
        version: Version that was being processed.
        variant: Name of the bundle variant.
        status_code: HTTP status code observed.
        url: URL that was requested.

    """

    def __init__(
        self,
        version: str,
        variant: str,
        status_code: int,
        url: str,
        message: str | None = None,
    ) -> None:
        self.version = version
        self.variant = variant
        self.status_code = status_code
        self.url = url
        if message is None:
            message = (
                f"Failed to fetch {variant!r} bundle for version {version}: "
                f"HTTP {status_code} from {url}"
            )
        super().__init__(message)


class StorageError(BundleSyncError):
    """Raised when writing bundle files or state to disk fails."""

    pass
