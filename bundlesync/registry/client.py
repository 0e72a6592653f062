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

"""Package registry client for bundlesync.

Queries a public, unauthenticated package registry for every version ever
published for one package. No download happens here; the result is the raw
list of version strings, which the orchestrator filters.

The default registry is npm. Its package document looks like:

    {
      "name": "@sentry/browser",
      "dist-tags": {"latest": "8.20.0"},
      "versions": {"7.112.1": {...}, "8.20.0": {...}}
    }

Configuration Fields:

- **url** (str): Registry root (default: https://registry.npmjs.org)
- **versions_path** (str): JSONPath selecting the version container in the
    response. The container may be a JSON array of version strings or a
    mapping keyed by version. Default: "versions". Use "$" for registries
    that answer with a bare array (like `npm view <pkg> versions --json`).

Error Handling:

Every failure raises RegistryError and aborts the run. An incomplete
version list could make the synchronizer skip or miss releases, so nothing
is retried or papered over:

- Transport failures (DNS, timeouts, refused connections)
- Non-2xx responses
- Invalid JSON
- versions_path matching nothing, or matching the wrong shape

Example:
    ```python
    from bundlesync.registry import RegistryClient

    client = RegistryClient("https://registry.npmjs.org")
    versions = client.list_versions("@sentry/browser")
    print(len(versions))
    ```

"""

from __future__ import annotations

import json
from typing import Any
from urllib.parse import quote

from jsonpath_ng import parse as jsonpath_parse
import requests

from bundlesync.exceptions import RegistryError
from bundlesync.io import make_session
from bundlesync.logging import get_global_logger

DEFAULT_REGISTRY_URL = "https://registry.npmjs.org"


def package_url(registry_url: str, package_name: str) -> str:
    """Build the registry document URL for a package.

    Scoped names keep their "@" but escape the slash, as npm expects:
    "@sentry/browser" -> "{registry}/@sentry%2Fbrowser".
    """
    return f"{registry_url.rstrip('/')}/{quote(package_name, safe='@')}"


def _versions_from_container(container: Any, path: str) -> list[str]:
    if isinstance(container, dict):
        return [str(k) for k in container.keys()]
    if isinstance(container, list):
        versions = [v for v in container if isinstance(v, str)]
        skipped = len(container) - len(versions)
        if skipped:
            get_global_logger().debug(
                "REGISTRY", f"Skipping {skipped} non-string version entry(ies)"
            )
        return versions
    raise RegistryError(
        f"Registry versions at {path!r} must be a list or mapping, "
        f"got {type(container).__name__}"
    )


class RegistryClient:
    """Read-only client listing published versions of a package.

    Attributes:
        registry_url: Registry root URL.
        versions_path: JSONPath to the version container in the response.
        timeout: Per-request timeout (seconds).
        retries: Retries for transient failures when the client builds its
            own session.

    """

    def __init__(
        self,
        registry_url: str = DEFAULT_REGISTRY_URL,
        *,
        versions_path: str = "versions",
        timeout: int = 60,
        retries: int = 0,
        session: requests.Session | None = None,
    ) -> None:
        self.registry_url = registry_url.rstrip("/")
        self.versions_path = versions_path
        self.timeout = timeout
        self.retries = retries
        self._session = session

    def list_versions(self, package_name: str) -> list[str]:
        """List every version string the registry reports for a package.

        Args:
            package_name: Registry package name (e.g., "@sentry/browser").

        Returns:
            Version strings in registry order. No filtering or sorting is
                applied.

        Raises:
            RegistryError: On any network, HTTP, or response-shape failure.

        """
        logger = get_global_logger()
        url = package_url(self.registry_url, package_name)

        logger.verbose("REGISTRY", f"Listing versions for {package_name}")
        logger.verbose("REGISTRY", f"GET {url}")

        session = self._session or make_session(self.retries)
        try:
            response = session.get(
                url,
                headers={"Accept": "application/json"},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.exceptions.HTTPError as err:
            raise RegistryError(
                f"Registry request failed for {package_name}: "
                f"{response.status_code} {response.reason} ({url})"
            ) from err
        except requests.exceptions.RequestException as err:
            raise RegistryError(f"Failed to reach registry at {url}: {err}") from err
        finally:
            if self._session is None:
                session.close()

        logger.verbose("REGISTRY", f"Registry response: {response.status_code} OK")

        try:
            data = response.json()
        except (json.JSONDecodeError, ValueError) as err:
            raise RegistryError(
                f"Invalid JSON from registry. Response: {response.text[:200]}"
            ) from err

        try:
            matches = jsonpath_parse(self.versions_path).find(data)
        except Exception as err:
            raise RegistryError(
                f"Invalid registry versions_path {self.versions_path!r}: {err}"
            ) from err

        if not matches:
            raise RegistryError(
                f"Registry versions_path {self.versions_path!r} did not match "
                f"anything in the response for {package_name}"
            )

        versions = _versions_from_container(matches[0].value, self.versions_path)
        logger.verbose("REGISTRY", f"Registry reports {len(versions)} version(s)")
        return versions
