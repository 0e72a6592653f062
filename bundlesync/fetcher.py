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

"""Bundle fetcher for bundlesync.

Downloads one distributable file per (version, variant) pair from the CDN
and writes it into the local cache:

    {cdn_root}/{version}/{file_name}  ->  {output_root}/{version}/{file_name}

Replay Fallback:

The CDN only publishes replay.js from a certain release onward and answers
HTTP 403 for older versions. When a variant declares a fallback_version and
the requested version answers exactly 403, the fetcher:

1. Downloads the same file from fallback_version instead.
2. Rewrites the embedded `const SDK_VERSION = '<fallback>';` literal to the
   requested version, so the file reports the version it is stored under.
3. Writes it under the requested version with the original file name.

Nothing else falls back. Other status codes on the replay variant, a 403 on
any variant without fallback_version, or a failing fallback download all
raise BundleFetchError.

Example:
    ```python
    from pathlib import Path
    from bundlesync.config import load_config
    from bundlesync.fetcher import BundleFetcher, DownloadTask

    config = load_config()
    with BundleFetcher(config.cdn_root, config.output_dir) as fetcher:
        for variant in config.variants:
            outcome = fetcher.download(DownloadTask.for_version("8.20.0", variant))
            print(outcome.path, outcome.used_fallback)
    ```

"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import requests

from bundlesync.config import BundleVariant
from bundlesync.exceptions import BundleFetchError
from bundlesync.io import (
    FetchNotFound,
    FetchResult,
    FetchSuccess,
    fetch_text,
    make_session,
    write_text_file,
)
from bundlesync.logging import get_global_logger

# Status the CDN returns for a file that was not yet published at a version.
FALLBACK_STATUS = 403

SDK_VERSION_LITERAL = "const SDK_VERSION = '{version}';"


@dataclass(frozen=True)
class DownloadTask:
    """One file to fetch and where to store it.

    Attributes:
        requested_version: Version whose bundle is wanted.
        variant: Which bundle file to fetch.
        store_as_version: Version directory the file is written under.

    """

    requested_version: str
    variant: BundleVariant
    store_as_version: str

    @classmethod
    def for_version(cls, version: str, variant: BundleVariant) -> DownloadTask:
        return cls(requested_version=version, variant=variant, store_as_version=version)


@dataclass(frozen=True)
class DownloadOutcome:
    """Result of a completed download.

    Attributes:
        task: The task that was processed.
        path: File written to disk.
        source_version: Version the content was actually fetched from.

    """

    task: DownloadTask
    path: Path
    source_version: str

    @property
    def used_fallback(self) -> bool:
        return self.source_version != self.task.requested_version


def bundle_url(cdn_root: str, version: str, file_name: str) -> str:
    """Build the CDN URL for one bundle file."""
    return f"{cdn_root.rstrip('/')}/{version}/{file_name}"


def rewrite_sdk_version(content: str, from_version: str, to_version: str) -> str:
    """Replace the embedded SDK_VERSION constant.

    Performs one literal substitution of
    `const SDK_VERSION = '<from_version>';` with the same statement carrying
    to_version. Content without the literal is returned unchanged.
    """
    old = SDK_VERSION_LITERAL.format(version=from_version)
    new = SDK_VERSION_LITERAL.format(version=to_version)
    if old not in content:
        get_global_logger().warning(
            "FALLBACK",
            f"{old!r} not found in fallback content; storing it unmodified",
        )
        return content
    return content.replace(old, new, 1)


class BundleFetcher:
    """Fetches bundle variants from the CDN into the local cache.

    Attributes:
        cdn_root: CDN root URL (without trailing slash).
        output_root: Root of the local bundle cache.
        timeout: Per-request timeout (seconds).

    """

    def __init__(
        self,
        cdn_root: str,
        output_root: Path,
        *,
        session: requests.Session | None = None,
        timeout: int = 60,
        retries: int = 0,
    ) -> None:
        self.cdn_root = cdn_root.rstrip("/")
        self.output_root = Path(output_root)
        self.timeout = timeout
        self._owns_session = session is None
        self._session = session if session is not None else make_session(retries)

    def __enter__(self) -> BundleFetcher:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_session:
            self._session.close()

    def url_for(self, version: str, variant: BundleVariant) -> str:
        return bundle_url(self.cdn_root, version, variant.file_name)

    def fetch(self, version: str, variant: BundleVariant) -> FetchResult:
        """Issue one GET for a variant at a version."""
        return fetch_text(
            self.url_for(version, variant), self._session, timeout=self.timeout
        )

    def write(self, store_as_version: str, file_name: str, content: str) -> Path:
        """Write content to {output_root}/{store_as_version}/{file_name}."""
        return write_text_file(self.output_root, store_as_version, file_name, content)

    def download(self, task: DownloadTask) -> DownloadOutcome:
        """Fetch and store one variant, applying the 403 fallback if allowed.

        Args:
            task: What to fetch and where to store it.

        Returns:
            The written path and the version the content came from.

        Raises:
            BundleFetchError: If the fetch fails and no fallback applies, or
                the fallback fetch itself fails.
            NetworkError: On transport failures.
            StorageError: If the file cannot be written.

        """
        logger = get_global_logger()
        variant = task.variant
        version = task.requested_version

        result = self.fetch(version, variant)

        if isinstance(result, FetchSuccess):
            content = result.content
            source_version = version
        elif (
            isinstance(result, FetchNotFound)
            and result.status_code == FALLBACK_STATUS
            and variant.fallback_version is not None
            and variant.fallback_version != version
        ):
            source_version = variant.fallback_version
            logger.verbose(
                "FALLBACK",
                f"{variant.file_name} not published for {version} "
                f"(HTTP {result.status_code}); using {source_version}",
            )
            content = self._fetch_fallback(task, source_version)
        else:
            raise BundleFetchError(version, variant.name, result.status_code, result.url)

        path = self.write(task.store_as_version, variant.file_name, content)
        return DownloadOutcome(task=task, path=path, source_version=source_version)

    def _fetch_fallback(self, task: DownloadTask, source_version: str) -> str:
        variant = task.variant
        result = self.fetch(source_version, variant)
        if not isinstance(result, FetchSuccess):
            raise BundleFetchError(
                task.requested_version,
                variant.name,
                result.status_code,
                result.url,
                message=(
                    f"Fallback fetch of {variant.name!r} bundle from version "
                    f"{source_version} (for {task.requested_version}) failed: "
                    f"HTTP {result.status_code} from {result.url}"
                ),
            )
        return rewrite_sdk_version(
            result.content, source_version, task.requested_version
        )
