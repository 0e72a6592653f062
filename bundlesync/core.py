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

"""Core orchestration for bundlesync.

This module ties the registry client, version model, bundle fetcher and
state store together into one batch run:

1. Load state (latest synchronized version, tracked versions)
2. List every published version from the registry
3. Keep stable versions strictly newer than the stored latest
4. Download every configured variant for each of them
5. Save the merged state with the highest new version as latest

A run that finds nothing new returns early without touching the disk. Any
failure in steps 1-4 propagates before step 5, so the state file is never
partially updated.

Example:
    ```python
    from pathlib import Path
    from bundlesync.config import load_config
    from bundlesync.core import sync_bundles

    result = sync_bundles(load_config(Path("bundlesync.yaml")))
    print(result.latest_version)
    ```

"""

from __future__ import annotations

from bundlesync.config import SyncConfig
from bundlesync.fetcher import BundleFetcher, DownloadOutcome, DownloadTask
from bundlesync.logging import get_global_logger
from bundlesync.registry import RegistryClient
from bundlesync.results import (
    STATUS_PENDING,
    STATUS_UP_TO_DATE,
    STATUS_UPDATED,
    SyncResult,
)
from bundlesync.state import StateTracker
from bundlesync.versioning import newer_stable_versions

TOTAL_STEPS = 4


def sync_bundles(
    config: SyncConfig,
    *,
    dry_run: bool = False,
    registry: RegistryClient | None = None,
    fetcher: BundleFetcher | None = None,
    tracker: StateTracker | None = None,
) -> SyncResult:
    """Bring the local bundle cache up to date with the registry.

    Args:
        config: Immutable run configuration.
        dry_run: If True, stop after computing the newer versions. Nothing
            is downloaded or written.
        registry: Registry client to use. Built from config if omitted.
        fetcher: Bundle fetcher to use. Built from config if omitted (and
            closed at the end of the run).
        tracker: State tracker to use. Built from config if omitted.

    Returns:
        SyncResult describing what happened. status is "up_to_date" when
            nothing newer exists, "pending" for a dry run with newer
            versions, and "updated" after a successful download run.

    Raises:
        StateError: If the state file is missing or malformed.
        RegistryError: If the version listing cannot be obtained.
        BundleFetchError: If any bundle download fails outside the replay
            fallback.
        StorageError: If a bundle or the state file cannot be written.

    """
    logger = get_global_logger()

    if tracker is None:
        tracker = StateTracker(config.state_file)
    if registry is None:
        registry = RegistryClient(
            config.registry_url,
            versions_path=config.versions_path,
            timeout=config.timeout,
            retries=config.retries,
        )

    state = tracker.load()
    previous = state.latest_version

    # Listing
    logger.step(1, TOTAL_STEPS, f"Listing published versions of {config.package_name}...")
    raw_versions = registry.list_versions(config.package_name)

    # Filtering
    logger.step(2, TOTAL_STEPS, f"Finding versions newer than {previous}...")
    newer = newer_stable_versions(raw_versions, previous)

    if not newer:
        logger.verbose("SYNC", "No new versions available, nothing to do.")
        return SyncResult(
            status=STATUS_UP_TO_DATE,
            previous_version=previous,
            latest_version=previous,
        )

    logger.verbose("SYNC", f"Newer versions: {', '.join(newer)}")

    if dry_run:
        return SyncResult(
            status=STATUS_PENDING,
            previous_version=previous,
            latest_version=previous,
            new_versions=tuple(newer),
        )

    # Downloading
    logger.step(
        3,
        TOTAL_STEPS,
        f"Downloading {len(config.variants)} bundle(s) for {len(newer)} version(s)...",
    )
    owns_fetcher = fetcher is None
    if fetcher is None:
        fetcher = BundleFetcher(
            config.cdn_root,
            config.output_dir,
            timeout=config.timeout,
            retries=config.retries,
        )
    try:
        outcomes = _download_all(fetcher, config, newer)
    finally:
        if owns_fetcher:
            fetcher.close()

    # Finalizing
    logger.step(4, TOTAL_STEPS, "Updating state file...")
    updated = tracker.merge(state, newer)
    tracker.save(updated)

    return SyncResult(
        status=STATUS_UPDATED,
        previous_version=previous,
        latest_version=updated.latest_version,
        new_versions=tuple(newer),
        files=tuple(o.path for o in outcomes),
        fallbacks=tuple(
            (o.task.requested_version, o.task.variant.name)
            for o in outcomes
            if o.used_fallback
        ),
    )


def check_for_updates(config: SyncConfig, **kwargs) -> SyncResult:
    """Report newer versions without downloading or writing anything."""
    return sync_bundles(config, dry_run=True, **kwargs)


def _download_all(
    fetcher: BundleFetcher,
    config: SyncConfig,
    versions: list[str],
) -> list[DownloadOutcome]:
    logger = get_global_logger()
    outcomes: list[DownloadOutcome] = []
    for version in versions:
        logger.verbose("SYNC", f"Processing {version}")
        for variant in config.variants:
            outcome = fetcher.download(DownloadTask.for_version(version, variant))
            if outcome.used_fallback:
                logger.verbose(
                    "FALLBACK",
                    f"Stored {variant.file_name} for {version} "
                    f"from {outcome.source_version}",
                )
            outcomes.append(outcome)
    return outcomes
