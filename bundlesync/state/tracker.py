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

"""State tracking implementation for bundlesync.

This module implements the persistence layer for the version-tracking
document that sits next to the cached bundles:

    {
      "latestVersion": "8.20.0",
      "versions": ["7.112.1", "7.113.0", "8.20.0"]
    }

Invariants:

- latestVersion is always a member of versions
- versions only grows between runs (set union)
- every entry is a stable semantic version that was written to disk

The document is read once at the start of a run and written at most once at
the end. Runs that find nothing new never rewrite it.

Unlike a cache, this file is not recreated when missing or corrupt. It is
committed once (see `bundlesync init`) and its absence means the tool is
pointed at the wrong place, so load_state() raises StateError instead.

Example:
    High-level API with StateTracker:
        ```python
        from pathlib import Path
        from bundlesync.state import StateTracker

        tracker = StateTracker(Path("bundles/latestVersion.json"))
        state = tracker.load()
        updated = tracker.merge(state, ["8.21.0"])
        tracker.save(updated)
        ```

    Low-level API with functions:
        ```python
        from pathlib import Path
        from bundlesync.state import load_state, save_state

        state = load_state(Path("bundles/latestVersion.json"))
        save_state(state, Path("bundles/latestVersion.json"))
        ```

"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
import json
from pathlib import Path
from typing import Any

from bundlesync.exceptions import StateError, StorageError
from bundlesync.logging import get_global_logger
from bundlesync.versioning import highest_version, parse_stable, sort_versions


@dataclass(frozen=True)
class SyncState:
    """Persisted version-tracking document.

    Attributes:
        latest_version: Highest version synchronized so far.
        versions: Every version ever materialized locally.

    """

    latest_version: str
    versions: frozenset[str]

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the on-disk JSON shape (versions sorted ascending)."""
        return {
            "latestVersion": self.latest_version,
            "versions": sort_versions(set(self.versions)),
        }


def create_initial_state(version: str) -> SyncState:
    """Create the state for a cache seeded with a single version.

    Raises:
        StateError: If version is not a stable semantic version.

    """
    if parse_stable(version) is None:
        raise StateError(f"Initial version must be a stable semantic version: {version!r}")
    return SyncState(latest_version=version, versions=frozenset({version}))


def state_from_dict(data: Any, source: str = "<state>") -> SyncState:
    """Build a SyncState from a parsed JSON document.

    A document that only carries "latestVersion" (the older single-key
    layout) is accepted as tracking just that version.

    Raises:
        StateError: If the document shape or any version is invalid.

    """
    if not isinstance(data, dict):
        raise StateError(f"State file {source} must contain a JSON object")

    latest = data.get("latestVersion")
    if not isinstance(latest, str) or parse_stable(latest) is None:
        raise StateError(
            f"State file {source} has an invalid latestVersion: {latest!r}"
        )

    if "versions" not in data:
        return SyncState(latest_version=latest, versions=frozenset({latest}))

    raw_versions = data["versions"]
    if not isinstance(raw_versions, list):
        raise StateError(f"State file {source}: 'versions' must be a list")

    bad = [v for v in raw_versions if not isinstance(v, str) or parse_stable(v) is None]
    if bad:
        raise StateError(f"State file {source} has invalid versions: {bad!r}")

    versions = frozenset(raw_versions)
    if latest not in versions:
        raise StateError(
            f"State file {source}: latestVersion {latest} is not listed in versions"
        )
    return SyncState(latest_version=latest, versions=versions)


def load_state(state_file: Path) -> SyncState:
    """Load state from a JSON file.

    Args:
        state_file: Path to the JSON state file.

    Returns:
        The parsed state.

    Raises:
        StateError: If the file is missing, unreadable, not valid JSON, or
            violates the document invariants.

    """
    try:
        with open(state_file, encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as err:
        raise StateError(
            f"State file not found: {state_file}. "
            f"Run 'bundlesync init <version>' to create it."
        ) from err
    except json.JSONDecodeError as err:
        raise StateError(f"State file {state_file} is not valid JSON: {err}") from err
    except OSError as err:
        raise StateError(f"Could not read state file {state_file}: {err}") from err

    return state_from_dict(data, str(state_file))


def save_state(state: SyncState, state_file: Path) -> None:
    """Save state to a JSON file with pretty-printing.

    Creates parent directories if needed. Uses 2-space indentation and sorted
    keys for consistent diffs in version control. The file is replaced
    atomically.

    Args:
        state: State to save.
        state_file: Path to the JSON state file.

    Raises:
        StorageError: If the file cannot be written.

    Note:
        - versions is de-duplicated and sorted ascending by version
        - Adds trailing newline for git compatibility

    """
    state_file = Path(state_file)
    tmp = state_file.with_suffix(state_file.suffix + ".part")
    try:
        state_file.parent.mkdir(parents=True, exist_ok=True)
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(state.to_dict(), f, indent=2, sort_keys=True)
            f.write("\n")  # Trailing newline for git
        tmp.replace(state_file)
    except OSError as err:
        try:
            tmp.unlink(missing_ok=True)
        except OSError:
            pass
        raise StorageError(f"Could not write state file {state_file}: {err}") from err


class StateTracker:
    """Loads, merges, and saves the version-tracking document.

    Attributes:
        state_file: Path to the JSON state file.

    """

    def __init__(self, state_file: Path):
        self.state_file = state_file

    def load(self) -> SyncState:
        """Load the state document.

        Raises:
            StateError: If the file is missing or malformed.

        """
        state = load_state(self.state_file)
        get_global_logger().verbose(
            "STATE",
            f"Loaded state from {self.state_file} "
            f"(latest {state.latest_version}, {len(state.versions)} tracked)",
        )
        return state

    def save(self, state: SyncState) -> None:
        save_state(state, self.state_file)
        get_global_logger().verbose("STATE", f"Updated state file: {self.state_file}")

    @staticmethod
    def merge(previous: SyncState, new_versions: Iterable[str]) -> SyncState:
        """Fold newly synchronized versions into the previous state.

        The new latest version is the highest of the new versions; the
        tracked set is the union of old and new.

        Raises:
            ValueError: If new_versions is empty.

        """
        new = list(new_versions)
        if not new:
            raise ValueError("merge() needs at least one new version")
        latest = highest_version(new)
        return SyncState(
            latest_version=latest,
            versions=previous.versions | frozenset(new),
        )
