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

"""Public API return types for bundlesync.

All dataclasses are frozen (immutable) to prevent accidental mutation of
return values.

Example:
    Using result types:
        ```python
        from bundlesync.config import load_config
        from bundlesync.core import sync_bundles

        result = sync_bundles(load_config())
        print(result.status, result.latest_version)
        ```

Note:
    Only public API return types belong in this module. Domain types
    (like SemanticVersion or SyncState) stay co-located with their logic.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

STATUS_UP_TO_DATE = "up_to_date"
STATUS_UPDATED = "updated"
STATUS_PENDING = "pending"


@dataclass(frozen=True)
class SyncResult:
    """Result from one synchronizer run.

    Attributes:
        status: "up_to_date" when nothing newer was published, "updated"
            when new versions were downloaded and state was saved, or
            "pending" for a dry run that found newer versions.
        previous_version: Latest version before the run.
        latest_version: Latest version after the run (unchanged unless
            status is "updated").
        new_versions: Versions newer than previous_version, ascending.
        files: Paths written during the run.
        fallbacks: (version, variant name) pairs served from the pinned
            fallback release.
    """

    status: str
    previous_version: str
    latest_version: str
    new_versions: tuple[str, ...] = ()
    files: tuple[Path, ...] = field(default_factory=tuple)
    fallbacks: tuple[tuple[str, str], ...] = ()

    @property
    def changed(self) -> bool:
        return self.status == STATUS_UPDATED
