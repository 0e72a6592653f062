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

"""State tracking for bundlesync.

This module persists which SDK versions have been downloaded into the local
bundle cache and which one is the latest. The packaging pipeline reads the
same file to know which bundles are available.

Public API:

- SyncState: Immutable in-memory form of the document
- StateTracker: Load/merge/save helper used by the orchestrator
- load_state: Load state from JSON file
- save_state: Save state to JSON file with pretty-printing
- create_initial_state: Seed state for a first version

Example:
    Basic usage:

        from pathlib import Path
        from bundlesync.state import load_state

        state = load_state(Path("bundles/latestVersion.json"))
        print(state.latest_version)

"""

from .tracker import (
    StateTracker,
    SyncState,
    create_initial_state,
    load_state,
    save_state,
    state_from_dict,
)

__all__ = [
    "StateTracker",
    "SyncState",
    "create_initial_state",
    "load_state",
    "save_state",
    "state_from_dict",
]
