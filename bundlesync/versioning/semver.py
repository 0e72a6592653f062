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

"""Semantic version parsing and comparison for bundlesync.

This module is format-agnostic: it does NOT touch the network or the
filesystem. It only parses and compares registry version strings.

Only the numeric release triple takes part in ordering. A prerelease tag
("7.113.0-beta.1") never makes a version newer or older; it only marks the
version as unstable so the synchronizer can skip it.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from functools import cmp_to_key
import re

from bundlesync.logging import get_global_logger

# ----------------------------
# Model
# ----------------------------


@dataclass(frozen=True)
class SemanticVersion:
    """Parsed semantic version.

    Attributes:
        major: Major version number.
        minor: Minor version number.
        patch: Patch version number.
        prerelease: Prerelease tag without the leading dash (e.g., "beta.1"),
            or None for a stable release.

    """

    major: int
    minor: int
    patch: int
    prerelease: str | None = None

    @property
    def is_stable(self) -> bool:
        return self.prerelease is None

    @property
    def release(self) -> tuple[int, int, int]:
        return (self.major, self.minor, self.patch)

    def __str__(self) -> str:
        core = f"{self.major}.{self.minor}.{self.patch}"
        return f"{core}-{self.prerelease}" if self.prerelease else core


# ----------------------------
# Parsing
# ----------------------------

# Digits only, no leading zeros beyond a single "0".
_NUM = r"(?:0|[1-9]\d*)"
_SEMVER_RE = re.compile(
    rf"^v?(?P<major>{_NUM})\.(?P<minor>{_NUM})\.(?P<patch>{_NUM})"
    r"(?:-(?P<pre>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"
    r"(?:\+[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*)?$"
)


def parse_semver(text: object) -> SemanticVersion | None:
    """Parse a version string into a SemanticVersion.

    Accepts "MAJOR.MINOR.PATCH" with an optional leading "v", an optional
    "-prerelease" suffix, and optional "+build" metadata (dropped).

    Args:
        text: Raw version string from the registry or state file.

    Returns:
        The parsed version, or None if the input is not a valid semantic
        version. Callers treat None as "exclude from consideration".

    Example:
        ```python
        parse_semver("7.113.0")          # SemanticVersion(7, 113, 0, None)
        parse_semver("7.113.0-beta.1")   # prerelease="beta.1"
        parse_semver("7.113")            # None
        ```

    """
    if not isinstance(text, str):
        return None
    m = _SEMVER_RE.match(text.strip())
    if not m:
        return None
    return SemanticVersion(
        major=int(m.group("major")),
        minor=int(m.group("minor")),
        patch=int(m.group("patch")),
        prerelease=m.group("pre"),
    )


def parse_stable(text: object) -> SemanticVersion | None:
    """Parse a version string, rejecting prereleases."""
    parsed = parse_semver(text)
    if parsed is None or not parsed.is_stable:
        return None
    return parsed


# ----------------------------
# Comparison
# ----------------------------


def version_key(v: SemanticVersion) -> tuple[int, int, int]:
    """Sort key for ascending release order (prerelease ignored)."""
    return v.release


def is_newer_than(a: SemanticVersion, b: SemanticVersion) -> bool:
    """Return True iff a's (major, minor, patch) is strictly greater than b's."""
    return a.release > b.release


def compare_descending(a: SemanticVersion, b: SemanticVersion) -> int:
    """Comparator ordering versions from highest to lowest.

    Returns a negative number if a is higher than b (so it sorts first),
    a positive number if a is lower, and 0 for equal release triples.
    Suitable for functools.cmp_to_key.
    """
    if a.major != b.major:
        return b.major - a.major
    if a.minor != b.minor:
        return b.minor - a.minor
    return b.patch - a.patch


# ----------------------------
# Collection helpers
# ----------------------------


def newer_stable_versions(raw_versions: Iterable[object], current: str) -> list[str]:
    """Select stable versions strictly newer than current.

    Unparseable strings and prereleases are skipped (logged at debug level).
    Duplicates collapse to one entry.

    Args:
        raw_versions: Version strings as reported by the registry.
        current: The latest version already synchronized.

    Returns:
        Normalized version strings, sorted ascending.

    Raises:
        ValueError: If current is not a valid stable version.

    """
    logger = get_global_logger()

    baseline = parse_stable(current)
    if baseline is None:
        raise ValueError(f"Could not parse latest synced version: {current!r}")

    found: dict[tuple[int, int, int], SemanticVersion] = {}
    for raw in raw_versions:
        parsed = parse_semver(raw)
        if parsed is None:
            logger.debug("VERSION", f"Skipping unparseable version {raw!r}")
            continue
        if not parsed.is_stable:
            logger.debug("VERSION", f"Skipping prerelease {raw!r}")
            continue
        if is_newer_than(parsed, baseline):
            found.setdefault(parsed.release, parsed)

    return [str(v) for v in sorted(found.values(), key=version_key)]


def highest_version(versions: Iterable[str]) -> str:
    """Return the single highest version using compare_descending.

    Raises:
        ValueError: If no valid version is given.

    """
    parsed = [p for p in (parse_semver(v) for v in versions) if p is not None]
    if not parsed:
        raise ValueError("No valid versions to choose from")
    return str(sorted(parsed, key=cmp_to_key(compare_descending))[0])


def sort_versions(versions: Iterable[str]) -> list[str]:
    """Sort version strings ascending; unparseable entries go last, as-is."""
    valid: list[tuple[tuple[int, int, int], str]] = []
    invalid: list[str] = []
    for v in versions:
        parsed = parse_semver(v)
        if parsed is None:
            invalid.append(v)
        else:
            valid.append((version_key(parsed), v))
    return [v for _, v in sorted(valid)] + sorted(invalid)
