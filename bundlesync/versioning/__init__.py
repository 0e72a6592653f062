"""
Version parsing and comparison utilities for bundlesync.

This package parses the dotted version identifiers published to the package
registry and decides which ones are newer than the locally cached bundles.

Modules
-------
semver : module
    SemanticVersion model, parsing, comparison and collection helpers.

Public API
----------
SemanticVersion : dataclass
    Immutable (major, minor, patch, prerelease) value.
parse_semver : function
    Parse a version string; returns None on malformed input.
is_newer_than : function
    Strict (major, minor, patch) comparison.
compare_descending : function
    Comparator ordering versions highest first.
newer_stable_versions : function
    Filter registry versions down to stable releases newer than a baseline.
highest_version : function
    Pick the single highest version from a collection.

Examples
--------
    >>> from bundlesync.versioning import parse_semver, is_newer_than
    >>> is_newer_than(parse_semver("7.113.0"), parse_semver("7.112.1"))
    True
    >>> parse_semver("7.113.0-beta.1").is_stable
    False
    >>> parse_semver("7.113") is None
    True

Notes
-----
- Prerelease tags never take part in ordering; they only exclude a version.
- No network or file I/O happens in this package.
"""

from .semver import (
    SemanticVersion,
    compare_descending,
    highest_version,
    is_newer_than,
    newer_stable_versions,
    parse_semver,
    parse_stable,
    sort_versions,
    version_key,
)

__all__ = [
    "SemanticVersion",
    "compare_descending",
    "highest_version",
    "is_newer_than",
    "newer_stable_versions",
    "parse_semver",
    "parse_stable",
    "sort_versions",
    "version_key",
]
