"""
Tests for bundlesync.versioning module.

Tests semantic version handling including:
- Parsing valid, prerelease and malformed strings
- Strict "newer than" ordering
- Descending comparator and highest version selection
- Filtering registry lists down to newer stable versions
"""

from __future__ import annotations

from functools import cmp_to_key
import itertools

import pytest

from bundlesync.versioning import (
    SemanticVersion,
    compare_descending,
    highest_version,
    is_newer_than,
    newer_stable_versions,
    parse_semver,
    parse_stable,
    sort_versions,
)


class TestParseSemver:
    """Tests for parse_semver."""

    def test_parse_stable_version(self):
        """Test parsing a plain major.minor.patch string."""
        v = parse_semver("7.112.1")
        assert v == SemanticVersion(7, 112, 1, None)
        assert v.is_stable
        assert str(v) == "7.112.1"

    def test_parse_prerelease(self):
        """Test that prerelease tags are captured and flagged."""
        v = parse_semver("7.113.0-beta.1")
        assert v is not None
        assert v.release == (7, 113, 0)
        assert v.prerelease == "beta.1"
        assert not v.is_stable
        assert str(v) == "7.113.0-beta.1"

    def test_parse_drops_build_metadata(self):
        """Test that +build metadata is accepted and ignored."""
        v = parse_semver("8.0.0+20240101")
        assert v == SemanticVersion(8, 0, 0, None)

    def test_parse_accepts_v_prefix(self):
        """Test that a leading 'v' is tolerated."""
        assert parse_semver("v1.2.3") == SemanticVersion(1, 2, 3)

    @pytest.mark.parametrize(
        "text",
        ["", "7", "7.112", "7.112.", ".112.1", "7.x.1", "latest", "7.112.1.4", "a.b.c"],
    )
    def test_parse_rejects_malformed(self, text):
        """Test that strings missing a numeric component are rejected."""
        assert parse_semver(text) is None

    def test_parse_rejects_non_string(self):
        """Test that non-string registry values are rejected, not raised on."""
        assert parse_semver(None) is None
        assert parse_semver(7) is None

    def test_parse_stable_filters_prerelease(self):
        """Test parse_stable returns None for prereleases."""
        assert parse_stable("8.0.0-alpha.3") is None
        assert parse_stable("8.0.0") == SemanticVersion(8, 0, 0)


class TestIsNewerThan:
    """Tests for is_newer_than ordering properties."""

    def test_major_minor_patch(self):
        """Test that each component is compared in order."""
        assert is_newer_than(parse_semver("8.0.0"), parse_semver("7.999.999"))
        assert is_newer_than(parse_semver("7.113.0"), parse_semver("7.112.9"))
        assert is_newer_than(parse_semver("7.112.2"), parse_semver("7.112.1"))

    def test_numeric_not_lexicographic(self):
        """Test that 7.10.0 is newer than 7.9.0."""
        assert is_newer_than(parse_semver("7.10.0"), parse_semver("7.9.0"))

    def test_equal_is_not_newer(self):
        """Test that equal triples are not newer."""
        assert not is_newer_than(parse_semver("7.112.1"), parse_semver("7.112.1"))

    def test_prerelease_ignored(self):
        """Test that prerelease tags do not affect the predicate."""
        assert not is_newer_than(
            parse_semver("7.112.1-beta.1"), parse_semver("7.112.1")
        )
        assert not is_newer_than(
            parse_semver("7.112.1"), parse_semver("7.112.1-beta.1")
        )

    def test_strict_total_order_and_antisymmetry(self):
        """Test consistency with integer tuple comparison on a grid."""
        triples = list(itertools.product([0, 1, 10], repeat=3))
        for a, b in itertools.product(triples, repeat=2):
            va = SemanticVersion(*a)
            vb = SemanticVersion(*b)
            assert is_newer_than(va, vb) == (a > b)
            if is_newer_than(va, vb):
                assert not is_newer_than(vb, va)


class TestCompareDescending:
    """Tests for compare_descending and highest_version."""

    def test_sorts_highest_first(self):
        """Test that sorting with the comparator yields descending order."""
        versions = [parse_semver(v) for v in ["7.110.0", "8.1.0", "7.113.2", "8.0.10"]]
        ordered = sorted(versions, key=cmp_to_key(compare_descending))
        assert [str(v) for v in ordered] == ["8.1.0", "8.0.10", "7.113.2", "7.110.0"]

    def test_equal_compares_zero(self):
        """Test that equal triples compare as 0."""
        assert compare_descending(parse_semver("1.2.3"), parse_semver("1.2.3")) == 0

    def test_highest_version(self):
        """Test picking the single maximum."""
        assert highest_version(["7.113.0", "8.20.0", "7.114.0"]) == "8.20.0"

    def test_highest_version_empty_raises(self):
        """Test that an empty candidate set is rejected."""
        with pytest.raises(ValueError, match="No valid versions"):
            highest_version([])


class TestNewerStableVersions:
    """Tests for the registry filtering step."""

    def test_no_newer_versions(self):
        """Test that an up-to-date cache yields an empty list."""
        assert newer_stable_versions(["7.112.1", "7.110.0"], "7.112.1") == []

    def test_newer_versions_sorted_ascending(self):
        """Test that newer versions come back sorted ascending."""
        raw = ["8.0.0", "7.112.1", "7.113.0", "7.110.0"]
        assert newer_stable_versions(raw, "7.112.1") == ["7.113.0", "8.0.0"]

    def test_prerelease_excluded(self):
        """Test that prereleases never count as newer."""
        raw = ["7.112.1", "7.113.0-beta.1", "8.0.0-rc.0"]
        assert newer_stable_versions(raw, "7.112.1") == []

    def test_malformed_skipped(self):
        """Test that unparseable entries are skipped, not fatal."""
        raw = ["next", "7.113", "7.113.0", None]
        assert newer_stable_versions(raw, "7.112.1") == ["7.113.0"]

    def test_duplicates_collapse(self):
        """Test that duplicate registry entries are reported once."""
        assert newer_stable_versions(["7.113.0", "7.113.0"], "7.112.1") == ["7.113.0"]

    def test_invalid_baseline_raises(self):
        """Test that an unparseable stored latest version is rejected."""
        with pytest.raises(ValueError, match="Could not parse"):
            newer_stable_versions(["7.113.0"], "not-a-version")


def test_sort_versions_numeric_order():
    """Test ascending numeric sort used for the state file."""
    assert sort_versions({"7.9.0", "7.10.0", "7.9.10"}) == ["7.9.0", "7.9.10", "7.10.0"]
