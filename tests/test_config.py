"""
Tests for bundlesync.config.loader module.

Tests configuration loading and merging including:
- Built-in defaults
- YAML file overlay (defaults -> file -> overrides)
- Path resolution relative to the config file
- Validation error reporting
"""

from __future__ import annotations

from pathlib import Path

import pytest

from bundlesync.config import (
    DEFAULT_CONFIG,
    REPLAY_FALLBACK_VERSION,
    BundleVariant,
    load_config,
    validate_config,
)
from bundlesync.exceptions import ConfigError


class TestDefaults:
    """Tests for the configuration used when no file is given."""

    def test_default_values(self):
        """Test that defaults target the browser SDK on npm and its CDN."""
        config = load_config()

        assert config.package_name == "@sentry/browser"
        assert config.registry_url == "https://registry.npmjs.org"
        assert config.versions_path == "versions"
        assert config.cdn_root == "https://browser.sentry-cdn.com"
        assert config.timeout == 60
        assert config.retries == 0

    def test_default_variants(self):
        """Test that the replay variant carries the pinned fallback."""
        config = load_config()

        assert config.variants == (
            BundleVariant("full", "bundle.tracing.replay.feedback.js"),
            BundleVariant("replay", "replay.js", REPLAY_FALLBACK_VERSION),
        )

    def test_default_paths_resolve_against_cwd(self, tmp_test_dir, monkeypatch):
        """Test that relative defaults resolve against the working directory."""
        monkeypatch.chdir(tmp_test_dir)

        config = load_config()

        assert config.output_dir == (tmp_test_dir / "bundles").resolve()
        assert config.state_file == (
            tmp_test_dir / "bundles" / "latestVersion.json"
        ).resolve()

    def test_defaults_are_not_mutated(self, create_yaml_file):
        """Test that loading a config leaves DEFAULT_CONFIG untouched."""
        path = create_yaml_file("cfg.yaml", {"registry": {"url": "https://x.test"}})

        load_config(path)

        assert DEFAULT_CONFIG["registry"]["url"] == "https://registry.npmjs.org"


class TestConfigMerging:
    """Tests for layering the config file and overrides over defaults."""

    def test_dict_deep_merge(self, create_yaml_file):
        """Test that nested keys not set in the file keep their defaults."""
        path = create_yaml_file(
            "cfg.yaml", {"registry": {"url": "https://registry.example.com/"}}
        )

        config = load_config(path)

        assert config.registry_url == "https://registry.example.com"
        assert config.versions_path == "versions"

    def test_list_replacement(self, create_yaml_file):
        """Test that a variants list in the file replaces the defaults."""
        path = create_yaml_file(
            "cfg.yaml", {"variants": [{"name": "core", "file": "bundle.min.js"}]}
        )

        config = load_config(path)

        assert config.variants == (BundleVariant("core", "bundle.min.js"),)

    def test_overrides_win(self, create_yaml_file, tmp_test_dir):
        """Test that call-site overrides are applied last."""
        path = create_yaml_file("cfg.yaml", {"output_dir": "from-file"})
        target = tmp_test_dir / "from-flag"

        config = load_config(path, {"output_dir": str(target)})

        assert config.output_dir == target.resolve()

    def test_paths_resolve_against_config_file(self, tmp_test_dir, create_yaml_file):
        """Test that relative paths are anchored at the config file location."""
        path = create_yaml_file(
            "site/bundlesync.yaml",
            {"output_dir": "public/sdk", "state_file": "public/sdk/state.json"},
        )

        config = load_config(path)

        site = (tmp_test_dir / "site").resolve()
        assert config.output_dir == site / "public" / "sdk"
        assert config.state_file == site / "public" / "sdk" / "state.json"

    def test_http_settings(self, create_yaml_file):
        """Test that timeout and retries are read from the http section."""
        path = create_yaml_file("cfg.yaml", {"http": {"timeout": 10, "retries": 2}})

        config = load_config(path)

        assert (config.timeout, config.retries) == (10, 2)


class TestConfigErrors:
    """Tests for error handling."""

    def test_missing_file_raises(self, tmp_test_dir):
        """Test that an explicit missing config file is an error."""
        with pytest.raises(ConfigError, match="not found"):
            load_config(tmp_test_dir / "nonexistent.yaml")

    def test_invalid_yaml_raises(self, tmp_test_dir):
        """Test that unparseable YAML is an error."""
        path = tmp_test_dir / "bad.yaml"
        path.write_text("variants: [unclosed\n", encoding="utf-8")

        with pytest.raises(ConfigError, match="Error parsing YAML"):
            load_config(path)

    def test_non_mapping_raises(self, tmp_test_dir):
        """Test that a top-level list is rejected."""
        path = tmp_test_dir / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")

        with pytest.raises(ConfigError, match="mapping"):
            load_config(path)

    def test_all_errors_reported_together(self, create_yaml_file):
        """Test that every problem is listed in a single ConfigError."""
        path = create_yaml_file(
            "cfg.yaml",
            {"package": "", "http": {"timeout": 0}, "cdn": {"root": ""}},
        )

        with pytest.raises(ConfigError) as excinfo:
            load_config(path)

        message = str(excinfo.value)
        assert message.startswith("Invalid configuration:")
        assert "package must be a non-empty string" in message
        assert "cdn.root must be a non-empty string" in message
        assert "http.timeout must be a positive integer" in message


class TestValidateConfig:
    """Tests for validate_config."""

    def test_valid_config(self, create_yaml_file):
        """Test that a well-formed file produces no errors."""
        path = create_yaml_file("cfg.yaml", {"package": "@sentry/browser"})

        assert validate_config(path) == []

    def test_defaults_are_valid(self):
        """Test that the built-in defaults validate."""
        assert validate_config(None) == []

    @pytest.mark.parametrize(
        "variants, message",
        [
            ([], "non-empty list"),
            ([{"name": "a"}], "file must be a non-empty string"),
            ([{"name": "a", "file": "x/a.js"}], "bare file name"),
            (
                [{"name": "a", "file": "a.js"}, {"name": "a", "file": "b.js"}],
                "is duplicated",
            ),
            (
                [{"name": "a", "file": "a.js"}, {"name": "b", "file": "a.js"}],
                "is duplicated",
            ),
            (
                [{"name": "a", "file": "a.js", "fallback_version": "7.27.0-beta.1"}],
                "stable semantic version",
            ),
        ],
    )
    def test_invalid_variants(self, create_yaml_file, variants, message):
        """Test variant-level validation rules."""
        path = create_yaml_file("cfg.yaml", {"variants": variants})

        errors = validate_config(path)

        assert any(message in e for e in errors), errors

    def test_unreadable_file_reported(self, tmp_test_dir):
        """Test that load failures come back as a single error entry."""
        errors = validate_config(Path(tmp_test_dir / "missing.yaml"))

        assert len(errors) == 1
        assert "not found" in errors[0]
