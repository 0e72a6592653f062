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

"""Command-line interface for bundlesync.

Commands:

    sync: Download bundles for every newer version and update state
    check: List newer versions without downloading anything
    list: Show the versions tracked in the state file
    init: Create the state file for a first version
    validate: Validate the configuration file (no network calls)

Example:
    Synchronize with defaults:
        ```bash
        $ bundlesync sync
        ```

    Use a config file and show details:
        ```bash
        $ bundlesync sync --config bundlesync.yaml --verbose
        ```

    See what a run would fetch:
        ```bash
        $ bundlesync check
        ```

Exit Codes:

- 0: Success (including runs with nothing to do)
- 1: Error (configuration, state, registry, download, or write failure)

Note:
    Each command has its own handler function (cmd_<command>). Verbose mode
    shows full tracebacks on errors for debugging. Debug mode implies
    verbose mode.

"""

from __future__ import annotations

import argparse
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
import sys
from typing import Any

from bundlesync import __version__
from bundlesync.config import DEFAULT_CONFIG_FILE, SyncConfig, load_config, validate_config
from bundlesync.core import check_for_updates, sync_bundles
from bundlesync.exceptions import BundleSyncError
from bundlesync.logging import get_logger, set_global_logger
from bundlesync.state import create_initial_state, load_state, save_state
from bundlesync.versioning import sort_versions


def _installed_version() -> str:
    try:
        return version("bundlesync")
    except PackageNotFoundError:
        return __version__


def _config_path(args: argparse.Namespace) -> Path | None:
    """Explicit --config, else ./bundlesync.yaml if present, else defaults."""
    if getattr(args, "config", None):
        return Path(args.config)
    candidate = Path(DEFAULT_CONFIG_FILE)
    return candidate if candidate.exists() else None


def _overrides(args: argparse.Namespace) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    if getattr(args, "output_dir", None):
        overrides["output_dir"] = str(Path(args.output_dir).resolve())
    if getattr(args, "state_file", None):
        overrides["state_file"] = str(Path(args.state_file).resolve())
    return overrides


def _load(args: argparse.Namespace) -> SyncConfig:
    return load_config(_config_path(args), _overrides(args))


def _report_error(err: Exception, args: argparse.Namespace) -> int:
    print(f"Error: {err}")
    if getattr(args, "verbose", False) or getattr(args, "debug", False):
        import traceback

        traceback.print_exc()
    return 1


def cmd_sync(args: argparse.Namespace) -> int:
    """Handler for 'bundlesync sync' command.

    Lists registry versions, downloads every configured bundle for each
    version newer than the stored latest, and updates the state file.

    Returns:
        Exit code (0 for success or nothing to do, 1 for failure).

    """
    logger = get_logger(verbose=args.verbose, debug=args.debug)
    set_global_logger(logger)

    try:
        config = _load(args)
        print(f"Package:          {config.package_name}")
        print(f"Output directory: {config.output_dir}")
        print(f"State file:       {config.state_file}")
        print()
        result = sync_bundles(config)
    except BundleSyncError as err:
        return _report_error(err, args)

    if not result.changed:
        print()
        print(f"[SUCCESS] Already up to date at {result.latest_version}.")
        return 0

    print("=" * 70)
    print("SYNC RESULTS")
    print("=" * 70)
    print(f"Previous Version: {result.previous_version}")
    print(f"Latest Version:   {result.latest_version}")
    print(f"New Versions:     {', '.join(result.new_versions)}")
    print(f"Files Written:    {len(result.files)}")
    for version_name, variant in result.fallbacks:
        print(f"  [FALLBACK] {variant} for {version_name}")
    print("=" * 70)
    print()
    print(f"[SUCCESS] Synchronized to {result.latest_version}.")
    return 0


def cmd_check(args: argparse.Namespace) -> int:
    """Handler for 'bundlesync check' command (dry run)."""
    logger = get_logger(verbose=args.verbose, debug=args.debug)
    set_global_logger(logger)

    try:
        result = check_for_updates(_load(args))
    except BundleSyncError as err:
        return _report_error(err, args)

    print(f"Latest synchronized: {result.previous_version}")
    if not result.new_versions:
        print("No new versions available.")
        return 0

    print(f"Newer versions ({len(result.new_versions)}):")
    for v in result.new_versions:
        print(f"  {v}")
    return 0


def cmd_list(args: argparse.Namespace) -> int:
    """Handler for 'bundlesync list' command."""
    set_global_logger(get_logger(verbose=args.verbose))

    try:
        state = load_state(_load(args).state_file)
    except BundleSyncError as err:
        return _report_error(err, args)

    print(f"Latest version: {state.latest_version}")
    print(f"Tracked versions ({len(state.versions)}):")
    for v in sort_versions(state.versions):
        print(f"  {v}")
    return 0


def cmd_init(args: argparse.Namespace) -> int:
    """Handler for 'bundlesync init' command.

    Creates the state file for a cache that starts at one version. Refuses
    to overwrite an existing file, or to record a version whose directory
    is missing from the cache, unless --force is given.
    """
    set_global_logger(get_logger(verbose=args.verbose))

    try:
        config = _load(args)
        state = create_initial_state(args.version)
        state_file = config.state_file
        if state_file.exists() and not args.force:
            print(f"Error: State file already exists: {state_file}")
            print("Use --force to overwrite it.")
            return 1
        version_dir = config.output_dir / state.latest_version
        if not version_dir.is_dir():
            if not args.force:
                print(f"Error: No cached bundles for {args.version}: {version_dir}")
                print("Use --force to record it anyway.")
                return 1
            print(f"[WARNING] Recording {args.version} without {version_dir}")
        save_state(state, state_file)
    except BundleSyncError as err:
        return _report_error(err, args)

    print(f"[SUCCESS] Created {state_file} at version {args.version}.")
    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    """Handler for 'bundlesync validate' command."""
    config_path = _config_path(args)
    print(f"Validating config: {config_path or '(built-in defaults)'}")
    print()

    errors = validate_config(config_path)
    if errors:
        print(f"Errors ({len(errors)}):")
        for error in errors:
            print(f"  [X] {error}")
        print()
        print(f"[FAILED] Config validation failed with {len(errors)} error(s).")
        return 1

    print("[SUCCESS] Config is valid!")
    return 0


def _add_common(parser: argparse.ArgumentParser, *, paths: bool = True) -> None:
    parser.add_argument(
        "--config",
        default=None,
        help=f"Path to YAML config (default: ./{DEFAULT_CONFIG_FILE} if present)",
    )
    if paths:
        parser.add_argument(
            "--output-dir",
            default=None,
            help="Directory holding one sub-directory per cached version",
        )
        parser.add_argument(
            "--state-file",
            default=None,
            help="Version-tracking JSON file",
        )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show progress and high-level status updates",
    )
    parser.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="Show detailed debugging output (implies --verbose)",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bundlesync",
        description="Keep a local cache of SDK CDN bundles in sync with the package registry",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"bundlesync {_installed_version()}",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        help="Available commands",
        required=True,
    )

    parser_sync = subparsers.add_parser(
        "sync",
        help="Download bundles for newer versions and update state",
    )
    _add_common(parser_sync)
    parser_sync.set_defaults(func=cmd_sync)

    parser_check = subparsers.add_parser(
        "check",
        help="List newer versions without downloading",
    )
    _add_common(parser_check)
    parser_check.set_defaults(func=cmd_check)

    parser_list = subparsers.add_parser(
        "list",
        help="Show versions tracked in the state file",
    )
    _add_common(parser_list)
    parser_list.set_defaults(func=cmd_list)

    parser_init = subparsers.add_parser(
        "init",
        help="Create the state file for a first version",
    )
    parser_init.add_argument("version", help="Version already present in the cache")
    parser_init.add_argument(
        "--force",
        action="store_true",
        help="Overwrite an existing state file or record a version missing from the cache",
    )
    _add_common(parser_init)
    parser_init.set_defaults(func=cmd_init)

    parser_validate = subparsers.add_parser(
        "validate",
        help="Validate the configuration (no network calls)",
    )
    _add_common(parser_validate, paths=False)
    parser_validate.set_defaults(func=cmd_validate)

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the bundlesync CLI.

    This function is registered as the 'bundlesync' console script in
    pyproject.toml.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    sys.exit(args.func(args))


if __name__ == "__main__":
    main()
