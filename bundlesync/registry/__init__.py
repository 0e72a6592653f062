"""Package registry access for bundlesync.

Public API:

- RegistryClient: Lists every published version of a package
- package_url: Builds the registry document URL for a package name

Example:
    from bundlesync.registry import RegistryClient

    versions = RegistryClient().list_versions("@sentry/browser")

"""

from .client import DEFAULT_REGISTRY_URL, RegistryClient, package_url

__all__ = ["DEFAULT_REGISTRY_URL", "RegistryClient", "package_url"]
