"""
Errors raised while resolving and fetching packages.

Everything derives from NpmPullError so callers can catch a single type;
filesystem errors during extraction are left as plain OSError.
"""
from __future__ import annotations

from typing import Optional


class NpmPullError(RuntimeError):
    pass


class RegistryTransportError(NpmPullError):
    """The registry could not be reached (DNS, connect, timeout)."""


class PackageNotFoundError(NpmPullError):
    def __init__(self, package_name: str):
        super().__init__(f"Package not found in registry: {package_name}")
        self.package_name = package_name


class RegistryResponseError(NpmPullError):
    """The registry answered with a non-2xx status other than 404."""

    def __init__(self, url: str, status_code: int):
        super().__init__(f"Registry request to {url} failed with HTTP {status_code}")
        self.url = url
        self.status_code = status_code


class MetadataDecodeError(NpmPullError):
    """The registry body is not JSON or does not match the package shape."""


class VersionResolutionError(NpmPullError):
    """No usable version record for the requested dist-tag."""


class TarballDownloadError(NpmPullError):
    def __init__(self, url: str, reason: str, status_code: Optional[int] = None):
        super().__init__(f"Failed to download {url or '<empty url>'}: {reason}")
        self.url = url
        self.status_code = status_code


class ArchiveFormatError(NpmPullError):
    """The download is not a readable gzip-compressed tar stream."""


class UnsafeArchiveEntryError(NpmPullError):
    def __init__(self, entry_name: str):
        super().__init__(f"Archive entry escapes the destination: {entry_name}")
        self.entry_name = entry_name
