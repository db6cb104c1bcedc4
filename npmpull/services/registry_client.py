"""
Fetch package metadata from an npm-compatible registry and resolve dist-tags.
"""
from __future__ import annotations

import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from npmpull.domain.exceptions import (
    MetadataDecodeError,
    PackageNotFoundError,
    RegistryResponseError,
    RegistryTransportError,
    VersionResolutionError,
)
from npmpull.domain.models import (
    DEFAULT_REGISTRY_URL,
    DEFAULT_TIMEOUT,
    LATEST_TAG,
    PackageMetadata,
    VersionRecord,
)

logger = logging.getLogger(__name__)


def encode_package_name(package_name: str) -> str:
    """
    Turn a package name into the path segment the registry expects.

    Scoped names keep their '@' and have the scope separator escaped
    ('@types/node' -> '@types%2Fnode'). Anything else containing '/' is
    rejected so the name can never address a different registry path.
    """
    if not package_name or not package_name.strip():
        raise ValueError("Package name must not be empty")
    if package_name.startswith("."):
        raise ValueError(f"Invalid package name: {package_name}")

    if package_name.startswith("@"):
        scope, sep, name = package_name.partition("/")
        if not sep or not name or len(scope) < 2 or "/" in name:
            raise ValueError(f"Invalid scoped package name: {package_name}")
        return f"{scope}%2F{name}"

    if "/" in package_name:
        raise ValueError(f"Invalid package name: {package_name}")
    return package_name


class RegistryClient:
    """Downloads and decodes package documents from the registry."""

    def __init__(
        self,
        base_url: str = DEFAULT_REGISTRY_URL,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    def package_url(self, package_name: str) -> str:
        return f"{self.base_url}/{encode_package_name(package_name)}"

    async def fetch_package_metadata(self, package_name: str) -> PackageMetadata:
        """
        GET <registry>/<package_name> and decode the body.

        Raises:
            ValueError: package name is empty or malformed
            RegistryTransportError: registry unreachable or timed out
            PackageNotFoundError: registry answered 404
            RegistryResponseError: any other non-2xx answer
            MetadataDecodeError: body is not a package document
        """
        url = self.package_url(package_name)
        logger.debug(f"Fetching package metadata from {url}")

        try:
            async with httpx.AsyncClient(
                follow_redirects=True,
                timeout=self.timeout,
                transport=self.transport,
            ) as client:
                response = await client.get(url, headers={"Accept": "application/json"})
        except (httpx.RequestError, httpx.InvalidURL) as e:
            logger.error(f"Registry request for {package_name} failed: {e}")
            raise RegistryTransportError(f"Could not reach registry at {url}: {e}") from e

        if response.status_code == 404:
            raise PackageNotFoundError(package_name)
        if not response.is_success:
            raise RegistryResponseError(url, response.status_code)

        try:
            metadata = PackageMetadata.model_validate_json(response.content)
        except ValidationError as e:
            logger.error(f"Failed to decode metadata for {package_name}: {e}")
            raise MetadataDecodeError(f"Invalid package metadata from {url}") from e

        logger.debug(
            f"Decoded metadata for {metadata.name or package_name}: "
            f"{len(metadata.versions)} versions, tags {sorted(metadata.dist_tags)}"
        )
        return metadata


def resolve_version(metadata: PackageMetadata, tag: str = LATEST_TAG) -> VersionRecord:
    """
    Pick the version record a dist-tag points at.

    The record must exist and carry a tarball URL; otherwise there is
    nothing to download and VersionResolutionError is raised.
    """
    package = metadata.name or "<unnamed package>"

    version = metadata.dist_tags.get(tag)
    if not version:
        raise VersionResolutionError(f"{package} has no '{tag}' dist-tag")

    record = metadata.versions.get(version)
    if record is None:
        raise VersionResolutionError(
            f"{package}: dist-tag '{tag}' points at {version}, which is not a published version"
        )
    if not record.dist.tarball:
        raise VersionResolutionError(f"{package}@{version} has no tarball URL")

    logger.info(f"Resolved {package}@{tag} to version {version}")
    return record


def resolve_tarball_url(metadata: PackageMetadata, tag: str = LATEST_TAG) -> str:
    return resolve_version(metadata, tag).dist.tarball
