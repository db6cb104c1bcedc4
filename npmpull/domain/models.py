"""
Pydantic models for npm-pull.

This module defines the data models used throughout the application:
- Registry package metadata (the document served at <registry>/<package>)
- Per-version descriptors and their distribution info
- Extraction results and runtime settings

Registry documents carry many more fields than we read; unknown fields are
ignored so new registry fields never break decoding.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, ConfigDict


DEFAULT_REGISTRY_URL = "https://registry.npmjs.org"
DEFAULT_TIMEOUT = 30.0
DEFAULT_OUTPUT_DIR = "./testing"
LATEST_TAG = "latest"


# ---------------------------------------------------------------------------
# Registry Metadata Models
# ---------------------------------------------------------------------------


class DistributionInfo(BaseModel):
    """
    Where a published version's source archive lives.

    The shasum is carried for completeness but is not verified against the
    downloaded bytes.
    """

    model_config = ConfigDict(extra="ignore")

    tarball: str = Field(
        default="",
        description="URL of the gzip-compressed tarball for this version.",
    )
    shasum: Optional[str] = Field(
        default=None,
        description="SHA-1 hex digest published by the registry.",
    )


class VersionRecord(BaseModel):
    """
    One published version of a package (an entry of the 'versions' map).
    """

    model_config = ConfigDict(extra="ignore")

    name: str = Field(
        default="",
        description="Package name as recorded in this version's package.json.",
    )
    version: str = Field(
        default="",
        description="Version string, e.g. '4.18.2'.",
    )
    dist: DistributionInfo = Field(
        default_factory=DistributionInfo,
        description="Distribution (tarball) information for this version.",
    )


class PackageMetadata(BaseModel):
    """
    Package document returned by the registry for GET <registry>/<name>.

    Persisted in: nowhere; decoded once per invocation and discarded.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)

    name: str = Field(
        default="",
        description="Package name.",
    )
    description: Optional[str] = Field(
        default=None,
        description="Short description of the package.",
    )
    dist_tags: Dict[str, str] = Field(
        default_factory=dict,
        alias="dist-tags",
        description="Named pointers (e.g. 'latest') to version strings.",
    )
    versions: Dict[str, VersionRecord] = Field(
        default_factory=dict,
        description="All published versions keyed by version string.",
    )


# ---------------------------------------------------------------------------
# Extraction Models
# ---------------------------------------------------------------------------


class ExtractionSummary(BaseModel):
    """
    Outcome of extracting one tarball into a destination directory.
    """

    destination: Path = Field(
        description="Directory the archive was extracted into.",
    )
    files: int = Field(
        default=0,
        description="Number of regular files written.",
    )
    directories: int = Field(
        default=0,
        description="Number of directory entries created.",
    )
    skipped: List[str] = Field(
        default_factory=list,
        description="Archive entry names that were not extracted.",
    )


# ---------------------------------------------------------------------------
# Configuration Models
# ---------------------------------------------------------------------------


class Settings(BaseModel):
    """
    Runtime configuration, assembled from environment variables and CLI flags.
    """

    registry_url: str = Field(
        default=DEFAULT_REGISTRY_URL,
        description="Base URL of the package registry (no trailing slash needed).",
    )
    timeout: float = Field(
        default=DEFAULT_TIMEOUT,
        gt=0,
        description="Timeout in seconds applied to every HTTP request.",
    )
    output_dir: Path = Field(
        default=Path(DEFAULT_OUTPUT_DIR),
        description="Directory the package contents are extracted into.",
    )
