"""
Download a package tarball and unpack it into a destination directory.

Registry tarballs wrap their contents in one top-level directory
('package/' for npm). That directory is dropped so the files land directly
under the destination.
"""
from __future__ import annotations

import asyncio
import logging
import os
import shutil
import tarfile
import tempfile
import zlib
from pathlib import Path
from typing import Optional

import aiofiles
import httpx

from npmpull.domain.archive_paths import resolve_entry_path, strip_top_level
from npmpull.domain.exceptions import ArchiveFormatError, TarballDownloadError
from npmpull.domain.models import DEFAULT_TIMEOUT, ExtractionSummary

logger = logging.getLogger(__name__)

PARENT_DIR_MODE = 0o755


async def download_tarball(
    url: str,
    target_path: Path,
    timeout: float = DEFAULT_TIMEOUT,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> int:
    """
    Stream url into target_path and return the number of bytes written.

    The status is checked before any byte is written; a failed request never
    leaves a file behind that could be mistaken for a download.
    """
    if not url:
        raise TarballDownloadError(url, "no URL given")

    logger.debug(f"Downloading tarball from {url}")
    downloaded = 0
    try:
        async with httpx.AsyncClient(follow_redirects=True, timeout=timeout, transport=transport) as client:
            async with client.stream("GET", url) as response:
                if not response.is_success:
                    raise TarballDownloadError(url, f"HTTP {response.status_code}", response.status_code)

                async with aiofiles.open(target_path, "wb") as f:
                    async for chunk in response.aiter_bytes():
                        await f.write(chunk)
                        downloaded += len(chunk)
    except (httpx.RequestError, httpx.InvalidURL) as e:
        logger.error(f"Tarball request to {url} failed: {e}")
        raise TarballDownloadError(url, str(e) or type(e).__name__) from e

    logger.debug(f"Downloaded {downloaded} bytes from {url}")
    return downloaded


async def download_and_extract(
    url: str,
    destination: Path,
    timeout: float = DEFAULT_TIMEOUT,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> ExtractionSummary:
    """
    Download the tarball at url and extract it under destination.

    The archive is staged in a temporary directory, so a failed download
    performs no writes under destination. The destination is created only
    once the download succeeded. A failure during extraction may leave a
    partially-written tree; it is not rolled back.
    """
    destination = Path(destination)
    logger.info(f"Fetching {url} into {destination}")

    with tempfile.TemporaryDirectory(prefix="npmpull-") as tmp_dir:
        archive_path = Path(tmp_dir) / "package.tgz"
        await download_tarball(url, archive_path, timeout=timeout, transport=transport)

        # Blocking tar and file I/O stays off the event loop.
        return await asyncio.to_thread(extract_archive, archive_path, destination)


def extract_archive(archive_path: Path, destination: Path) -> ExtractionSummary:
    """
    Extract a gzip-compressed tar file entry by entry, in archive order.

    - Directories are created with their recorded permission bits.
    - Regular files get their parent directories created on demand, so a
      file may appear before its directory entry.
    - Bare top-level files (no directory component to strip) and
      non-regular entries (links, devices, FIFOs) are skipped and listed in
      the summary.

    Raises:
        ArchiveFormatError: the file is not a valid gzip tar stream
        UnsafeArchiveEntryError: an entry would land outside destination
        OSError: any filesystem failure while writing
    """
    destination = Path(destination)
    summary = ExtractionSummary(destination=destination)
    ensure_directory(destination)

    try:
        # Stream mode: entries are read strictly sequentially, no seeking.
        with tarfile.open(archive_path, mode="r|gz") as tar:
            for member in tar:
                _extract_member(tar, member, destination, summary)
    except (tarfile.TarError, EOFError, zlib.error) as e:
        logger.error(f"Failed to read archive {archive_path}: {e}")
        raise ArchiveFormatError(f"Malformed tarball: {e}") from e

    logger.info(
        f"Extracted {summary.files} files and {summary.directories} directories "
        f"into {destination} ({len(summary.skipped)} skipped)"
    )
    return summary


def _extract_member(
    tar: tarfile.TarFile,
    member: tarfile.TarInfo,
    destination: Path,
    summary: ExtractionSummary,
) -> None:
    relative_path = strip_top_level(member.name)

    if member.isdir():
        if relative_path is None:
            # The wrapper directory itself, i.e. the destination root.
            return
        target = resolve_entry_path(destination, relative_path, member.name)
        # Owner needs rwx to write the entries that follow.
        ensure_directory(target, (member.mode & 0o777) | 0o700)
        summary.directories += 1
        return

    if not member.isreg():
        logger.warning(f"Skipping unsupported archive entry {member.name} (type {member.type!r})")
        summary.skipped.append(member.name)
        return

    if relative_path is None:
        logger.warning(f"Skipping top-level archive entry {member.name}: no directory to strip")
        summary.skipped.append(member.name)
        return

    target = resolve_entry_path(destination, relative_path, member.name)
    ensure_directory(target.parent)

    source = tar.extractfile(member)
    fd = os.open(target, os.O_CREAT | os.O_TRUNC | os.O_WRONLY, member.mode & 0o777)
    with os.fdopen(fd, "wb") as out:
        if source is not None:
            shutil.copyfileobj(source, out)
    summary.files += 1


def ensure_directory(path: Path, mode: int = PARENT_DIR_MODE) -> None:
    """
    Create path if it is missing. Missing parents always get PARENT_DIR_MODE;
    only path itself gets mode. Existing directories are left untouched.
    """
    if path.is_dir():
        return
    ensure_directory(path.parent)
    path.mkdir(mode=mode, exist_ok=True)
