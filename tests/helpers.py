"""Builders for synthetic registry documents and tarballs."""

from __future__ import annotations

import io
import tarfile
from typing import Iterable, Optional, Tuple

REGISTRY = "https://registry.test"

# (name, content, mode); content None means a directory entry.
Entry = Tuple[str, Optional[bytes], int]


def build_tarball(entries: Iterable[Entry]) -> bytes:
    """Pack entries, in the given order, into gzip-compressed tar bytes."""
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as tar:
        for name, content, mode in entries:
            info = tarfile.TarInfo(name)
            info.mode = mode
            if content is None:
                info.type = tarfile.DIRTYPE
                tar.addfile(info)
            else:
                info.size = len(content)
                tar.addfile(info, io.BytesIO(content))
    return buffer.getvalue()


def package_document(name: str = "demo", version: str = "1.2.3", tarball: Optional[str] = None) -> dict:
    tarball = tarball if tarball is not None else f"{REGISTRY}/{name}/-/{name}-{version}.tgz"
    return {
        "_id": name,
        "name": name,
        "description": "A demo package",
        "dist-tags": {"latest": version},
        "versions": {
            version: {
                "name": name,
                "version": version,
                "dist": {"tarball": tarball, "shasum": "0" * 40},
            },
        },
        "time": {"created": "2020-01-01T00:00:00.000Z"},
    }
