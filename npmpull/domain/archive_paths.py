from pathlib import Path
from typing import Optional

from npmpull.domain.exceptions import UnsafeArchiveEntryError


def strip_top_level(entry_name: str) -> Optional[str]:
    """
    Drop the first '/'-separated segment of a tar entry name.

    Registry tarballs wrap everything in one synthetic directory
    (usually 'package/'). Empty and '.' segments are ignored, so
    './package/lib/a.js' and 'package//lib/a.js' both become 'lib/a.js'.

    Returns None when nothing is left, i.e. for the wrapper directory
    itself and for bare top-level files.
    """
    segments = [s for s in entry_name.split("/") if s and s != "."]
    if len(segments) < 2:
        return None
    return "/".join(segments[1:])


def resolve_entry_path(destination: Path, relative_path: str, entry_name: str) -> Path:
    """
    Join a stripped entry path onto the destination, refusing anything that
    would land outside of it.
    """
    segments = relative_path.split("/")
    if ".." in segments:
        raise UnsafeArchiveEntryError(entry_name)

    target = destination.joinpath(*segments)
    # Existing symlinks inside the destination could still point elsewhere.
    if not target.resolve().is_relative_to(destination.resolve()):
        raise UnsafeArchiveEntryError(entry_name)
    return target
