"""Pytest configuration applied to the entire test suite."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

import pytest

from npmpull.core.dependencies import reset_settings
from tests.helpers import Entry, build_tarball


@pytest.fixture
def write_tarball(tmp_path: Path):
    """Write a tarball built from entries to tmp_path and return its path."""

    def _write(entries: Iterable[Entry], name: str = "package.tgz") -> Path:
        path = tmp_path / name
        path.write_bytes(build_tarball(entries))
        return path

    return _write


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    for var in ("NPMPULL_REGISTRY_URL", "NPMPULL_TIMEOUT", "NPMPULL_OUTPUT_DIR"):
        monkeypatch.delenv(var, raising=False)
    reset_settings()
    yield
    reset_settings()
