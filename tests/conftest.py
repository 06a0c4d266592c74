import os
import zipfile
from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def launcher_env(monkeypatch):
    for key in list(os.environ):
        if key.startswith("FORGE_LAUNCHER_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("FORGE_LAUNCHER_LOG_LEVEL", "WARNING")


@pytest.fixture
def make_archive():
    """Build ``<dist_dir>/<base>.zip`` holding one member with the given body."""

    def _make(dist_dir: Path, base: str, body: str, member: str | None = None) -> Path:
        dist_dir.mkdir(parents=True, exist_ok=True)
        zip_path = dist_dir / f"{base}.zip"
        with zipfile.ZipFile(zip_path, "w") as zf:
            zf.writestr(member or base, body)
        return zip_path

    return _make


@pytest.fixture(autouse=True)
def cleanup_mocks():
    yield
    from unittest.mock import patch
    patch.stopall()
