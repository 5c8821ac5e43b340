"""
Shared fixtures.

- Puts the project root on ``sys.path`` so ``import hamlet6to7`` resolves
- Resets the cached settings and pins environment defaults for every test
"""

from __future__ import annotations

import sys
from collections.abc import Iterator
from pathlib import Path

import pytest

_PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))


@pytest.fixture(autouse=True)
def _test_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Iterator[None]:
    """Isolate each test from the caller's environment and ``.env`` file."""
    from hamlet6to7.config import clear_settings_cache

    for name in ("DRY_RUN", "ENCODING", "TEMP_SUFFIX", "LOG_FORMAT"):
        monkeypatch.delenv(f"HAMLET6TO7_{name}", raising=False)
    monkeypatch.setenv("HAMLET6TO7_LOG_LEVEL", "DEBUG")
    monkeypatch.chdir(tmp_path)

    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def write_file(tmp_path: Path):
    """Create a file under ``tmp_path`` with exact (untranslated) content."""

    def _write(name: str, content: str) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content.encode("utf-8"))
        return path

    return _write


@pytest.fixture
def read_file():
    """Read a file back without newline translation."""

    def _read(path: Path) -> str:
        return path.read_bytes().decode("utf-8")

    return _read
