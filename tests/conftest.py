from __future__ import annotations

from pathlib import Path

import pytest

from ghash.repo import GitRepo


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("GIT_DIR", "GHASH_DIR", "GHASH_MIN_LENGTH"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def git_repo(tmp_path: Path) -> GitRepo:
    return GitRepo.init(tmp_path / "work")
