from pathlib import Path

import pytest

from app.services.filesystem import FileSystemService
from app.services.paths import PathResolver


@pytest.fixture
def home(tmp_path: Path) -> Path:
    root = tmp_path / "home"
    root.mkdir()
    return root


@pytest.fixture
def resolver(home: Path) -> PathResolver:
    return PathResolver(home)


@pytest.fixture
def fs(home: Path) -> FileSystemService:
    return FileSystemService(home)
