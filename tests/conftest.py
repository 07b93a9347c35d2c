from __future__ import annotations

import zipfile
from pathlib import Path
from typing import Callable, Mapping

import pytest


def _create_jar(path: Path, entries: Mapping[str, bytes | str]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(path, "w") as archive:
        for name, content in entries.items():
            archive.writestr(name, content)
    return path


@pytest.fixture
def create_jar() -> Callable[[Path, Mapping[str, bytes | str]], Path]:
    return _create_jar


@pytest.fixture
def write_file() -> Callable[..., Path]:
    def _write(path: Path, content: str = "") -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return _write
