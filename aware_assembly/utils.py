"""Shared path helpers used by assembly tooling."""

from __future__ import annotations

from pathlib import Path, PurePath, PurePosixPath
from typing import Optional

from .schemas.dependencies import MavenCoords


def as_path(value: Path | str) -> Path:
    """Coerce a string or path into a ``Path``."""

    return value if isinstance(value, Path) else Path(value)


def resolve_path(value: Path | str, root: Path) -> Path:
    """Resolve ``value`` against ``root`` unless it is already absolute."""

    path = as_path(value)
    if not path.is_absolute():
        path = root / path
    return path


def relativize_path(root: Path, path: Path) -> PurePath:
    """Return ``path`` relative to ``root``."""

    return path.relative_to(root)


def entry_name(relative: PurePath) -> str:
    """Render a relative path as a forward-slash archive entry name."""

    return PurePosixPath(*relative.parts).as_posix()


def lib_names(lib: str) -> tuple[str, str]:
    """Split a ``group/artifact`` lib name; the group defaults to the artifact."""

    group_id, sep, artifact_id = lib.partition("/")
    if not sep:
        return lib, lib
    return group_id, artifact_id


def make_out_path(artifact_id: str, coords: MavenCoords) -> Path:
    """Default output location ``target/<artifact>-<version>[-classifier][.ext]``."""

    name = f"{artifact_id}-{coords.version}"
    if coords.classifier:
        name += f"-{coords.classifier}"
    if coords.extension:
        name += f".{coords.extension}"
    return Path("target") / name


def write_text(path: Path, content: str, *, newline: Optional[str] = None) -> None:
    """Write text to file ensuring parent directories exist."""

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8", newline=newline)
