"""Native library extraction from jar dependencies."""

from __future__ import annotations

import logging
import re
import shutil
import zipfile
from pathlib import Path, PurePosixPath
from typing import Iterable, Optional, Pattern, Sequence

from .bundle import check_for_unstable_deps
from .errors import UnsafeArchiveEntryError
from .schemas.dependencies import ResolvedDependency
from .schemas.options import NativeOptions
from .utils import as_path, resolve_path

logger = logging.getLogger(__name__)

NATIVE_EXTENSIONS = (
    r"\.so$",
    r"\.so\.[0-9]+$",
    r"\.so\.[0-9]+\.[0-9]+$",
    r"\.so\.[0-9]+\.[0-9]+\.[0-9]+$",
    r"\.dylib$",
    r"\.dll$",
    r"\.a$",
    r"\.lib$",
    # SuperCollider plugins shipped by overtone
    r"\.scx$",
)


def _compile(extensions: Optional[Iterable[str | Pattern[str]]]) -> list[Pattern[str]]:
    if extensions is None:
        extensions = NATIVE_EXTENSIONS
    return [re.compile(pattern) for pattern in extensions]


def _strip_prefix(entry: PurePosixPath, prefix: PurePosixPath) -> Optional[PurePosixPath]:
    if entry.parts[: len(prefix.parts)] != prefix.parts:
        return None
    return PurePosixPath(*entry.parts[len(prefix.parts) :])


def _extract_from_jar(
    jar_path: Path,
    native_prefix: str,
    native_dir: Path,
    extensions: Sequence[Pattern[str]],
) -> list[Path]:
    prefix = PurePosixPath(native_prefix)
    if native_prefix in ("", "."):
        prefix = PurePosixPath()
    extracted: list[Path] = []
    with zipfile.ZipFile(jar_path) as archive:
        for info in archive.infolist():
            if info.is_dir() or not any(pattern.search(info.filename) for pattern in extensions):
                continue
            relative = _strip_prefix(PurePosixPath(info.filename), prefix)
            if relative is None or not relative.parts:
                continue
            if relative.is_absolute() or ".." in relative.parts:
                raise UnsafeArchiveEntryError(jar_path, info.filename)
            target = native_dir.joinpath(*relative.parts)
            target.parent.mkdir(parents=True, exist_ok=True)
            with archive.open(info) as source, target.open("wb") as handle:
                shutil.copyfileobj(source, handle)
            logger.debug("Extracted %s!%s to %s", jar_path, info.filename, target)
            extracted.append(target)
    return extracted


def _extract_native(native_prefix: str, path: Path, native_dir: Path, extensions: Sequence[Pattern[str]]) -> list[Path]:
    if not path.is_file() or not path.name.endswith(".jar"):
        return []
    return _extract_from_jar(path, native_prefix, native_dir, extensions)


def extract_native_dependencies(
    out_path: Path | str,
    dependencies: Iterable[ResolvedDependency],
    options: Optional[NativeOptions] = None,
) -> Path:
    """Extract native libraries from the jars of dependencies with a declared prefix.

    Only dependencies listed in ``native_prefixes`` are opened. Matching
    entries must start with the dependency's prefix, which is dropped from
    their location under ``native_path``.
    """

    options = options or NativeOptions()
    dependencies = list(dependencies)
    out_path = as_path(out_path)
    native_dir = resolve_path(options.native_path, out_path)
    extensions = _compile(options.native_extensions)

    if not options.allow_unstable_deps:
        check_for_unstable_deps(dependencies, allow_local=True)

    native_dir.mkdir(parents=True, exist_ok=True)
    count = 0
    for dependency in dependencies:
        native_prefix = options.native_prefixes.get(dependency.lib)
        if native_prefix is None:
            continue
        for path in dependency.paths:
            count += len(_extract_native(native_prefix, path, native_dir, extensions))
    logger.info("Extracted %d native libraries to %s", count, native_dir)
    return out_path


def extract_native_dependencies_from_file(
    out_path: Path | str,
    file_path: Path | str,
    *,
    native_path: Path | str = "lib",
    native_prefix: str = "",
    native_extensions: Optional[Iterable[str | Pattern[str]]] = None,
) -> Path:
    """Extract native libraries from one jar file under ``native_prefix``."""

    out_path = as_path(out_path)
    native_dir = resolve_path(native_path, out_path)
    native_dir.mkdir(parents=True, exist_ok=True)
    _extract_native(native_prefix, as_path(file_path), native_dir, _compile(native_extensions))
    return out_path
