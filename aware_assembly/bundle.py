"""Standalone bundle assembly.

Dependencies are laid out in an output directory: jar files are copied to a
libs folder, directory dependencies are copied to the output root. Every
relative path may be written once per bundle; a second write raises
``DuplicatePathError`` so that dependency trees never overwrite each other.
"""

from __future__ import annotations

import logging
import os
import shutil
from dataclasses import dataclass, field
from pathlib import Path, PurePath
from typing import Dict, Iterable, Optional

from .errors import DuplicatePathError, UnstableDependencyError
from .schemas.dependencies import MavenCoords, ResolvedDependency
from .schemas.options import BundleOptions
from .utils import as_path, lib_names, make_out_path as _make_out_path, resolve_path
from .walker import FileVisitor, FileVisitResult, walk_file_tree

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class BundleSession:
    """Output root and the relative paths written so far in one bundle run."""

    out_path: Path
    copied: Dict[PurePath, Path] = field(default_factory=dict)

    def register(self, source: Path, destination: Path) -> None:
        try:
            relative_path: PurePath = destination.relative_to(self.out_path)
        except ValueError:
            # absolute libs folder outside the bundle root
            relative_path = destination
        previous = self.copied.get(relative_path)
        if previous is not None:
            raise DuplicatePathError(
                source=source,
                destination=destination,
                relative_path=relative_path,
                previous_source=previous,
            )
        self.copied[relative_path] = source


def copy_file(source: Path | str, destination: Path | str, session: Optional[BundleSession] = None) -> Path:
    """Copy one file with its attributes, recording it in ``session`` when given."""

    source = as_path(source)
    destination = as_path(destination)
    if session is not None:
        session.register(source, destination)
    destination.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy2(source, destination)
    return destination


class _DirectoryCopyVisitor(FileVisitor):
    def __init__(self, root_path: Path, target: Path, session: Optional[BundleSession]) -> None:
        self.root_path = root_path
        self.target = target
        self.session = session

    def _target_for(self, path: Path) -> Path:
        return self.target / path.relative_to(self.root_path)

    def pre_visit_directory(self, path: Path, attrs: os.stat_result) -> FileVisitResult:
        self._target_for(path).mkdir(parents=True, exist_ok=True)
        return FileVisitResult.CONTINUE

    def visit_file(self, path: Path, attrs: os.stat_result) -> FileVisitResult:
        copy_file(path, self._target_for(path), self.session)
        return FileVisitResult.CONTINUE

    def post_visit_directory(self, path: Path) -> FileVisitResult:
        # children are written by now, so the copied time and mode stick
        try:
            shutil.copystat(path, self._target_for(path))
        except FileNotFoundError:
            logger.debug("Source directory %s vanished before its attributes were copied", path)
        return FileVisitResult.CONTINUE


def copy_directory(source: Path | str, target: Path | str, session: Optional[BundleSession] = None) -> Path:
    """Copy the tree under ``source`` into ``target``, keeping relative paths."""

    source = as_path(source)
    target = as_path(target)
    walk_file_tree(source, _DirectoryCopyVisitor(source, target, session))
    return target


def copy_dependency(dependency: ResolvedDependency, session: BundleSession, libs_path: Path) -> None:
    for path in dependency.paths:
        if not path.exists():
            logger.debug("Skipping missing path %s of %s", path, dependency.lib)
            continue
        if path.is_dir():
            copy_directory(path, session.out_path, session)
        elif path.suffix == ".jar":
            copy_file(path, resolve_path(libs_path, session.out_path) / path.name, session)


def check_for_unstable_deps(dependencies: Iterable[ResolvedDependency], *, allow_local: bool = False) -> None:
    for dependency in dependencies:
        if dependency.is_snapshot:
            raise UnstableDependencyError(dependency.lib, f"snapshot version {dependency.version}")
        if dependency.is_local and not allow_local:
            raise UnstableDependencyError(dependency.lib, "local dependency")


def make_out_path(lib: str, version: str, classifier: Optional[str] = None) -> Path:
    """Default bundle root ``target/<artifact>-<version>[-classifier]``."""

    _, artifact_id = lib_names(lib)
    return _make_out_path(artifact_id, MavenCoords(version=version, classifier=classifier))


def bundle(
    out_path: Path | str,
    dependencies: Iterable[ResolvedDependency],
    options: Optional[BundleOptions] = None,
) -> Path:
    """Copy the resolved dependencies and the project paths into ``out_path``."""

    options = options or BundleOptions()
    dependencies = list(dependencies)
    root_path = options.root or Path.cwd()
    out_path = resolve_path(out_path, root_path).resolve()

    if not options.allow_unstable_deps:
        check_for_unstable_deps(dependencies)

    resolve_path(options.libs_path, out_path).mkdir(parents=True, exist_ok=True)

    session = BundleSession(out_path=out_path)
    for dependency in dependencies:
        if dependency.lib in options.excluded_libs:
            logger.debug("Excluding %s from bundle", dependency.lib)
            continue
        copy_dependency(dependency, session, options.libs_path)

    project = ResolvedDependency(
        lib="project",
        kind="local",
        paths=tuple(resolve_path(path, root_path) for path in options.paths),
    )
    copy_dependency(project, session, options.libs_path)

    logger.info("Bundle written to %s (%d files)", out_path, len(session.copied))
    return out_path
