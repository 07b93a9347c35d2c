"""Jar archive assembly."""

from __future__ import annotations

import logging
import os
import shutil
import zipfile
from functools import partial
from pathlib import Path
from typing import Iterable, Optional

from .errors import InvalidOutputPathError, NonMavenDependencyError
from .manifest import MANIFEST_ENTRY, make_manifest
from .policies import default_exclusion_predicate, default_inclusion_path
from .schemas.dependencies import MavenCoords, ResolvedDependency
from .schemas.options import ExclusionPredicate, InclusionPath, JarOptions
from .utils import entry_name, lib_names, make_out_path, relativize_path, resolve_path
from .walker import FileVisitor, FileVisitResult, walk, walk_file_tree

logger = logging.getLogger(__name__)

JAR_EXTENSION = ".jar"


def make_pom_properties(lib: str, coords: MavenCoords) -> bytes:
    """Render the ``pom.properties`` descriptor for ``lib``."""

    group_id, artifact_id = lib_names(lib)
    lines = [
        "#Generated by aware-assembly",
        f"version={coords.version}",
        f"groupId={group_id}",
        f"artifactId={artifact_id}",
    ]
    return ("\n".join(lines) + "\n").encode("utf-8")


def pom_properties_entry(group_id: str, artifact_id: str) -> str:
    return f"META-INF/maven/{group_id}/{artifact_id}/pom.properties"


def check_non_maven_dependencies(dependencies: Iterable[ResolvedDependency]) -> None:
    for dependency in dependencies:
        if not dependency.is_maven:
            raise NonMavenDependencyError(dependency.lib, dependency.kind.value)


def put_jar_entry(archive: zipfile.ZipFile, path: Path, name: str) -> None:
    """Copy ``path`` into ``archive`` as ``name``, keeping its modification time."""

    info = zipfile.ZipInfo.from_file(path, arcname=name, strict_timestamps=False)
    info.compress_type = zipfile.ZIP_DEFLATED
    with path.open("rb") as source, archive.open(info, "w") as target:
        shutil.copyfileobj(source, target)


class _PathsVisitor(FileVisitor):
    """Copies a source tree into the archive relative to its own root."""

    def __init__(self, archive: zipfile.ZipFile, root_path: Path, exclusion_predicate: ExclusionPredicate) -> None:
        self.archive = archive
        self.root_path = root_path
        self.exclusion_predicate = exclusion_predicate

    def _excluded(self, path: Path) -> bool:
        return path == self.root_path or self.exclusion_predicate(self.root_path, path)

    def pre_visit_directory(self, path: Path, attrs: os.stat_result) -> FileVisitResult:
        if path != self.root_path and self.exclusion_predicate(self.root_path, path):
            logger.debug("Excluding directory %s", path)
            return FileVisitResult.SKIP_SUBTREE
        return FileVisitResult.CONTINUE

    def visit_file(self, path: Path, attrs: os.stat_result) -> FileVisitResult:
        if self._excluded(path):
            logger.debug("Excluding %s", path)
            return FileVisitResult.CONTINUE
        put_jar_entry(self.archive, path, entry_name(relativize_path(self.root_path, path)))
        return FileVisitResult.CONTINUE


def _inclusion_visitor(
    archive: zipfile.ZipFile,
    inclusion_path: InclusionPath,
    root_path: Path,
    path: Path,
    attrs: os.stat_result,
) -> None:
    name = inclusion_path(root_path, path)
    if name is None:
        return
    logger.debug("Including %s as %s", path, name)
    put_jar_entry(archive, path, name)


def jar(lib: str, coords: MavenCoords, options: Optional[JarOptions] = None) -> Path:
    """Build a jar for ``lib`` from the project paths and return its location.

    The archive starts with the manifest, then holds the files the inclusion
    policy relocates under ``META-INF``, the content of every source path
    relative to that path, and finally ``pom.properties``. Entries from
    different source paths are not checked for collisions.
    """

    options = options or JarOptions()
    root_path = (options.root or Path.cwd()).resolve()
    group_id, artifact_id = lib_names(lib)
    exclusion_predicate = options.exclusion_predicate or default_exclusion_predicate
    inclusion_path = options.inclusion_path or default_inclusion_path(group_id, artifact_id)

    if options.out_path is not None and not str(options.out_path).endswith(JAR_EXTENSION):
        raise InvalidOutputPathError(options.out_path, JAR_EXTENSION)
    out_path = options.out_path or make_out_path(artifact_id, coords.model_copy(update={"extension": "jar"}))
    out_path = resolve_path(out_path, root_path)

    if options.allow_all_dependencies:
        for dependency in options.dependencies:
            if not dependency.is_maven:
                logger.warning("Packaging non-Maven dependency %s; it is left out of the descriptor", dependency.lib)
    else:
        check_non_maven_dependencies(options.dependencies)

    manifest = make_manifest(options.main, options.manifest_entries)
    pom_properties = options.pom_properties or make_pom_properties(lib, coords)

    out_path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(out_path, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        archive.writestr(MANIFEST_ENTRY, manifest)
        walk(root_path, partial(_inclusion_visitor, archive, inclusion_path))
        for path in options.paths:
            source_root = resolve_path(path, root_path)
            walk_file_tree(source_root, _PathsVisitor(archive, source_root, exclusion_predicate))
        archive.writestr(pom_properties_entry(group_id, artifact_id), pom_properties)

    logger.info("Jar written to %s", out_path)
    return out_path
