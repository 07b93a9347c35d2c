"""Exceptions raised by artifact assembly."""

from __future__ import annotations

from pathlib import Path, PurePath
from typing import Optional


class AssemblyError(RuntimeError):
    """Base class for assembly failures surfaced to callers."""


class ConfigError(AssemblyError):
    """Raised when a configuration or dependency file cannot be used."""


class InvalidOutputPathError(AssemblyError):
    """Raised when an output path does not carry the expected extension."""

    def __init__(self, out_path: Path | str, extension: str) -> None:
        self.out_path = str(out_path)
        self.extension = extension
        super().__init__(f"out-path must be a {extension} file (got '{out_path}')")


class NonMavenDependencyError(AssemblyError):
    """Raised when a dependency has no Maven version to describe it with."""

    def __init__(self, lib: str, kind: str) -> None:
        self.lib = lib
        self.kind = kind
        super().__init__(
            f"All dependencies must be Maven-based ('{lib}' is a {kind} dependency). "
            "Use allow_all_dependencies to build the jar anyway; only Maven-based "
            "dependencies are described in the generated metadata."
        )


class UnstableDependencyError(AssemblyError):
    """Raised when a snapshot or local dependency is used without opting in."""

    def __init__(self, lib: str, reason: str) -> None:
        self.lib = lib
        self.reason = reason
        super().__init__(
            f"Unstable dependency '{lib}' ({reason}). Use allow_unstable_deps to continue anyway."
        )


class DuplicatePathError(AssemblyError):
    """Raised when two copies target the same relative path of a bundle."""

    def __init__(
        self,
        *,
        source: Path,
        destination: Path,
        relative_path: PurePath,
        previous_source: Optional[Path] = None,
    ) -> None:
        self.source = source
        self.destination = destination
        self.relative_path = relative_path
        self.previous_source = previous_source
        message = f"Duplicate path '{relative_path.as_posix()}': {source} -> {destination}"
        if previous_source is not None:
            message += f" (already copied from {previous_source})"
        super().__init__(message)


class UnsafeArchiveEntryError(AssemblyError):
    """Raised when an archive entry would be extracted outside its target folder."""

    def __init__(self, archive: Path, entry: str) -> None:
        self.archive = archive
        self.entry = entry
        super().__init__(f"Refusing to extract '{entry}' from {archive}: path escapes the output folder")


class ToolNotFoundError(AssemblyError):
    """Raised when an external tool cannot be located."""


class ToolExecutionError(AssemblyError):
    """Raised when an external tool exits with a non-zero status."""

    def __init__(self, tool: str, returncode: int, stderr: str) -> None:
        self.tool = tool
        self.returncode = returncode
        self.stderr = stderr
        detail = stderr.strip() or "no output"
        super().__init__(f"{tool} exited with status {returncode}: {detail}")


class FileSystemLoopError(OSError):
    """Reported to tree visitors when a followed link leads back to an ancestor directory."""

    def __init__(self, path: Path) -> None:
        super().__init__(f"File system loop detected at {path}")
        self.filename = str(path)
