"""Jar and standalone bundle assembly for JVM projects."""

__version__ = "0.1.0"
from .bundle import BundleSession, bundle, copy_directory, copy_file
from .errors import (
    AssemblyError,
    ConfigError,
    DuplicatePathError,
    InvalidOutputPathError,
    NonMavenDependencyError,
    ToolExecutionError,
    ToolNotFoundError,
    UnsafeArchiveEntryError,
    UnstableDependencyError,
)
from .jar import jar, make_pom_properties
from .jlink import JlinkResult, jlink
from .manifest import Manifest, make_manifest, parse_manifest
from .native import NATIVE_EXTENSIONS, extract_native_dependencies, extract_native_dependencies_from_file
from .schemas import (
    AssemblyConfig,
    BundleOptions,
    JarOptions,
    JlinkOptions,
    MavenCoords,
    NativeOptions,
    OsType,
    ResolvedDependency,
    ScriptOptions,
)
from .scripts import bin_script
from .walker import FileVisitResult, FileVisitor, walk, walk_file_tree

__all__ = [
    "__version__",
    "AssemblyConfig",
    "AssemblyError",
    "BundleOptions",
    "BundleSession",
    "ConfigError",
    "DuplicatePathError",
    "FileVisitResult",
    "FileVisitor",
    "InvalidOutputPathError",
    "JarOptions",
    "JlinkOptions",
    "JlinkResult",
    "Manifest",
    "MavenCoords",
    "NATIVE_EXTENSIONS",
    "NativeOptions",
    "NonMavenDependencyError",
    "OsType",
    "ResolvedDependency",
    "ScriptOptions",
    "ToolExecutionError",
    "ToolNotFoundError",
    "UnsafeArchiveEntryError",
    "UnstableDependencyError",
    "bin_script",
    "bundle",
    "copy_directory",
    "copy_file",
    "extract_native_dependencies",
    "extract_native_dependencies_from_file",
    "jar",
    "jlink",
    "make_manifest",
    "make_pom_properties",
    "parse_manifest",
    "walk",
    "walk_file_tree",
]
