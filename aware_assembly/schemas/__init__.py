"""Schema definitions for assembly inputs and options."""

from .dependencies import DependencyKind, MavenCoords, ResolvedDependency
from .options import (
    AssemblyConfig,
    BundleOptions,
    JarOptions,
    JlinkOptions,
    NativeOptions,
    OsType,
    ScriptOptions,
)

__all__ = [
    "AssemblyConfig",
    "BundleOptions",
    "DependencyKind",
    "JarOptions",
    "JlinkOptions",
    "MavenCoords",
    "NativeOptions",
    "OsType",
    "ResolvedDependency",
    "ScriptOptions",
]
