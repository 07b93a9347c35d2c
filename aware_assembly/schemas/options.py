"""Pydantic models for assembly options."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Optional, Set, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from .dependencies import MavenCoords, ResolvedDependency

ExclusionPredicate = Callable[[Path, Path], bool]
InclusionPath = Callable[[Path, Path], Optional[str]]
ManifestValue = Union[str, Dict[str, str], List[Tuple[str, str]]]

DEFAULT_JLINK_OPTIONS = ["--strip-debug", "--no-man-pages", "--no-header-files", "--compress=2"]


class OsType(str, Enum):
    POSIX_LIKE = "posix-like"
    WINDOWS_LIKE = "windows-like"


class JarOptions(BaseModel):
    root: Optional[Path] = Field(default=None, description="Project root, defaults to the working directory.")
    out_path: Optional[Path] = None
    main: Optional[str] = Field(default=None, description="Entry point written as Main-Class.")
    manifest_entries: Dict[str, ManifestValue] = Field(default_factory=dict)
    paths: List[Path] = Field(default_factory=lambda: [Path("src")])
    dependencies: List[ResolvedDependency] = Field(default_factory=list)
    exclusion_predicate: Optional[ExclusionPredicate] = None
    inclusion_path: Optional[InclusionPath] = None
    allow_all_dependencies: bool = False
    pom_properties: Optional[bytes] = None

    model_config = ConfigDict(extra="forbid")


class BundleOptions(BaseModel):
    root: Optional[Path] = Field(default=None, description="Project root used to resolve relative paths.")
    paths: List[Path] = Field(default_factory=list, description="Project source paths copied after dependencies.")
    excluded_libs: Set[str] = Field(default_factory=set)
    allow_unstable_deps: bool = False
    libs_path: Path = Path("lib")

    model_config = ConfigDict(extra="forbid")


class NativeOptions(BaseModel):
    native_path: Path = Path("lib")
    native_prefixes: Dict[str, str] = Field(default_factory=dict)
    native_extensions: Optional[List[str]] = Field(
        default=None, description="Regular expressions matched against entry names; defaults to NATIVE_EXTENSIONS."
    )
    allow_unstable_deps: bool = False

    model_config = ConfigDict(extra="forbid")


class ScriptOptions(BaseModel):
    os_type: OsType = OsType.POSIX_LIKE
    script_path: Optional[Path] = None
    script_header: Optional[str] = None
    command: Optional[str] = None
    classpath: Optional[str] = None
    jvm_opts: List[str] = Field(default_factory=list)
    args: List[str] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")


class JlinkOptions(BaseModel):
    jlink_path: Path = Path("runtime")
    java_home: Optional[Path] = None
    module_path: Optional[str] = None
    modules: List[str] = Field(default_factory=lambda: ["java.base"])
    jlink_options: List[str] = Field(default_factory=lambda: list(DEFAULT_JLINK_OPTIONS))

    model_config = ConfigDict(extra="forbid")


class AssemblyConfig(BaseModel):
    """Options for every assembly command, as loaded from a config file."""

    lib: Optional[str] = None
    coords: Optional[MavenCoords] = None
    out_path: Optional[Path] = None
    jar: JarOptions = Field(default_factory=JarOptions)
    bundle: BundleOptions = Field(default_factory=BundleOptions)
    native: NativeOptions = Field(default_factory=NativeOptions)
    script: ScriptOptions = Field(default_factory=ScriptOptions)
    jlink: JlinkOptions = Field(default_factory=JlinkOptions)

    model_config = ConfigDict(extra="forbid")
