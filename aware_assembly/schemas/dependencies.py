"""Pydantic models describing resolved dependencies."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class DependencyKind(str, Enum):
    MVN = "mvn"
    LOCAL = "local"
    GIT = "git"


class MavenCoords(BaseModel):
    version: str
    classifier: Optional[str] = None
    extension: Optional[str] = None

    model_config = ConfigDict(extra="forbid", frozen=True)


class ResolvedDependency(BaseModel):
    """One library and the files it contributes, as returned by the resolver."""

    lib: str
    version: Optional[str] = Field(default=None, description="Maven version, absent for local and git dependencies.")
    kind: DependencyKind = DependencyKind.MVN
    paths: Tuple[Path, ...] = ()

    model_config = ConfigDict(extra="forbid", frozen=True)

    @property
    def is_snapshot(self) -> bool:
        return self.version is not None and self.version.upper().endswith("-SNAPSHOT")

    @property
    def is_local(self) -> bool:
        return self.kind is DependencyKind.LOCAL

    @property
    def is_maven(self) -> bool:
        return self.kind is DependencyKind.MVN and self.version is not None
