"""Inclusion and exclusion policies for archive assembly.

An exclusion predicate answers ``(root, path) -> bool``; an inclusion path
answers ``(root, path) -> Optional[str]`` with the archive entry a file should
be copied to, or ``None`` to leave it out.
"""

from __future__ import annotations

import re
from functools import partial
from pathlib import Path
from typing import Optional, Pattern

from .schemas.options import ExclusionPredicate, InclusionPath
from .utils import entry_name, relativize_path

_POM_PATTERN = re.compile(r"^pom\.xml$")
_DEPS_PATTERN = re.compile(r"^deps\.edn$")
_README_PATTERN = re.compile(r"^readme(.*)$", re.IGNORECASE | re.DOTALL)
_LICENSE_PATTERN = re.compile(r"^license(.*)$", re.IGNORECASE | re.DOTALL)


def dotfiles_pred(root_path: Path, path: Path) -> bool:
    return path.name.startswith(".")


def emacs_backups_pred(root_path: Path, path: Path) -> bool:
    return path.name.endswith("~") or path.name.startswith("#")


def default_exclusion_predicate(root_path: Path, path: Path) -> bool:
    """Skip dot-files and editor backup files."""

    return dotfiles_pred(root_path, path) or emacs_backups_pred(root_path, path)


def _matches(pattern: Pattern[str], root_path: Path, path: Path) -> bool:
    if path.is_dir():
        return False
    return pattern.fullmatch(entry_name(relativize_path(root_path, path))) is not None


def pom_path(group_id: str, artifact_id: str, root_path: Path, path: Path) -> Optional[str]:
    if _matches(_POM_PATTERN, root_path, path):
        return f"META-INF/maven/{group_id}/{artifact_id}/pom.xml"
    return None


def deps_path(group_id: str, artifact_id: str, root_path: Path, path: Path) -> Optional[str]:
    if _matches(_DEPS_PATTERN, root_path, path):
        return f"META-INF/badigeon/{group_id}/{artifact_id}/deps.edn"
    return None


def readme_path(group_id: str, artifact_id: str, root_path: Path, path: Path) -> Optional[str]:
    if _matches(_README_PATTERN, root_path, path):
        return f"META-INF/badigeon/{group_id}/{artifact_id}/{path.name}"
    return None


def license_path(group_id: str, artifact_id: str, root_path: Path, path: Path) -> Optional[str]:
    if _matches(_LICENSE_PATTERN, root_path, path):
        return f"META-INF/badigeon/{group_id}/{artifact_id}/{path.name}"
    return None


def first_match(*strategies: InclusionPath) -> InclusionPath:
    """Compose strategies; the first non-``None`` answer wins."""

    def decide(root_path: Path, path: Path) -> Optional[str]:
        for strategy in strategies:
            target = strategy(root_path, path)
            if target is not None:
                return target
        return None

    return decide


def default_inclusion_path(group_id: str, artifact_id: str) -> InclusionPath:
    """Project descriptor, deps file, README and LICENSE files under ``META-INF``."""

    return first_match(
        partial(pom_path, group_id, artifact_id),
        partial(deps_path, group_id, artifact_id),
        partial(readme_path, group_id, artifact_id),
        partial(license_path, group_id, artifact_id),
    )
