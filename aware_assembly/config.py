"""Loading of assembly configuration and resolved dependency files."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, List, Mapping

import yaml
from pydantic import ValidationError

from .errors import ConfigError
from .schemas.dependencies import ResolvedDependency
from .schemas.options import AssemblyConfig

logger = logging.getLogger(__name__)


def _read_document(path: Path) -> Any:
    if not path.exists():
        raise ConfigError(f"File not found: {path}")
    text = path.read_text(encoding="utf-8")
    try:
        if path.suffix == ".json":
            return json.loads(text)
        return yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigError(f"Unable to parse {path}: {exc}") from exc


def load_config(path: Path) -> AssemblyConfig:
    """Load an ``AssemblyConfig`` from YAML or JSON."""

    payload = _read_document(path) or {}
    if not isinstance(payload, Mapping):
        raise ConfigError(f"Configuration in {path} must be a mapping")
    try:
        return AssemblyConfig.model_validate(payload)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration in {path}:\n{exc}") from exc


def _dependency_entries(payload: Any, path: Path) -> List[Mapping[str, Any]]:
    if payload is None:
        return []
    if isinstance(payload, list):
        return payload
    if isinstance(payload, Mapping):
        # resolver output keyed by lib
        return [{"lib": lib, **(coords or {})} for lib, coords in payload.items()]
    raise ConfigError(f"Dependencies in {path} must be a list or a mapping")


def load_dependencies(path: Path) -> List[ResolvedDependency]:
    """Load resolved dependencies; relative paths resolve against the file's folder."""

    base = path.parent
    dependencies: List[ResolvedDependency] = []
    for entry in _dependency_entries(_read_document(path), path):
        if not isinstance(entry, Mapping):
            raise ConfigError(f"Dependency entries in {path} must be mappings (got {entry!r})")
        data = dict(entry)
        data["paths"] = [str(base / value) for value in data.get("paths") or []]
        try:
            dependencies.append(ResolvedDependency.model_validate(data))
        except ValidationError as exc:
            raise ConfigError(f"Invalid dependency in {path}:\n{exc}") from exc
    logger.debug("Loaded %d dependencies from %s", len(dependencies), path)
    return dependencies
