from __future__ import annotations

import json
from pathlib import Path

import pytest

from aware_assembly.config import load_config, load_dependencies
from aware_assembly.errors import ConfigError
from aware_assembly.schemas import DependencyKind, OsType


def test_load_yaml_config(tmp_path: Path, write_file) -> None:
    path = write_file(
        tmp_path / "assembly.yaml",
        """
lib: org.example/app
coords:
  version: 1.0.0
jar:
  main: app.core
  paths: [src, resources]
  manifest_entries:
    Built-By: ci
    natives:
      Sealed: "true"
bundle:
  excluded_libs: [org.clojure/clojure]
  libs_path: jars
native:
  native_prefixes:
    org.lwjgl/lwjgl: linux/x64
script:
  os_type: windows-like
  jvm_opts: [-Xmx1g]
""",
    )

    config = load_config(path)

    assert config.lib == "org.example/app"
    assert config.coords is not None and config.coords.version == "1.0.0"
    assert config.jar.paths == [Path("src"), Path("resources")]
    assert config.jar.manifest_entries["natives"] == {"Sealed": "true"}
    assert config.bundle.excluded_libs == {"org.clojure/clojure"}
    assert config.bundle.libs_path == Path("jars")
    assert config.native.native_prefixes == {"org.lwjgl/lwjgl": "linux/x64"}
    assert config.script.os_type is OsType.WINDOWS_LIKE


def test_unknown_config_keys_are_rejected(tmp_path: Path, write_file) -> None:
    path = write_file(tmp_path / "assembly.yaml", "bundle:\n  libs: jars\n")
    with pytest.raises(ConfigError):
        load_config(path)


def test_missing_config_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        load_config(tmp_path / "absent.yaml")


def test_load_dependency_list(tmp_path: Path, write_file) -> None:
    path = write_file(
        tmp_path / "deps.json",
        json.dumps(
            [
                {"lib": "org.clojure/clojure", "version": "1.11.1", "paths": ["m2/clojure-1.11.1.jar"]},
                {"lib": "local/lib", "kind": "local", "paths": [str(tmp_path / "abs")]},
            ]
        ),
    )

    dependencies = load_dependencies(path)

    assert [dependency.lib for dependency in dependencies] == ["org.clojure/clojure", "local/lib"]
    assert dependencies[0].paths == (tmp_path / "m2" / "clojure-1.11.1.jar",)
    assert dependencies[1].kind is DependencyKind.LOCAL
    assert dependencies[1].paths == (tmp_path / "abs",)


def test_load_dependency_mapping(tmp_path: Path, write_file) -> None:
    path = write_file(
        tmp_path / "deps.yaml",
        """
org.clojure/clojure:
  version: 1.11.1
  paths: [clojure.jar]
my/git-dep:
  kind: git
  paths: [gitlibs/src]
""",
    )

    dependencies = load_dependencies(path)

    assert dependencies[0].version == "1.11.1"
    assert dependencies[1].kind is DependencyKind.GIT
    assert dependencies[1].paths == (tmp_path / "gitlibs" / "src",)


def test_invalid_dependency_entries(tmp_path: Path, write_file) -> None:
    with pytest.raises(ConfigError):
        load_dependencies(write_file(tmp_path / "deps.yaml", "- not-a-mapping\n"))
    with pytest.raises(ConfigError):
        load_dependencies(write_file(tmp_path / "kind.yaml", "- lib: x\n  kind: svn\n"))
