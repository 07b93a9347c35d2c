from __future__ import annotations

import os
import shutil
import stat
import sys
from pathlib import Path, PurePath

import pytest

from aware_assembly.bundle import BundleSession, bundle, copy_directory, copy_file, make_out_path
from aware_assembly.errors import DuplicatePathError, UnstableDependencyError
from aware_assembly.schemas import BundleOptions, ResolvedDependency


def _dep(lib: str, *paths: Path, version: str | None = "1.0.0", kind: str = "mvn") -> ResolvedDependency:
    return ResolvedDependency(lib=lib, version=version, kind=kind, paths=paths)


def test_bundle_copies_directories_and_jars(tmp_path: Path, write_file, create_jar) -> None:
    write_file(tmp_path / "a" / "src" / "foo" / "bar.clj", "(ns foo.bar)")
    jar_path = create_jar(tmp_path / "b.jar", {"b/core.class": b"\xca\xfe"})
    out = tmp_path / "out"

    result = bundle(
        out,
        [_dep("A", tmp_path / "a" / "src", kind="git", version=None), _dep("B", jar_path)],
        BundleOptions(root=tmp_path),
    )

    assert result == out.resolve()
    assert (out / "foo" / "bar.clj").read_text(encoding="utf-8") == "(ns foo.bar)"
    assert (out / "lib" / "b.jar").read_bytes() == jar_path.read_bytes()


def test_duplicate_relative_paths_are_rejected(tmp_path: Path, write_file) -> None:
    write_file(tmp_path / "one" / "shared" / "x.txt", "one")
    write_file(tmp_path / "two" / "shared" / "x.txt", "two")
    dependencies = [
        _dep("one", tmp_path / "one", kind="git", version=None),
        _dep("two", tmp_path / "two", kind="git", version=None),
    ]

    with pytest.raises(DuplicatePathError) as excinfo:
        bundle(tmp_path / "out", dependencies)

    error = excinfo.value
    assert error.relative_path == PurePath("shared/x.txt")
    assert error.previous_source == tmp_path / "one" / "shared" / "x.txt"
    assert error.source == tmp_path / "two" / "shared" / "x.txt"
    assert "shared/x.txt" in str(error)


def test_disjoint_dependencies_are_both_copied(tmp_path: Path, write_file) -> None:
    write_file(tmp_path / "one" / "one.txt", "first")
    write_file(tmp_path / "two" / "two.txt", "second")
    out = tmp_path / "out"

    bundle(
        out,
        [
            _dep("one", tmp_path / "one", kind="git", version=None),
            _dep("two", tmp_path / "two", kind="git", version=None),
        ],
    )

    assert (out / "one.txt").read_text(encoding="utf-8") == "first"
    assert (out / "two.txt").read_text(encoding="utf-8") == "second"


def test_jars_with_the_same_name_conflict(tmp_path: Path, create_jar) -> None:
    first = create_jar(tmp_path / "repo1" / "util.jar", {"a.txt": "a"})
    second = create_jar(tmp_path / "repo2" / "util.jar", {"b.txt": "b"})

    with pytest.raises(DuplicatePathError) as excinfo:
        bundle(tmp_path / "out", [_dep("g/one", first), _dep("g/two", second)])

    assert excinfo.value.relative_path == PurePath("lib/util.jar")


def test_project_paths_are_copied_after_dependencies(tmp_path: Path, write_file) -> None:
    write_file(tmp_path / "dep" / "config.edn", "dep")
    write_file(tmp_path / "resources" / "config.edn", "project")

    with pytest.raises(DuplicatePathError) as excinfo:
        bundle(
            tmp_path / "out",
            [_dep("dep", tmp_path / "dep", kind="git", version=None)],
            BundleOptions(root=tmp_path, paths=[Path("resources")]),
        )

    assert excinfo.value.source == tmp_path / "resources" / "config.edn"


def test_project_paths_are_copied(tmp_path: Path, write_file) -> None:
    write_file(tmp_path / "classes" / "app" / "Main.class", "bytes")
    out = tmp_path / "out"

    bundle(out, [], BundleOptions(root=tmp_path, paths=[Path("classes")]))

    assert (out / "app" / "Main.class").read_text(encoding="utf-8") == "bytes"
    assert (out / "lib").is_dir()


def test_excluded_libs_and_missing_paths_are_skipped(tmp_path: Path, write_file, create_jar) -> None:
    write_file(tmp_path / "one" / "shared.txt", "one")
    write_file(tmp_path / "two" / "shared.txt", "two")
    jar_path = create_jar(tmp_path / "kept.jar", {"k.txt": "k"})
    out = tmp_path / "out"

    bundle(
        out,
        [
            _dep("one", tmp_path / "one", kind="git", version=None),
            _dep("two", tmp_path / "two", kind="git", version=None),
            _dep("kept", jar_path, tmp_path / "missing.jar"),
        ],
        BundleOptions(excluded_libs={"two"}),
    )

    assert (out / "shared.txt").read_text(encoding="utf-8") == "one"
    assert (out / "lib" / "kept.jar").exists()
    assert not (out / "lib" / "missing.jar").exists()


def test_custom_libs_path(tmp_path: Path, create_jar) -> None:
    jar_path = create_jar(tmp_path / "dep.jar", {"x": "x"})
    out = tmp_path / "out"

    bundle(out, [_dep("dep", jar_path)], BundleOptions(libs_path=Path("jars")))

    assert (out / "jars" / "dep.jar").exists()
    assert not (out / "lib").exists()


def test_unstable_dependencies_fail_before_copying(tmp_path: Path, write_file) -> None:
    write_file(tmp_path / "local" / "x.txt")
    snapshot = _dep("snap", tmp_path / "local", version="1.0.0-SNAPSHOT")
    local = _dep("local", tmp_path / "local", kind="local", version=None)

    with pytest.raises(UnstableDependencyError) as excinfo:
        bundle(tmp_path / "out", [snapshot])
    assert excinfo.value.lib == "snap"

    with pytest.raises(UnstableDependencyError):
        bundle(tmp_path / "out", [local])
    assert not (tmp_path / "out").exists()

    bundle(tmp_path / "out", [local], BundleOptions(allow_unstable_deps=True))
    assert (tmp_path / "out" / "x.txt").exists()


def test_directory_copy_keeps_timestamps(tmp_path: Path, write_file) -> None:
    source = tmp_path / "src"
    copied_file = write_file(source / "pkg" / "data.txt", "data")
    os.utime(copied_file, (1_500_000_000, 1_500_000_000))
    os.utime(source / "pkg", (1_600_000_000, 1_600_000_000))

    copy_directory(source, tmp_path / "out")

    assert (tmp_path / "out" / "pkg" / "data.txt").stat().st_mtime == 1_500_000_000
    assert (tmp_path / "out" / "pkg").stat().st_mtime == 1_600_000_000


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX permissions")
def test_directory_copy_keeps_permissions(tmp_path: Path, write_file) -> None:
    source = tmp_path / "src"
    write_file(source / "private" / "secret.txt", "s")
    (source / "private").chmod(0o700)

    copy_directory(source, tmp_path / "out")

    assert stat.S_IMODE((tmp_path / "out" / "private").stat().st_mode) == 0o700
    assert (tmp_path / "out" / "private" / "secret.txt").read_text(encoding="utf-8") == "s"


def test_directory_vanishing_before_its_attributes_are_copied(
    tmp_path: Path, write_file, monkeypatch: pytest.MonkeyPatch
) -> None:
    source = tmp_path / "src"
    write_file(source / "gone" / "data.txt", "data")
    write_file(source / "kept.txt", "kept")
    bundle_module = sys.modules["aware_assembly.bundle"]
    original_copy_file = bundle_module.copy_file

    def copy_then_remove(source_path, destination, session=None):
        copied = original_copy_file(source_path, destination, session)
        if source_path.name == "data.txt":
            shutil.rmtree(source / "gone")
        return copied

    monkeypatch.setattr(bundle_module, "copy_file", copy_then_remove)

    copy_directory(source, tmp_path / "out")

    assert (tmp_path / "out" / "gone" / "data.txt").read_text(encoding="utf-8") == "data"
    assert (tmp_path / "out" / "kept.txt").read_text(encoding="utf-8") == "kept"


def test_copy_without_session_overwrites(tmp_path: Path, write_file) -> None:
    first = write_file(tmp_path / "a.txt", "a")
    second = write_file(tmp_path / "b.txt", "b")
    target = tmp_path / "out" / "target.txt"

    copy_file(first, target)
    copy_file(second, target)

    assert target.read_text(encoding="utf-8") == "b"


def test_session_registry_tracks_sources(tmp_path: Path, write_file) -> None:
    session = BundleSession(out_path=tmp_path / "out")
    source = write_file(tmp_path / "a.txt", "a")

    copy_file(source, tmp_path / "out" / "nested" / "a.txt", session)

    assert session.copied == {PurePath("nested/a.txt"): source}
    with pytest.raises(DuplicatePathError):
        copy_file(source, tmp_path / "out" / "nested" / "a.txt", session)


def test_make_out_path() -> None:
    assert make_out_path("org.example/app", "1.0.0") == Path("target/app-1.0.0")
    assert make_out_path("app", "1.0.0", "standalone") == Path("target/app-1.0.0-standalone")
