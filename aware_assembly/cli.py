"""Command-line entry point for jar and bundle assembly."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence

from dotenv import load_dotenv

from .bundle import bundle, make_out_path
from .config import load_config, load_dependencies
from .errors import AssemblyError
from .jar import jar
from .jlink import jlink
from .manifest import make_manifest
from .native import extract_native_dependencies, extract_native_dependencies_from_file
from .schemas.dependencies import MavenCoords
from .schemas.options import AssemblyConfig, OsType
from .scripts import bin_script


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    workspace = _resolve_workspace(args.workspace_root)
    _load_local_env(workspace)

    handlers = {
        "manifest": _handle_manifest,
        "jar": _handle_jar,
        "bundle": _handle_bundle,
        "extract-native": _handle_extract_native,
        "bin-script": _handle_bin_script,
        "jlink": _handle_jlink,
    }
    try:
        config = load_config(_resolve_path(args.config, workspace)) if args.config else AssemblyConfig()
        payload = handlers[args.command](args, config, workspace)
    except (AssemblyError, ValueError) as exc:
        print(str(exc), file=sys.stderr)
        return 2

    _print_json(payload)
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="aware-assembly", description="Jar and bundle assembly helpers.")
    parser.add_argument("--config", help="YAML or JSON file with assembly options.")
    parser.add_argument("--workspace-root")
    parser.add_argument("--verbose", action="store_true")
    subparsers = parser.add_subparsers(dest="command", required=True)

    manifest = subparsers.add_parser("manifest", help="Render the jar manifest.")
    manifest.add_argument("--main")
    manifest.add_argument("--manifest-entry", action="append", help="Manifest entry key=value (repeatable).")

    jar_cmd = subparsers.add_parser("jar", help="Build a jar archive.")
    _add_coords_arguments(jar_cmd)
    jar_cmd.add_argument("--out-path")
    jar_cmd.add_argument("--main")
    jar_cmd.add_argument("--path", action="append", help="Source path (repeatable).")
    jar_cmd.add_argument("--manifest-entry", action="append", help="Manifest entry key=value (repeatable).")
    jar_cmd.add_argument("--dependencies", help="Resolved dependencies file.")
    jar_cmd.add_argument("--allow-all-dependencies", action="store_true", default=None)

    bundle_cmd = subparsers.add_parser("bundle", help="Copy dependencies into a standalone bundle.")
    _add_coords_arguments(bundle_cmd)
    bundle_cmd.add_argument("--out-path")
    bundle_cmd.add_argument("--dependencies", required=True, help="Resolved dependencies file.")
    bundle_cmd.add_argument("--path", action="append", help="Project path copied after dependencies (repeatable).")
    bundle_cmd.add_argument("--exclude-lib", action="append")
    bundle_cmd.add_argument("--allow-unstable-deps", action="store_true", default=None)
    bundle_cmd.add_argument("--libs-path")

    native = subparsers.add_parser("extract-native", help="Extract native libraries from jar dependencies.")
    native.add_argument("--out-path", required=True)
    source = native.add_mutually_exclusive_group(required=True)
    source.add_argument("--dependencies", help="Resolved dependencies file.")
    source.add_argument("--file", help="Single jar to extract from.")
    native.add_argument("--native-prefix", action="append", help="lib=prefix, or a bare prefix with --file.")
    native.add_argument("--native-path")
    native.add_argument("--native-extension", action="append", help="Extension regexp (repeatable).")
    native.add_argument("--allow-unstable-deps", action="store_true", default=None)

    script = subparsers.add_parser("bin-script", help="Write the bundle start script.")
    script.add_argument("--out-path", required=True)
    script.add_argument("--main", required=True)
    script.add_argument("--os-type", choices=[item.value for item in OsType])
    script.add_argument("--command", dest="script_command")
    script.add_argument("--classpath")
    script.add_argument("--jvm-opt", action="append")
    script.add_argument("--arg", action="append")

    jlink_cmd = subparsers.add_parser("jlink", help="Build a trimmed runtime into the bundle.")
    jlink_cmd.add_argument("--out-path", required=True)
    jlink_cmd.add_argument("--jlink-path")
    jlink_cmd.add_argument("--java-home")
    jlink_cmd.add_argument("--module-path")
    jlink_cmd.add_argument("--module", action="append")

    return parser


def _add_coords_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--lib", help="Library name, group/artifact.")
    parser.add_argument("--version")
    parser.add_argument("--classifier")


def _handle_manifest(args: argparse.Namespace, config: AssemblyConfig, workspace: Path) -> Dict[str, Any]:
    entries = dict(config.jar.manifest_entries)
    entries.update(_parse_key_values(args.manifest_entry, "Manifest entry"))
    main = args.main or config.jar.main
    return {"manifest": make_manifest(main, entries).decode("utf-8")}


def _handle_jar(args: argparse.Namespace, config: AssemblyConfig, workspace: Path) -> Dict[str, Any]:
    lib, coords = _resolve_coords(args, config)
    options = config.jar
    update: Dict[str, Any] = {"root": options.root or workspace}
    if args.out_path or config.out_path:
        update["out_path"] = Path(args.out_path) if args.out_path else config.out_path
    if args.main:
        update["main"] = args.main
    if args.path:
        update["paths"] = [Path(value) for value in args.path]
    if args.manifest_entry:
        update["manifest_entries"] = {
            **options.manifest_entries,
            **_parse_key_values(args.manifest_entry, "Manifest entry"),
        }
    if args.dependencies:
        update["dependencies"] = load_dependencies(_resolve_path(args.dependencies, workspace))
    if args.allow_all_dependencies is not None:
        update["allow_all_dependencies"] = args.allow_all_dependencies

    archive_path = jar(lib, coords, options.model_copy(update=update))
    return {"jar_path": str(archive_path), "logs": [f"Jar written to {archive_path}"]}


def _handle_bundle(args: argparse.Namespace, config: AssemblyConfig, workspace: Path) -> Dict[str, Any]:
    options = config.bundle
    update: Dict[str, Any] = {"root": options.root or workspace}
    if args.path:
        update["paths"] = [Path(value) for value in args.path]
    if args.exclude_lib:
        update["excluded_libs"] = set(options.excluded_libs) | set(args.exclude_lib)
    if args.allow_unstable_deps is not None:
        update["allow_unstable_deps"] = args.allow_unstable_deps
    if args.libs_path:
        update["libs_path"] = Path(args.libs_path)

    out_path = _bundle_out_path(args, config)
    dependencies = load_dependencies(_resolve_path(args.dependencies, workspace))
    result = bundle(_resolve_path(out_path, workspace), dependencies, options.model_copy(update=update))
    return {
        "out_path": str(result),
        "dependencies": [dependency.lib for dependency in dependencies],
        "logs": [f"Bundle written to {result}"],
    }


def _handle_extract_native(args: argparse.Namespace, config: AssemblyConfig, workspace: Path) -> Dict[str, Any]:
    options = config.native
    out_path = _resolve_path(args.out_path, workspace)
    native_path = Path(args.native_path) if args.native_path else options.native_path
    extensions = args.native_extension or options.native_extensions

    if args.file:
        prefixes = args.native_prefix or []
        if len(prefixes) > 1:
            raise ValueError("--file accepts a single --native-prefix")
        extract_native_dependencies_from_file(
            out_path,
            _resolve_path(args.file, workspace),
            native_path=native_path,
            native_prefix=prefixes[0] if prefixes else "",
            native_extensions=extensions,
        )
    else:
        update: Dict[str, Any] = {"native_path": native_path, "native_extensions": extensions}
        if args.native_prefix:
            update["native_prefixes"] = {
                **options.native_prefixes,
                **_parse_key_values(args.native_prefix, "Native prefix"),
            }
        if args.allow_unstable_deps is not None:
            update["allow_unstable_deps"] = args.allow_unstable_deps
        dependencies = load_dependencies(_resolve_path(args.dependencies, workspace))
        extract_native_dependencies(out_path, dependencies, options.model_copy(update=update))

    return {"out_path": str(out_path), "native_path": str(out_path / native_path)}


def _handle_bin_script(args: argparse.Namespace, config: AssemblyConfig, workspace: Path) -> Dict[str, Any]:
    options = config.script
    update: Dict[str, Any] = {}
    if args.os_type:
        update["os_type"] = OsType(args.os_type)
    if args.script_command:
        update["command"] = args.script_command
    if args.classpath:
        update["classpath"] = args.classpath
    if args.jvm_opt:
        update["jvm_opts"] = list(args.jvm_opt)
    if args.arg:
        update["args"] = list(args.arg)
    script = bin_script(_resolve_path(args.out_path, workspace), args.main, options.model_copy(update=update))
    return {"script_path": str(script)}


def _handle_jlink(args: argparse.Namespace, config: AssemblyConfig, workspace: Path) -> Dict[str, Any]:
    options = config.jlink
    update: Dict[str, Any] = {}
    if args.jlink_path:
        update["jlink_path"] = Path(args.jlink_path)
    if args.java_home:
        update["java_home"] = _resolve_path(args.java_home, workspace)
    if args.module_path:
        update["module_path"] = args.module_path
    if args.module:
        update["modules"] = list(args.module)
    result = jlink(_resolve_path(args.out_path, workspace), options.model_copy(update=update))
    return {
        "runtime_path": str(result.runtime_path),
        "command": result.command,
        "stdout": result.stdout,
        "stderr": result.stderr,
    }


def _resolve_coords(args: argparse.Namespace, config: AssemblyConfig) -> tuple[str, MavenCoords]:
    lib = args.lib or config.lib
    if args.version:
        coords = MavenCoords(version=args.version, classifier=args.classifier)
    elif config.coords is not None:
        coords = config.coords
        if args.classifier:
            coords = coords.model_copy(update={"classifier": args.classifier})
    else:
        coords = None
    if lib is None or coords is None:
        raise ValueError("A lib name and version are required (--lib/--version or the config file)")
    return lib, coords


def _bundle_out_path(args: argparse.Namespace, config: AssemblyConfig) -> Path:
    if args.out_path:
        return Path(args.out_path)
    if config.out_path is not None:
        return config.out_path
    lib, coords = _resolve_coords(args, config)
    return make_out_path(lib, coords.version, coords.classifier)


def _resolve_workspace(value: Optional[str]) -> Path:
    return Path(value).resolve() if value else Path.cwd()


def _resolve_path(value: Path | str, workspace: Path) -> Path:
    path = Path(value)
    if not path.is_absolute():
        path = workspace / path
    return path.resolve()


def _load_local_env(workspace: Path) -> None:
    """Load a workspace ``.env`` (JAVA_HOME and friends) without overriding the environment."""

    env_file = workspace / ".env"
    if env_file.exists():
        load_dotenv(env_file, override=False)


def _parse_key_values(values: Optional[Sequence[str]], label: str) -> Dict[str, str]:
    pairs: Dict[str, str] = {}
    for entry in values or ():
        if "=" not in entry:
            raise ValueError(f"{label} must be key=value (got '{entry}')")
        key, raw_value = entry.split("=", 1)
        pairs[key.strip()] = raw_value.strip()
    return pairs


def _print_json(payload: Mapping[str, object]) -> None:
    print(json.dumps(payload, indent=2, default=str))


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
