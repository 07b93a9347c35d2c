"""Launch scripts for standalone bundles."""

from __future__ import annotations

import logging
import stat
from pathlib import Path
from typing import Optional, Sequence

from .manifest import munge
from .schemas.options import OsType, ScriptOptions
from .utils import as_path, resolve_path, write_text

logger = logging.getLogger(__name__)


def script_path(os_type: OsType) -> Path:
    if os_type is OsType.WINDOWS_LIKE:
        return Path("bin/run.bat")
    return Path("bin/run.sh")


def script_header(os_type: OsType) -> str:
    if os_type is OsType.WINDOWS_LIKE:
        return "@echo off\n"
    return "#!/bin/sh\n"


def classpath_separator(os_type: OsType) -> str:
    if os_type is OsType.WINDOWS_LIKE:
        return ";"
    return ":"


def file_separator(os_type: OsType) -> str:
    if os_type is OsType.WINDOWS_LIKE:
        return "\\"
    return "/"


def script_newline(os_type: OsType) -> Optional[str]:
    if os_type is OsType.WINDOWS_LIKE:
        return "\r\n"
    return None


def default_classpath(os_type: OsType) -> str:
    fs = file_separator(os_type)
    return f"..{classpath_separator(os_type)}..{fs}lib{fs}*"


def default_command(out_path: Path, os_type: OsType) -> str:
    """``java``, or the trimmed runtime's launcher when one was built into the bundle."""

    if (out_path / "runtime" / "bin" / "java").exists():
        fs = file_separator(os_type)
        return fs.join(["..", "runtime", "bin", "java"])
    return "java"


def format_jvm_opts(jvm_opts: Sequence[str]) -> str:
    formatted = " ".join(jvm_opts)
    return f" {formatted}" if formatted else ""


def bin_script(out_path: Path | str, main: str, options: Optional[ScriptOptions] = None) -> Path:
    """Write the start script of the bundle under ``out_path`` and return its path.

    ``main`` is mangled the same way as the manifest's ``Main-Class``.
    """

    options = options or ScriptOptions()
    os_type = options.os_type
    out_path = as_path(out_path)
    target = resolve_path(options.script_path or script_path(os_type), out_path)
    header = options.script_header if options.script_header is not None else script_header(os_type)
    command = options.command or default_command(out_path, os_type)
    classpath = options.classpath or default_classpath(os_type)
    args = f" {' '.join(options.args)}" if options.args else ""

    content = f"{header}{command} -cp {classpath}{format_jvm_opts(options.jvm_opts)} {munge(main)}{args}\n"
    write_text(target, content, newline=script_newline(os_type))
    if os_type is OsType.POSIX_LIKE:
        target.chmod(target.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    logger.info("Launch script written to %s", target)
    return target
