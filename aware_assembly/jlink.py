"""Trimmed Java runtime creation through the ``jlink`` tool."""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from .errors import ToolExecutionError, ToolNotFoundError
from .schemas.options import JlinkOptions
from .utils import as_path, resolve_path

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class JlinkResult:
    runtime_path: Path
    command: List[str]
    returncode: int
    stdout: str
    stderr: str


def _java_home(options: JlinkOptions) -> Optional[Path]:
    if options.java_home is not None:
        return options.java_home
    value = os.environ.get("JAVA_HOME")
    return Path(value) if value else None


def find_jlink(java_home: Optional[Path]) -> str:
    if java_home is not None:
        for name in ("jlink", "jlink.exe"):
            candidate = java_home / "bin" / name
            if candidate.is_file():
                return str(candidate)
    executable = shutil.which("jlink")
    if executable is None:
        raise ToolNotFoundError("JLink tool not found; set JAVA_HOME or add jlink to PATH")
    return executable


def jlink_command(executable: str, runtime_path: Path, module_path: str, options: JlinkOptions) -> List[str]:
    return [
        executable,
        "--module-path",
        module_path,
        "--add-modules",
        ",".join(options.modules),
        "--output",
        str(runtime_path),
        *options.jlink_options,
    ]


def jlink(out_path: Path | str, options: Optional[JlinkOptions] = None) -> JlinkResult:
    """Build a trimmed runtime under ``out_path`` (``runtime`` by default)."""

    options = options or JlinkOptions()
    java_home = _java_home(options)
    executable = find_jlink(java_home)
    runtime_path = resolve_path(options.jlink_path, as_path(out_path))
    module_path = options.module_path
    if module_path is None:
        # <java_home>/bin/jlink
        home = java_home or Path(executable).resolve().parent.parent
        module_path = str(home / "jmods")

    cmd = jlink_command(executable, runtime_path, module_path, options)
    logger.debug("Running %s", " ".join(cmd))
    proc = subprocess.run(cmd, stdout=subprocess.PIPE, stderr=subprocess.PIPE, text=True, check=False)
    if proc.stdout:
        logger.info("jlink: %s", proc.stdout.strip())
    if proc.stderr:
        logger.warning("jlink: %s", proc.stderr.strip())
    if proc.returncode != 0:
        raise ToolExecutionError("jlink", proc.returncode, proc.stderr)
    return JlinkResult(
        runtime_path=runtime_path,
        command=cmd,
        returncode=proc.returncode,
        stdout=proc.stdout,
        stderr=proc.stderr,
    )
