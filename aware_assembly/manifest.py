"""Jar manifest formatting and parsing."""

from __future__ import annotations

import getpass
import platform
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from . import __version__

MANIFEST_VERSION_LINE = "Manifest-Version: 1.0\n"
MANIFEST_ENTRY = "META-INF/MANIFEST.MF"

# Manifest lines are limited to 72 bytes; chunks of 70 leave room for the
# continuation space and the line break.
LINE_CHUNK = 70

_CLASS_NAME_CHARS = {
    "-": "_",
    ":": "_COLON_",
    "+": "_PLUS_",
    ">": "_GT_",
    "<": "_LT_",
    "=": "_EQ_",
    "~": "_TILDE_",
    "!": "_BANG_",
    "@": "_CIRCA_",
    "#": "_SHARP_",
    "'": "_SINGLEQUOTE_",
    '"': "_DOUBLEQUOTE_",
    "%": "_PERCENT_",
    "^": "_CARET_",
    "&": "_AMPERSAND_",
    "*": "_STAR_",
    "|": "_BAR_",
    "{": "_LBRACE_",
    "}": "_RBRACE_",
    "[": "_LBRACK_",
    "]": "_RBRACK_",
    "/": "_SLASH_",
    "\\": "_BSLASH_",
    "?": "_QMARK_",
}


def munge(name: str) -> str:
    """Mangle an entry point name into a valid JVM class name."""

    return "".join(_CLASS_NAME_CHARS.get(char, char) for char in name)


def default_manifest() -> Dict[str, Any]:
    return {
        "Created-By": f"aware-assembly {__version__}",
        "Built-By": getpass.getuser(),
        "Build-Python": platform.python_version(),
    }


def _is_section(value: Any) -> bool:
    return isinstance(value, Mapping) or (
        isinstance(value, (list, tuple)) and not isinstance(value, (str, bytes))
    )


def place_sections_last(entries: Mapping[str, Any]) -> List[Tuple[str, Any]]:
    """Order entries so that sections follow every main attribute."""

    return sorted(entries.items(), key=lambda item: _is_section(item[1]))


def _section_items(value: Any) -> Iterable[Tuple[Any, Any]]:
    if isinstance(value, Mapping):
        return value.items()
    return value


def format_manifest_entry(key: Any, value: Any) -> str:
    if _is_section(value):
        lines = [f"\nName: {key}\n"]
        lines.extend(format_manifest_entry(sub_key, sub_value) for sub_key, sub_value in _section_items(value))
        return "".join(lines)
    line = f"{key}: {value}"
    chunks = [line[index : index + LINE_CHUNK] for index in range(0, len(line), LINE_CHUNK)]
    return "\n ".join(chunks) + "\n"


def make_manifest(main: Optional[str] = None, manifest_entries: Optional[Mapping[str, Any]] = None) -> bytes:
    """Render manifest bytes from the default attributes, ``main`` and overrides."""

    manifest = default_manifest()
    if main:
        manifest["Main-Class"] = munge(str(main))
    manifest.update(dict(manifest_entries or {}))
    body = "".join(format_manifest_entry(key, value) for key, value in place_sections_last(manifest))
    return (MANIFEST_VERSION_LINE + body).encode("utf-8")


@dataclass(slots=True)
class Manifest:
    """Parsed manifest: main attributes plus named sections."""

    main_attributes: Dict[str, str] = field(default_factory=dict)
    sections: Dict[str, Dict[str, str]] = field(default_factory=dict)


def _logical_lines(text: str) -> Iterable[str]:
    current: Optional[str] = None
    for raw_line in text.split("\n"):
        line = raw_line.rstrip("\r")
        if line.startswith(" ") and current is not None:
            current += line[1:]
            continue
        if current is not None:
            yield current
        current = line
    if current is not None:
        yield current


def parse_manifest(data: bytes) -> Manifest:
    """Parse manifest bytes back into attributes, joining continuation lines."""

    manifest = Manifest()
    target = manifest.main_attributes
    for line in _logical_lines(data.decode("utf-8")):
        if not line:
            target = None
            continue
        key, sep, value = line.partition(": ")
        if not sep:
            raise ValueError(f"Malformed manifest line: {line!r}")
        if target is None:
            if key != "Name":
                raise ValueError(f"Manifest section must start with Name (got {key!r})")
            target = manifest.sections.setdefault(value, {})
            continue
        target[key] = value
    return manifest
