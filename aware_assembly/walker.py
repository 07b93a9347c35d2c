"""Recursive file tree traversal with pluggable visitors.

Links are followed. A directory that resolves to one of its own ancestors,
or a link the OS cannot resolve because it points back at itself, is
reported to ``FileVisitor.visit_file_failed`` as a ``FileSystemLoopError``;
an entry that disappears between listing and visiting is reported as a
``FileNotFoundError``. The default visitor skips both and re-raises every
other error, which aborts the walk.
"""

from __future__ import annotations

import errno
import logging
import os
import stat
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Iterator, List, Optional, Tuple

from .errors import FileSystemLoopError

logger = logging.getLogger(__name__)

FileKey = Tuple[int, int]
EntryCallback = Callable[[Path, Path, os.stat_result], None]


class FileVisitResult(str, Enum):
    CONTINUE = "continue"
    SKIP_SUBTREE = "skip-subtree"
    TERMINATE = "terminate"


class FileVisitor:
    """Base visitor; subclasses override the hooks they care about."""

    def pre_visit_directory(self, path: Path, attrs: os.stat_result) -> FileVisitResult:
        return FileVisitResult.CONTINUE

    def visit_file(self, path: Path, attrs: os.stat_result) -> FileVisitResult:
        return FileVisitResult.CONTINUE

    def post_visit_directory(self, path: Path) -> FileVisitResult:
        return FileVisitResult.CONTINUE

    def visit_file_failed(self, path: Path, exc: OSError) -> FileVisitResult:
        if isinstance(exc, (FileSystemLoopError, FileNotFoundError)):
            logger.debug("Skipping %s: %s", path, exc)
            return FileVisitResult.SKIP_SUBTREE
        raise exc


@dataclass(slots=True)
class _DirectoryFrame:
    path: Path
    key: FileKey
    children: Iterator[Path]


def _file_key(attrs: os.stat_result) -> FileKey:
    return attrs.st_dev, attrs.st_ino


def _enter(path: Path, stack: List[_DirectoryFrame], visitor: FileVisitor) -> FileVisitResult:
    try:
        attrs = path.stat()
    except OSError as exc:
        if exc.errno == errno.ELOOP:
            exc = FileSystemLoopError(path)
        return visitor.visit_file_failed(path, exc)

    if not stat.S_ISDIR(attrs.st_mode):
        return visitor.visit_file(path, attrs)

    key = _file_key(attrs)
    if any(frame.key == key for frame in stack):
        return visitor.visit_file_failed(path, FileSystemLoopError(path))

    try:
        children = sorted(path.iterdir())
    except OSError as exc:
        return visitor.visit_file_failed(path, exc)

    result = visitor.pre_visit_directory(path, attrs)
    if result is FileVisitResult.CONTINUE:
        stack.append(_DirectoryFrame(path=path, key=key, children=iter(children)))
    elif result is FileVisitResult.SKIP_SUBTREE:
        return FileVisitResult.CONTINUE
    return result


def walk_file_tree(start: Path | str, visitor: FileVisitor) -> Path:
    """Walk ``start`` depth-first, calling ``visitor`` hooks; returns ``start``."""

    start = Path(start)
    stack: List[_DirectoryFrame] = []
    if _enter(start, stack, visitor) is FileVisitResult.TERMINATE:
        return start

    while stack:
        frame = stack[-1]
        child: Optional[Path] = next(frame.children, None)
        if child is None:
            stack.pop()
            if visitor.post_visit_directory(frame.path) is FileVisitResult.TERMINATE:
                break
            continue
        if _enter(child, stack, visitor) is FileVisitResult.TERMINATE:
            break
    return start


class _CallbackVisitor(FileVisitor):
    def __init__(self, root: Path, callback: EntryCallback) -> None:
        self.root = root
        self.callback = callback

    def visit_file(self, path: Path, attrs: os.stat_result) -> FileVisitResult:
        self.callback(self.root, path, attrs)
        return FileVisitResult.CONTINUE


def walk(root: Path | str, callback: EntryCallback) -> Path:
    """Call ``callback(root, path, attrs)`` for every file under ``root``."""

    root = Path(root)
    return walk_file_tree(root, _CallbackVisitor(root, callback))
