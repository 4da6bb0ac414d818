"""Sandbox root confinement and file enumeration for the built-in tools."""

from __future__ import annotations

import os
import re
from pathlib import Path


class SandboxPathError(ValueError):
    """A path resolved outside the sandbox root."""


def resolve_sandbox_path(root: Path, relative_path: str) -> Path:
    """Resolve *relative_path* against *root*, refusing anything outside it.

    Absolute paths and ``..`` segments are allowed only if the resolved
    result is still under root. Symlinks are resolved before the check.
    Nothing is read or written here.
    """
    base = root.resolve()
    resolved = (base / relative_path).resolve()
    if not resolved.is_relative_to(base):
        raise SandboxPathError(f"Path {relative_path} resolves outside {root}")
    return resolved


def walk_files(root: Path) -> list[Path]:
    """All regular files under *root*, sorted.

    Symlinked directories are not followed, and symlinked files whose target
    resolves outside *root* are left out.
    """
    if not root.exists():
        return []
    if root.is_file():
        return [root]
    base = root.resolve()
    found: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames.sort()
        for name in sorted(filenames):
            path = Path(dirpath) / name
            if path.resolve().is_relative_to(base):
                found.append(path)
    return found


def glob_to_regex(pattern: str) -> str:
    """Translate the simplified glob syntax to an anchored regex string.

    ``**/`` matches zero or more directories, ``**`` anything, ``*`` within a
    segment, ``?`` one character. ``[...]`` is passed through as a character
    class; everything else is literal.
    """
    out: list[str] = []
    i = 0
    n = len(pattern)
    while i < n:
        c = pattern[i]
        if pattern.startswith("**/", i):
            out.append("(?:.*/)?")
            i += 3
        elif pattern.startswith("**", i):
            out.append(".*")
            i += 2
        elif c == "*":
            out.append("[^/]*")
            i += 1
        elif c == "?":
            out.append("[^/]")
            i += 1
        elif c in "[]":
            out.append(c)
            i += 1
        else:
            out.append(re.escape(c))
            i += 1
    return "^" + "".join(out) + "$"


def glob_files(root: Path, pattern: str) -> list[Path]:
    """Files under *root* whose root-relative POSIX path matches *pattern*.

    Listing is advisory: a pattern that does not compile matches every file.
    """
    all_files = walk_files(root)
    normalized = pattern.strip() or "*"
    if normalized == "**":
        return all_files
    try:
        regex = re.compile(glob_to_regex(normalized))
    except re.error:
        return all_files
    return [f for f in all_files if regex.match(f.relative_to(root).as_posix())]


def relative_display(root: Path, path: Path) -> str:
    return path.relative_to(root).as_posix()
