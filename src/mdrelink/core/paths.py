"""Path normalization and POSIX relative-path algebra.

Every path that enters the system goes through :func:`normalize` once, so
the rest of the code only compares and joins slash-delimited strings.
"""

from __future__ import annotations

import fnmatch
import posixpath
import re

NormalizedPath = str
"""Absolute, slash-separated, case-preserving path string."""

_DUPLICATE_SLASHES = re.compile(r"(?<!^)/{2,}")


def normalize(raw_path: str) -> NormalizedPath:
    """Canonicalize a host path into slash-delimited form.

    Backslashes become ``/``, duplicate slashes collapse and ``.``/``..``
    segments are folded syntactically. Case is preserved and a trailing
    slash is neither added nor removed. Idempotent.
    """
    if not raw_path:
        return raw_path

    path = raw_path.replace("\\", "/")
    trailing = path.endswith("/")
    path = _DUPLICATE_SLASHES.sub("/", path)
    path = posixpath.normpath(path)
    if trailing and not path.endswith("/"):
        path += "/"
    return path


def dirname(path: NormalizedPath) -> NormalizedPath:
    """Directory portion of a normalized path."""
    return posixpath.dirname(path.rstrip("/")) or "/"


def join(base: NormalizedPath, *parts: str) -> NormalizedPath:
    """Join and re-normalize path segments."""
    return normalize(posixpath.join(base, *parts))


def relative(from_dir: NormalizedPath, to: NormalizedPath) -> str:
    """POSIX relative path from a directory to a target path."""
    return posixpath.relpath(to, from_dir)


def is_within(path: NormalizedPath, directory: NormalizedPath) -> bool:
    """True when ``path`` is a strict descendant of ``directory``."""
    prefix = directory.rstrip("/") + "/"
    return path.startswith(prefix) and path != prefix


def matches_glob(path: NormalizedPath, pattern: str, root: NormalizedPath | None = None) -> bool:
    """Match a path against a glob, relative to ``root`` when one is given.

    ``**/`` prefixes also match at the top level, so ``**/drafts/**``
    excludes a ``drafts`` directory sitting directly under the root.
    """
    candidate = path
    if root is not None and is_within(path, root):
        candidate = relative(root, path)
    anchored = f"/{candidate}"
    if fnmatch.fnmatchcase(candidate, pattern) or fnmatch.fnmatchcase(anchored, pattern):
        return True
    if pattern.startswith("**/"):
        return fnmatch.fnmatchcase(candidate, pattern[3:])
    return False


def expand_braces(pattern: str) -> list[str]:
    """Expand one level of ``{a,b}`` groups, e.g. ``**/*.{md,mdx}``."""
    match = re.search(r"\{([^{}]*)\}", pattern)
    if match is None:
        return [pattern]
    head, tail = pattern[: match.start()], pattern[match.end() :]
    expanded: list[str] = []
    for option in match.group(1).split(","):
        expanded.extend(expand_braces(f"{head}{option}{tail}"))
    return expanded
