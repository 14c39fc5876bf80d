"""On-disk corpus provider and edit sink.

Writes are atomic: content goes to a temp file in the same directory and
is moved over the original with ``os.replace``, so a cancelled or failed
commit never leaves a half-written document.
"""

from __future__ import annotations

import asyncio
import logging
import os
import tempfile
from pathlib import Path

from mdrelink.core.errors import ReadFailureError, WriteFailureError
from mdrelink.core.interfaces import CorpusProviderPort, EditSinkPort
from mdrelink.core.paths import NormalizedPath, expand_braces, matches_glob, normalize

logger = logging.getLogger(__name__)


def _read_text(path: NormalizedPath) -> str:
    try:
        with open(path, encoding="utf-8", newline="") as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise ReadFailureError(f"Cannot read {path}: {e}") from e


class FilesystemCorpus(CorpusProviderPort):
    """Lists and reads Markdown documents under a project root."""

    def __init__(self, root: str | Path) -> None:
        self.root = normalize(str(Path(root).expanduser().resolve()))

    async def list(self, glob_pattern: str, exclude_globs: frozenset[str]) -> list[NormalizedPath]:
        """Recursive glob under the root, with ``{a,b}`` groups and excludes applied."""
        return await asyncio.to_thread(self._list_sync, glob_pattern, exclude_globs)

    def _list_sync(self, glob_pattern: str, exclude_globs: frozenset[str]) -> list[NormalizedPath]:
        root = Path(self.root)
        found: set[NormalizedPath] = set()
        for pattern in expand_braces(glob_pattern):
            for match in root.glob(pattern):
                if not match.is_file():
                    continue
                path = normalize(str(match))
                if any(matches_glob(path, glob, self.root) for glob in exclude_globs):
                    continue
                found.add(path)
        return sorted(found)

    async def read(self, path: NormalizedPath) -> str:
        """Read a document as UTF-8."""
        return await asyncio.to_thread(_read_text, path)


class FileEditSink(EditSinkPort):
    """Edit sink writing straight to files on disk."""

    async def load(self, path: NormalizedPath) -> str:
        """Read the file's current text."""
        return await asyncio.to_thread(_read_text, path)

    async def commit(self, path: NormalizedPath, content: str) -> None:
        """Atomically replace the file's text."""
        await asyncio.to_thread(self._write_sync, path, content)

    def _write_sync(self, path: NormalizedPath, content: str) -> None:
        target = Path(path)
        try:
            fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.")
            try:
                with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                    f.write(content)
                if target.exists():
                    os.chmod(tmp_name, target.stat().st_mode)
                os.replace(tmp_name, target)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise WriteFailureError(f"Cannot write {path}: {e}") from e
        logger.debug("Wrote %s", path)
