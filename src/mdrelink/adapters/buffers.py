"""In-memory document buffers for hosts with open editors."""

from __future__ import annotations

import logging

from mdrelink.core.interfaces import CorpusProviderPort, EditSinkPort
from mdrelink.core.models import SaveEvent
from mdrelink.core.paths import NormalizedPath, normalize

logger = logging.getLogger(__name__)


class BufferStore:
    """Text of the documents currently open in the host, keyed by path."""

    def __init__(self) -> None:
        self._buffers: dict[NormalizedPath, str] = {}

    def open(self, path: str, content: str) -> None:
        """Register an open buffer (or replace its content)."""
        self._buffers[normalize(path)] = content

    def close(self, path: str) -> None:
        """Forget a buffer; the file on disk becomes authoritative again."""
        self._buffers.pop(normalize(path), None)

    def get(self, path: str) -> str | None:
        """Buffer content, or None when the document is not open."""
        return self._buffers.get(normalize(path))

    def __contains__(self, path: object) -> bool:
        return isinstance(path, str) and normalize(path) in self._buffers


class BufferedEditSink(EditSinkPort):
    """Edits open buffers in place and falls back to another sink otherwise."""

    def __init__(self, buffers: BufferStore, fallback: EditSinkPort) -> None:
        self.buffers = buffers
        self.fallback = fallback

    async def load(self, path: NormalizedPath) -> str:
        """Buffer text when open, else the fallback's text."""
        content = self.buffers.get(path)
        if content is not None:
            return content
        return await self.fallback.load(path)

    async def commit(self, path: NormalizedPath, content: str) -> None:
        """Write to the open buffer, else to the fallback."""
        if path in self.buffers:
            self.buffers.open(path, content)
            logger.debug("Updated open buffer %s", path)
            return
        await self.fallback.commit(path, content)


class BufferedCorpus(CorpusProviderPort):
    """Reads open buffers instead of disk so plans match what the sink will edit."""

    def __init__(self, buffers: BufferStore, fallback: CorpusProviderPort) -> None:
        self.buffers = buffers
        self.fallback = fallback

    async def list(self, glob_pattern: str, exclude_globs: frozenset[str]) -> list[NormalizedPath]:
        return await self.fallback.list(glob_pattern, exclude_globs)

    async def read(self, path: NormalizedPath) -> str:
        content = self.buffers.get(path)
        if content is not None:
            return content
        return await self.fallback.read(path)


class SaveTracker:
    """Pairs will-save and did-save notifications into SaveEvents.

    Hosts call :meth:`will_save` with the on-disk content before a save and
    :meth:`did_save` with the content after it. Entries are keyed by path
    and removed once paired.
    """

    def __init__(self) -> None:
        self._pending: dict[NormalizedPath, str] = {}

    def will_save(self, path: str, content_before: str) -> None:
        """Remember a document's content just before it is saved."""
        self._pending[normalize(path)] = content_before

    def did_save(self, path: str, content_after: str) -> SaveEvent | None:
        """Build the SaveEvent for a completed save, or None if none was pending."""
        normalized = normalize(path)
        content_before = self._pending.pop(normalized, None)
        if content_before is None:
            logger.debug("No pending save for %s", normalized)
            return None
        return SaveEvent(
            path=normalized,
            content_before=content_before,
            content_after=content_after,
        )

    @property
    def pending(self) -> list[NormalizedPath]:
        """Paths with a will-save but no did-save yet."""
        return sorted(self._pending)
