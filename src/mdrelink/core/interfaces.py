"""Port interfaces for mdrelink (hexagonal architecture)."""

from __future__ import annotations

from abc import ABC, abstractmethod

from mdrelink.core.paths import NormalizedPath


class CorpusProviderPort(ABC):
    """Port for discovering and reading tracked Markdown documents."""

    @abstractmethod
    async def list(self, glob_pattern: str, exclude_globs: frozenset[str]) -> list[NormalizedPath]:
        """List documents matching a glob.

        Args:
            glob_pattern: Include pattern, e.g. ``**/*.{md,mdx}``.
            exclude_globs: Patterns whose matches are left out.

        Returns:
            Normalized paths in a stable order.
        """

    @abstractmethod
    async def read(self, path: NormalizedPath) -> str:
        """Read a document's UTF-8 text.

        Raises:
            ReadFailureError: If the document cannot be read or decoded.
        """


class EditSinkPort(ABC):
    """Port for the authoritative content of a document (open buffer or disk)."""

    @abstractmethod
    async def load(self, path: NormalizedPath) -> str:
        """Return the document's current text.

        Raises:
            ReadFailureError: If the content cannot be loaded.
        """

    @abstractmethod
    async def commit(self, path: NormalizedPath, content: str) -> None:
        """Replace the document's text in one all-or-nothing write.

        Raises:
            WriteFailureError: If the write fails.
        """
