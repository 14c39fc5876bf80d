"""Test doubles and builders shared across the suite."""

from __future__ import annotations

from mdrelink.core.errors import ReadFailureError, WriteFailureError
from mdrelink.core.executor import apply_to_text, group_edits
from mdrelink.core.interfaces import EditSinkPort
from mdrelink.core.models import Document, Edit
from mdrelink.core.paths import NormalizedPath


class MemorySink(EditSinkPort):
    """Edit sink over a dict of path -> content, recording every commit."""

    def __init__(
        self,
        files: dict[str, str] | None = None,
        fail_writes: set[str] | None = None,
    ) -> None:
        self.files: dict[str, str] = dict(files or {})
        self.fail_writes = fail_writes or set()
        self.commits: list[str] = []

    async def load(self, path: NormalizedPath) -> str:
        if path not in self.files:
            raise ReadFailureError(f"No such document: {path}")
        return self.files[path]

    async def commit(self, path: NormalizedPath, content: str) -> None:
        if path in self.fail_writes:
            raise WriteFailureError(f"Disk full: {path}")
        self.commits.append(path)
        self.files[path] = content


def make_corpus(files: dict[str, str]) -> list[Document]:
    """Build a corpus snapshot from a path -> content mapping."""
    return [Document(path=path, content=content) for path, content in files.items()]


def apply_edits(files: dict[str, str], edits: list[Edit]) -> dict[str, str]:
    """Apply edits to a copy of ``files`` and return the result."""
    result = dict(files)
    for document, doc_edits in group_edits(edits).items():
        result[document] = apply_to_text(result[document], doc_edits)
    return result
