"""Edit executor: commits planned edits, one write per document."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable

from mdrelink.core.errors import (
    ConflictingEditError,
    ReadFailureError,
    StaleDocumentError,
    WriteFailureError,
)
from mdrelink.core.interfaces import EditSinkPort
from mdrelink.core.models import ApplyResult, ApplyStatus, Edit
from mdrelink.core.paths import NormalizedPath

logger = logging.getLogger(__name__)


def group_edits(edits: Iterable[Edit]) -> dict[NormalizedPath, list[Edit]]:
    """Group edits by document, keeping first-seen document order."""
    grouped: dict[NormalizedPath, list[Edit]] = {}
    for edit in edits:
        grouped.setdefault(edit.document, []).append(edit)
    return grouped


def check_overlaps(document: NormalizedPath, edits: list[Edit]) -> list[Edit]:
    """Return edits sorted by span start.

    Raises:
        ConflictingEditError: If any two spans overlap.
    """
    ordered = sorted(edits, key=lambda e: e.span)
    for first, second in zip(ordered, ordered[1:]):
        if second.span[0] < first.span[1]:
            raise ConflictingEditError(document, first.span, second.span)
    return ordered


def apply_to_text(content: str, edits: list[Edit]) -> str:
    """Apply one document's edits to its text, right to left.

    Raises:
        ConflictingEditError: If spans overlap.
        StaleDocumentError: If a span falls outside ``content``.
    """
    if not edits:
        return content
    ordered = check_overlaps(edits[0].document, edits)
    for edit in reversed(ordered):
        start, end = edit.span
        if not 0 <= start <= end <= len(content):
            raise StaleDocumentError(
                f"Edit span {start}-{end} outside {edit.document} ({len(content)} chars)"
            )
        content = content[:start] + edit.replacement + content[end:]
    return content


async def apply_document(
    document: NormalizedPath,
    edits: list[Edit],
    sink: EditSinkPort,
) -> ApplyResult:
    """Load, edit and commit a single document. Never raises for I/O or conflicts."""
    try:
        check_overlaps(document, edits)
        content = await sink.load(document)
        updated = apply_to_text(content, edits)
        if updated != content:
            await sink.commit(document, updated)
    except (ConflictingEditError, StaleDocumentError, ReadFailureError, WriteFailureError) as e:
        logger.warning("Edits for %s not applied: %s", document, e)
        return ApplyResult(document=document, status=ApplyStatus.FAILED, reason=str(e))

    logger.debug("Applied %d edits to %s", len(edits), document)
    return ApplyResult(document=document, status=ApplyStatus.APPLIED, edits=len(edits))


async def apply(edits: Iterable[Edit], sink: EditSinkPort) -> list[ApplyResult]:
    """Apply planned edits, concurrently across documents.

    Each document is loaded once, edited right to left so earlier offsets
    stay valid, and committed in a single write. A failing document does
    not stop the others.

    Returns:
        One ApplyResult per edited document, in first-seen order.
    """
    grouped = group_edits(edits)
    if not grouped:
        return []
    return list(
        await asyncio.gather(
            *(apply_document(document, doc_edits, sink) for document, doc_edits in grouped.items())
        )
    )
