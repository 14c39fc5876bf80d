"""Tests for open-buffer routing and save tracking."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from mdrelink.adapters.buffers import BufferedCorpus, BufferedEditSink, BufferStore, SaveTracker
from mdrelink.core.models import SaveEvent


class TestBufferStore:
    """Tests for BufferStore."""

    def test_open_get_close(self) -> None:
        buffers = BufferStore()
        buffers.open("C:\\proj\\a.md", "text")

        assert "C:/proj/a.md" in buffers
        assert buffers.get("C:/proj/a.md") == "text"

        buffers.close("C:/proj/a.md")
        assert buffers.get("C:/proj/a.md") is None
        assert "C:/proj/a.md" not in buffers


class TestBufferedEditSink:
    """Tests for BufferedEditSink."""

    @pytest.mark.asyncio
    async def test_open_buffer_is_authoritative(self) -> None:
        buffers = BufferStore()
        buffers.open("/p/a.md", "unsaved [x](b.md)")
        fallback = AsyncMock()
        sink = BufferedEditSink(buffers, fallback)

        assert await sink.load("/p/a.md") == "unsaved [x](b.md)"
        await sink.commit("/p/a.md", "unsaved [x](c.md)")

        assert buffers.get("/p/a.md") == "unsaved [x](c.md)"
        fallback.load.assert_not_awaited()
        fallback.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_closed_document_goes_to_fallback(self) -> None:
        fallback = AsyncMock()
        fallback.load.return_value = "on disk"
        sink = BufferedEditSink(BufferStore(), fallback)

        assert await sink.load("/p/a.md") == "on disk"
        await sink.commit("/p/a.md", "edited")

        fallback.commit.assert_awaited_once_with("/p/a.md", "edited")


class TestSaveTracker:
    """Tests for SaveTracker."""

    def test_pairs_will_and_did_save(self) -> None:
        tracker = SaveTracker()
        tracker.will_save("/p/guide.md", "## Old\n")

        event = tracker.did_save("/p/guide.md", "## New\n")

        assert event == SaveEvent(
            path="/p/guide.md", content_before="## Old\n", content_after="## New\n"
        )
        assert tracker.pending == []

    def test_did_save_without_will_save(self) -> None:
        assert SaveTracker().did_save("/p/guide.md", "x") is None

    def test_paths_are_normalized(self) -> None:
        tracker = SaveTracker()
        tracker.will_save("C:\\proj\\guide.md", "a")
        event = tracker.did_save("C:/proj/guide.md", "b")
        assert event is not None
        assert event.path == "C:/proj/guide.md"

    def test_other_documents_stay_pending(self) -> None:
        tracker = SaveTracker()
        tracker.will_save("/p/a.md", "a")
        tracker.will_save("/p/b.md", "b")

        tracker.did_save("/p/a.md", "a2")

        assert tracker.pending == ["/p/b.md"]


class TestBufferedCorpus:
    """Tests for BufferedCorpus."""

    @pytest.mark.asyncio
    async def test_reads_open_buffer_first(self) -> None:
        buffers = BufferStore()
        buffers.open("/p/a.md", "unsaved")
        fallback = AsyncMock()
        fallback.read.return_value = "on disk"
        fallback.list.return_value = ["/p/a.md", "/p/b.md"]
        corpus = BufferedCorpus(buffers, fallback)

        assert await corpus.list("**/*.md", frozenset()) == ["/p/a.md", "/p/b.md"]
        assert await corpus.read("/p/a.md") == "unsaved"
        assert await corpus.read("/p/b.md") == "on disk"
        fallback.read.assert_awaited_once_with("/p/b.md")
