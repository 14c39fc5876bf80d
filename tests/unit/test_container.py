"""Tests for the DI container."""

from __future__ import annotations

from pathlib import Path

import pytest

from mdrelink.adapters.filesystem import FileEditSink, FilesystemCorpus
from mdrelink.config import MdrelinkConfig
from mdrelink.container import Container
from mdrelink.core.paths import normalize


class TestContainer:
    """Tests for Container factories."""

    def test_create_default(self, tmp_path: Path) -> None:
        container = Container.create_default(MdrelinkConfig(), tmp_path)

        assert isinstance(container.corpus, FilesystemCorpus)
        assert isinstance(container.sink, FileEditSink)
        assert container.options.root == normalize(str(tmp_path.resolve()))

    @pytest.mark.asyncio
    async def test_testing_stubs_raise(self) -> None:
        container = Container.create_for_testing()

        with pytest.raises(NotImplementedError, match="Provide a mock corpus"):
            await container.corpus.read("/project/a.md")
        with pytest.raises(NotImplementedError, match="Provide a mock sink"):
            await container.sink.load("/project/a.md")

    def test_testing_root(self) -> None:
        assert Container.create_for_testing(root="/repo").options.root == "/repo"
