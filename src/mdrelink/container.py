"""Dependency injection container for mdrelink."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from mdrelink.config import MdrelinkConfig
from mdrelink.core.interfaces import CorpusProviderPort, EditSinkPort
from mdrelink.options import OptionsRegistry


@dataclass
class Container:
    """DI container holding all ports and adapters."""

    config: MdrelinkConfig
    corpus: CorpusProviderPort
    sink: EditSinkPort
    options: OptionsRegistry

    @staticmethod
    def create_default(config: MdrelinkConfig, root: str | Path) -> Container:
        """Create a container with on-disk adapters rooted at ``root``."""
        from mdrelink.adapters.filesystem import FileEditSink, FilesystemCorpus

        corpus = FilesystemCorpus(root)
        return Container(
            config=config,
            corpus=corpus,
            sink=FileEditSink(),
            options=OptionsRegistry(corpus.root, config),
        )

    @staticmethod
    def create_for_testing(
        config: MdrelinkConfig | None = None,
        corpus: CorpusProviderPort | None = None,
        sink: EditSinkPort | None = None,
        root: str = "/project",
    ) -> Container:
        """Create a container with test/mock adapters.

        All parameters are optional. Provide mocks for the components
        you want to control in tests.
        """
        config = config or MdrelinkConfig()

        # Use stubs that raise if accidentally called without being mocked
        class StubCorpus(CorpusProviderPort):
            async def list(self, glob_pattern: str, exclude_globs: frozenset[str]) -> list:
                raise NotImplementedError("Provide a mock corpus")

            async def read(self, path: str) -> str:
                raise NotImplementedError("Provide a mock corpus")

        class StubSink(EditSinkPort):
            async def load(self, path: str) -> str:
                raise NotImplementedError("Provide a mock sink")

            async def commit(self, path: str, content: str) -> None:
                raise NotImplementedError("Provide a mock sink")

        return Container(
            config=config,
            corpus=corpus or StubCorpus(),
            sink=sink or StubSink(),
            options=OptionsRegistry(root, config),
        )
