"""Shared test fixtures for mdrelink."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from mdrelink.core.models import Options
from tests.helpers import MemorySink

ROOT = "/p"


@pytest.fixture()
def default_options() -> Callable[[str], Options]:
    """Options lookup returning defaults rooted at /p."""
    options = Options(project_root=ROOT)
    return lambda path: options


@pytest.fixture()
def memory_sink() -> MemorySink:
    """Empty in-memory edit sink."""
    return MemorySink()
