"""Pytest configuration for hide-and-seek tests."""

import pytest

from fakes import DictConfigSource, FakeEditorHost, MemoryStore


@pytest.fixture
def host():
    return FakeEditorHost()


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def config_source():
    return DictConfigSource(pane_policy="right", peek_duration_ms=50)
