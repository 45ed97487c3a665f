"""Shared test fixtures."""

import pytest

from tests.unit.fakes import STORED_RECORD, FakeBlobStore, FakeNotifier


@pytest.fixture
def blob() -> FakeBlobStore:
    """Return an empty fake blob store."""
    return FakeBlobStore()


@pytest.fixture
def populated_blob() -> FakeBlobStore:
    """Return a fake blob store holding one inline article and host settings."""
    return FakeBlobStore(
        {
            "articles": [dict(STORED_RECORD)],
            "contentChunks": {},
            "settings": {"savePath": "Reading"},
        }
    )


@pytest.fixture
def notifier() -> FakeNotifier:
    return FakeNotifier()
