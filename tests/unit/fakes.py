"""Fake implementations and builders for testing the article store."""

import asyncio
import copy
from datetime import UTC, datetime
from typing import Any

from smart_reader.models.article import Article

STORED_RECORD = {
    "id": "stored1",
    "title": "Stored Article",
    "url": "https://example.com/stored",
    "domain": "example.com",
    "addedAt": "2024-01-02T03:04:05.000Z",
    "status": "unread",
    "content": "<p>Stored body</p>",
    "contentChunkIds": [],
    "siteName": "Example",
}


class FakeBlobStore:
    """In-memory fake for the host blob capability.

    Records every read and write, and can be told to fail either.
    Each call yields to the event loop once, like real host I/O would.
    """

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self.data = copy.deepcopy(data)
        self.reads = 0
        self.writes: list[dict[str, Any]] = []
        self.fail_reads = False
        self.fail_writes = False

    async def read_blob(self) -> dict[str, Any] | None:
        await asyncio.sleep(0)
        self.reads += 1
        if self.fail_reads:
            msg = "FakeBlobStore: read failed"
            raise OSError(msg)
        return copy.deepcopy(self.data)

    async def write_blob(self, data: dict[str, Any]) -> None:
        await asyncio.sleep(0)
        if self.fail_writes:
            msg = "FakeBlobStore: write failed"
            raise OSError(msg)
        self.writes.append(copy.deepcopy(data))
        self.data = copy.deepcopy(data)

    @property
    def records(self) -> list[dict[str, Any]]:
        """Persisted article records."""
        assert self.data is not None
        return self.data["articles"]  # type: ignore[no-any-return]

    @property
    def chunks(self) -> dict[str, str]:
        """Persisted chunk map."""
        assert self.data is not None
        return self.data["contentChunks"]  # type: ignore[no-any-return]


class FakeNotifier:
    """Collects notices instead of showing them."""

    def __init__(self) -> None:
        self.notices: list[tuple[str, str, bool]] = []

    def notify(self, title: str, description: str, *, error: bool = False) -> None:
        self.notices.append((title, description, error))

    @property
    def errors(self) -> list[tuple[str, str, bool]]:
        return [n for n in self.notices if n[2]]


def make_article(
    article_id: str = "art1",
    *,
    url: str = "https://example.com/one",
    title: str = "First Article",
    content: str = "<p>Hello world</p>",
    **kwargs: Any,
) -> Article:
    """Create an Article with fixed, predictable fields."""
    return Article(
        id=article_id,
        title=title,
        url=url,
        domain="example.com",
        added_at=datetime(2024, 5, 1, 12, 30, tzinfo=UTC),
        content=content,
        **kwargs,
    )
