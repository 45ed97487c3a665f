"""Article store: record-oriented CRUD over the host data blob."""

import asyncio
from collections.abc import Sequence
from dataclasses import replace
from types import TracebackType
from typing import Any, Self

from loguru import logger

from smart_reader.config import (
    ARTICLES_KEY,
    CONTENT_CHUNK_SIZE,
    CONTENT_CHUNKS_KEY,
    CONTENT_PREVIEW_LENGTH,
)
from smart_reader.core.storage.chunks import assign_chunk_ids, split_content
from smart_reader.core.storage.records import (
    chunked_preview,
    error_record,
    normalize_saved_content,
    normalize_updated_content,
    parse_record,
    serialize_article,
)
from smart_reader.errors import ArticleNotFoundError, StoreError
from smart_reader.models.article import ARTICLE_STATUSES, Article, ArticleStatus
from smart_reader.protocols import BlobStoreProtocol


def _build_index(articles: Sequence[Article]) -> dict[str, int]:
    """Map article id to its position; the first occurrence wins."""
    index: dict[str, int] = {}
    for position, article in enumerate(articles):
        index.setdefault(article.id, position)
    return index


class ArticleStore:
    """Own the article list and the content chunk map kept in the host data blob.

    Both live under their own top-level key and are written together by every
    save. Other keys in the blob are carried through untouched.

    Every mutating operation is a full load-modify-save cycle over the whole
    collection. Mutations on one store instance are serialized through a lock, so
    overlapping calls run one after another instead of overwriting each other.
    """

    def __init__(
        self,
        blob: BlobStoreProtocol,
        *,
        chunk_size: int = CONTENT_CHUNK_SIZE,
        preview_length: int = CONTENT_PREVIEW_LENGTH,
    ) -> None:
        if chunk_size <= 0:
            msg = f"chunk_size must be positive, got {chunk_size!r}"
            raise ValueError(msg)
        self._blob = blob
        self.chunk_size = chunk_size
        self.preview_length = preview_length

        # Last blob read from or written to the host.
        self._data: dict[str, Any] = {}
        # Article id -> position in the last loaded or saved list.
        self._index: dict[str, int] = {}
        self._is_open = False
        self._write_lock = asyncio.Lock()

    # --- Lifecycle ---

    @property
    def is_open(self) -> bool:
        return self._is_open

    async def open(self) -> None:
        """Read the blob once so the store starts from the persisted state.

        A failed read is logged and the store starts empty; loads then return
        no articles and mutations raise on their own read.
        """
        if self._is_open:
            return
        try:
            self._data = await self._read_data()
        except StoreError:
            logger.exception("Failed to read stored data on open, starting empty")
            self._data = {}
        self._is_open = True
        logger.debug(
            "Article store opened: {} content chunks, chunk_size {}",
            len(self._chunk_map()),
            self.chunk_size,
        )

    async def close(self) -> None:
        self._is_open = False
        self._data = {}
        self._index = {}

    async def __aenter__(self) -> Self:
        await self.open()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    def _check_open(self) -> None:
        if not self._is_open:
            msg = "Article store is not open"
            raise StoreError(msg)

    # --- Host I/O ---

    async def _read_data(self) -> dict[str, Any]:
        try:
            data = await self._blob.read_blob()
        except Exception as e:
            msg = "Failed to read article data from storage"
            raise StoreError(msg) from e
        if data is None:
            return {}
        if not isinstance(data, dict):
            logger.error("Stored data is not an object ({}), ignoring it", type(data).__name__)
            return {}
        return data

    async def _write_data(self, data: dict[str, Any]) -> None:
        try:
            await self._blob.write_blob(data)
        except Exception as e:
            msg = "Failed to save articles to storage"
            raise StoreError(msg) from e
        self._data = data

    def _chunk_map(self) -> dict[str, Any]:
        chunks = self._data.get(CONTENT_CHUNKS_KEY)
        if chunks is None:
            return {}
        if not isinstance(chunks, dict):
            logger.warning("Stored content chunks have an invalid format, ignoring them")
            return {}
        return chunks

    def _raw_records(self) -> list[Any]:
        raw = self._data.get(ARTICLES_KEY)
        if raw is None:
            logger.debug("No articles found in storage")
            return []
        if isinstance(raw, list):
            return raw
        if isinstance(raw, dict) and raw:
            logger.error("Stored articles are not a list, recovering values of the mapping")
            return list(raw.values())
        logger.error("Stored articles have an invalid structure ({})", type(raw).__name__)
        return []

    # --- Load / save ---

    async def _load(self) -> list[Article]:
        """Read and parse all articles. Raises StoreError if the host read fails."""
        self._data = await self._read_data()
        chunk_map = self._chunk_map()

        articles: list[Article] = []
        for raw in self._raw_records():
            try:
                articles.append(parse_record(raw, chunk_map))
            except Exception:
                logger.exception("Error processing article record, substituting error notice")
                articles.append(error_record(raw))

        self._index = _build_index(articles)
        logger.debug("Loaded {} articles, {} content chunks", len(articles), len(chunk_map))
        return articles

    async def load_articles(self) -> list[Article]:
        """Return all articles with their full content.

        Never fails because of corrupt data or a failed host read: corrupt
        records carry a notice as content, and a failed read yields no articles.
        """
        self._check_open()
        try:
            return await self._load()
        except StoreError:
            logger.exception("Failed to load articles")
            return []

    def _serialize(self, article: Article, chunk_map: dict[str, Any]) -> dict[str, Any]:
        content = normalize_saved_content(article.content, article.id)
        if len(content) <= self.chunk_size:
            return serialize_article(article, content=content, chunk_ids=[])

        chunks = split_content(content, self.chunk_size)
        chunk_ids = assign_chunk_ids(article.id, chunks)
        chunk_map.update(zip(chunk_ids, chunks, strict=True))
        logger.debug(
            "Split article {} content ({} chars) into {} chunks",
            article.id,
            len(content),
            len(chunks),
        )
        return serialize_article(
            article,
            content=chunked_preview(content, self.preview_length),
            chunk_ids=chunk_ids,
        )

    async def _save(self, articles: Sequence[Article]) -> None:
        # Previous chunks are carried forward; see collect_orphan_chunks().
        chunk_map = dict(self._chunk_map())
        records = [self._serialize(article, chunk_map) for article in articles]

        await self._write_data({**self._data, ARTICLES_KEY: records, CONTENT_CHUNKS_KEY: chunk_map})
        self._index = _build_index(articles)
        logger.info("Saved {} articles with {} content chunks", len(records), len(chunk_map))

    async def save_articles(self, articles: Sequence[Article]) -> None:
        """Replace the whole persisted collection with articles.

        Content longer than chunk_size is split into chunks; the record then
        keeps only a preview. Raises StoreError if the host write fails.
        """
        self._check_open()
        async with self._write_lock:
            await self._save(articles)

    # --- Record operations ---

    def _position(self, article_id: str) -> int:
        position = self._index.get(article_id)
        if position is None:
            raise ArticleNotFoundError(article_id)
        return position

    async def get_article(self, article_id: str) -> Article:
        self._check_open()
        articles = await self._load()
        return articles[self._position(article_id)]

    async def add_article(self, article: Article) -> None:
        """Append article, or replace the stored article with the same URL.

        A replaced article keeps the id it was stored under.
        """
        self._check_open()
        async with self._write_lock:
            articles = await self._load()
            existing = next((i for i, a in enumerate(articles) if a.url == article.url), None)
            if existing is not None:
                logger.info("Article with URL {} exists, replacing it", article.url)
                articles[existing] = replace(article, id=articles[existing].id)
            else:
                logger.info("Adding article {!r}", article.title)
                articles.append(article)
            await self._save(articles)

    async def update_article(self, article: Article) -> None:
        """Replace the stored article with the same id.

        Raises ArticleNotFoundError if there is none.
        """
        self._check_open()
        content = normalize_updated_content(article.content, article.id)
        async with self._write_lock:
            articles = await self._load()
            articles[self._position(article.id)] = replace(article, content=content)
            await self._save(articles)
        logger.debug("Article {} updated", article.id)

    async def delete_article(self, article_id: str) -> None:
        """Remove the article. Raises ArticleNotFoundError if there is none."""
        self._check_open()
        async with self._write_lock:
            articles = await self._load()
            self._position(article_id)
            await self._save([a for a in articles if a.id != article_id])
        logger.info("Article {} deleted", article_id)

    async def update_article_status(self, article_id: str, status: ArticleStatus) -> None:
        """Set the read status. Raises ArticleNotFoundError if there is no such article."""
        if status not in ARTICLE_STATUSES:
            msg = f"Invalid article status: {status!r}"
            raise ValueError(msg)
        self._check_open()
        async with self._write_lock:
            articles = await self._load()
            articles[self._position(article_id)].status = status
            await self._save(articles)
        logger.debug("Article {} marked {}", article_id, status)

    async def collect_orphan_chunks(self) -> int:
        """Drop content chunks no persisted article refers to.

        Saves never remove chunks, so replaced, un-chunked and deleted articles
        leave their old chunks behind until this runs.

        Returns:
            Number of chunks removed.
        """
        self._check_open()
        async with self._write_lock:
            self._data = await self._read_data()
            chunk_map = self._chunk_map()

            referenced: set[str] = set()
            for raw in self._raw_records():
                chunk_ids = raw.get("contentChunkIds") if isinstance(raw, dict) else None
                if isinstance(chunk_ids, list):
                    referenced.update(c for c in chunk_ids if isinstance(c, str))

            kept = {k: v for k, v in chunk_map.items() if k in referenced}
            removed = len(chunk_map) - len(kept)
            if not removed:
                logger.debug("No orphaned content chunks")
                return 0

            await self._write_data({**self._data, CONTENT_CHUNKS_KEY: kept})
        logger.info("Removed {} orphaned content chunks", removed)
        return removed
