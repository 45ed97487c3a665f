"""Round-trip a generated large article through the store to check chunking."""

import secrets
from dataclasses import dataclass

from loguru import logger

from smart_reader.core.storage.blob import MemoryBlobStore
from smart_reader.core.storage.store import ArticleStore
from smart_reader.models.article import Article
from smart_reader.protocols import BlobStoreProtocol

_SAMPLE_LENGTH = 100

_PARAGRAPH_BYTES = 1024

_FILLER = (
    "with some random content to simulate a real article. "
    "Lorem ipsum dolor sit amet, consectetur adipiscing elit. Sed do eiusmod tempor "
    "incididunt ut labore et dolore magna aliqua. Ut enim ad minim veniam, quis nostrud "
    "exercitation ullamco laboris nisi ut aliquip ex ea commodo consequat. Duis aute irure "
    "dolor in reprehenderit in voluptate velit esse cillum dolore eu fugiat nulla pariatur. "
    "Excepteur sint occaecat cupidatat non proident, sunt in culpa qui officia deserunt "
    "mollit anim id est laborum. "
)


@dataclass(frozen=True)
class ChunkingCheckResult:
    """Outcome of one chunking round trip."""

    size_kb: int
    original_length: int
    loaded_length: int
    chunk_count: int
    sample_matches: bool

    @property
    def length_matches(self) -> bool:
        return self.original_length == self.loaded_length

    @property
    def passed(self) -> bool:
        return self.length_matches and self.sample_matches


def _paragraph(index: int) -> str:
    """Return a paragraph of exactly _PARAGRAPH_BYTES characters ending in a random token."""
    token = secrets.token_hex(6)
    head = f"<p>This is paragraph {index} "
    room = _PARAGRAPH_BYTES - len(head) - len(token) - len("</p>")
    text = (_FILLER * (room // len(_FILLER) + 1))[:room]
    return f"{head}{text}{token}</p>"


def generate_large_article(size_kb: int) -> Article:
    """Build an article made of size_kb paragraphs of 1 KB each."""
    paragraphs = "".join(_paragraph(i) for i in range(size_kb))
    return Article.create(
        url="https://example.com/test-large-article",
        title=f"Test Large Article ({size_kb}KB)",
        content=f"<article>{paragraphs}</article>",
        excerpt="This is a test article with large content to verify chunking functionality",
        author="Test Author",
        site_name="Example Website",
        image="https://example.com/image.jpg",
    )


async def run_chunking_check(
    size_kb: int,
    *,
    blob: BlobStoreProtocol | None = None,
    chunk_size: int | None = None,
) -> ChunkingCheckResult:
    """Save a generated article, load it back, and compare.

    Runs against an in-memory blob unless one is given, so the user's data is
    never touched by default.
    """
    article = generate_large_article(size_kb)
    store_kwargs = {"chunk_size": chunk_size} if chunk_size is not None else {}
    logger.info("Chunking check: {} KB article, {} chars", size_kb, len(article.content))

    async with ArticleStore(blob or MemoryBlobStore(), **store_kwargs) as store:
        await store.save_articles([article])
        loaded = await store.get_article(article.id)

    result = ChunkingCheckResult(
        size_kb=size_kb,
        original_length=len(article.content),
        loaded_length=len(loaded.content),
        chunk_count=len(loaded.content_chunk_ids),
        sample_matches=(
            article.content[:_SAMPLE_LENGTH] == loaded.content[:_SAMPLE_LENGTH]
        ),
    )
    if result.passed:
        logger.info("Chunking check passed: {} chunks", result.chunk_count)
    else:
        logger.error(
            "Chunking check failed: original {} chars, loaded {} chars, sample match {}",
            result.original_length,
            result.loaded_length,
            result.sample_matches,
        )
    return result
