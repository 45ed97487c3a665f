"""Article domain model."""

import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Literal, get_args
from urllib.parse import urlparse

ArticleStatus = Literal["read", "unread"]

ARTICLE_STATUSES: tuple[str, ...] = get_args(ArticleStatus)


def extract_domain(url: str) -> str:
    """Return the hostname of url without a leading 'www.', or '' if there is none."""
    try:
        hostname = urlparse(url).hostname
    except ValueError:
        return ""
    if not hostname:
        return ""
    return hostname.removeprefix("www.")


def new_article_id() -> str:
    return uuid.uuid4().hex


@dataclass
class Article:
    """A saved article.

    When content_chunk_ids is non-empty the persisted content field only holds a
    preview; articles returned by the store always carry the full content.
    """

    id: str
    title: str
    url: str
    domain: str
    added_at: datetime
    content: str
    status: ArticleStatus = "unread"
    content_chunk_ids: list[str] = field(default_factory=list)
    excerpt: str | None = None
    author: str | None = None
    site_name: str | None = None
    image: str | None = None
    published_at: datetime | None = None
    tags: list[str] | None = None

    @property
    def is_chunked(self) -> bool:
        return bool(self.content_chunk_ids)

    @classmethod
    def create(
        cls,
        *,
        url: str,
        content: str,
        title: str | None = None,
        excerpt: str | None = None,
        author: str | None = None,
        site_name: str | None = None,
        image: str | None = None,
        published_at: datetime | None = None,
        tags: list[str] | None = None,
    ) -> "Article":
        """Build a new unread article with a fresh id, as the extractor would."""
        domain = extract_domain(url)
        return cls(
            id=new_article_id(),
            title=title or "Untitled Article",
            url=url,
            domain=domain,
            added_at=datetime.now(tz=UTC),
            content=content,
            excerpt=excerpt,
            author=author,
            site_name=site_name or domain,
            image=image,
            published_at=published_at,
            tags=tags,
        )
