"""Convert between persisted article records and Article models.

Records use the camelCase keys of the persisted layout. Parsing is lenient:
content faults are replaced by fixed notices rather than raised.
"""

from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from loguru import logger

from smart_reader.core.storage.chunks import reassemble_content
from smart_reader.models.article import ARTICLE_STATUSES, Article, ArticleStatus, new_article_id

LOAD_FALLBACK_NOTICE = "<p>Content could not be loaded properly. The article may be corrupted.</p>"
REASSEMBLY_FALLBACK_NOTICE = (
    "<p>Content could not be reassembled from chunks. The article may be corrupted.</p>"
)
LOAD_ERROR_NOTICE = "<p>Error loading article content. Please try refreshing.</p>"
SAVE_INVALID_NOTICE = "<p>Content was lost during serialization. Please try refreshing.</p>"
EMPTY_ARTICLE_NOTICE = "<p>Article content appears to be empty. Please try refreshing.</p>"
UPDATE_INVALID_NOTICE = "<p>Content could not be saved properly.</p>"

CHUNKED_PREVIEW_SUFFIX = "... [Content stored in chunks]"


def format_datetime(value: datetime) -> str:
    """Format as ISO-8601 UTC with millisecond precision and a Z suffix."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_datetime(value: Any) -> datetime | None:
    """Parse a persisted date, returning None when it cannot be understood.

    Accepts ISO-8601 strings and epoch milliseconds. Naive values are taken as UTC.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError:
            return None
    elif isinstance(value, int | float) and not isinstance(value, bool):
        try:
            return datetime.fromtimestamp(value / 1000, tz=UTC)
        except (OverflowError, OSError, ValueError):
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def ensure_markup(content: str, article_id: str) -> str:
    """Wrap content that has no markup at all in a paragraph."""
    if "<" not in content:
        logger.warning("Article {} content is not HTML, wrapping in paragraph tags", article_id)
        return f"<p>{content}</p>"
    return content


def normalize_saved_content(content: Any, article_id: str) -> str:
    """Validate content before it is written by a save."""
    if not isinstance(content, str):
        logger.warning("Article {} has invalid content before serialization", article_id)
        return SAVE_INVALID_NOTICE
    if not content.strip():
        logger.warning("Article {} has empty content, storing fallback", article_id)
        return EMPTY_ARTICLE_NOTICE
    return ensure_markup(content, article_id)


def normalize_updated_content(content: Any, article_id: str) -> str:
    """Validate content handed to an update."""
    if not isinstance(content, str) or not content:
        logger.warning("Article {} has invalid content, using fallback content", article_id)
        return UPDATE_INVALID_NOTICE
    return ensure_markup(content, article_id)


def chunked_preview(content: str, preview_length: int) -> str:
    return content[:preview_length] + CHUNKED_PREVIEW_SUFFIX


def _str(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _opt_str(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _status(value: Any, article_id: str) -> ArticleStatus:
    if value in ARTICLE_STATUSES:
        return value  # type: ignore[no-any-return]
    logger.warning("Article {} has unknown status {!r}, treating as unread", article_id, value)
    return "unread"


def _tags(value: Any) -> list[str] | None:
    if not isinstance(value, list):
        return None
    return [tag for tag in value if isinstance(tag, str)]


def serialize_article(article: Article, *, content: str, chunk_ids: list[str]) -> dict[str, Any]:
    """Build the persisted record for article with the given stored content."""
    record: dict[str, Any] = {
        "id": article.id,
        "title": article.title,
        "url": article.url,
        "domain": article.domain,
        "addedAt": format_datetime(article.added_at),
        "status": article.status,
        "content": content,
        "contentChunkIds": list(chunk_ids),
    }
    optional = {
        "excerpt": article.excerpt,
        "author": article.author,
        "siteName": article.site_name,
        "image": article.image,
        "publishedAt": (
            format_datetime(article.published_at) if article.published_at is not None else None
        ),
        "tags": list(article.tags) if article.tags is not None else None,
    }
    record.update({key: value for key, value in optional.items() if value is not None})
    return record


def parse_record(raw: Any, chunk_map: Mapping[str, object]) -> Article:
    """Parse one persisted record, reassembling chunked content.

    Content faults are replaced with notices. Structural faults (not an object,
    no string id) raise, so the caller can substitute error_record().
    """
    if not isinstance(raw, dict):
        msg = f"Article record is not an object: {type(raw).__name__}"
        raise TypeError(msg)
    article_id = raw["id"]
    if not isinstance(article_id, str) or not article_id:
        msg = f"Article record has invalid id: {article_id!r}"
        raise TypeError(msg)

    chunk_ids = raw.get("contentChunkIds") or []
    if not isinstance(chunk_ids, list):
        chunk_ids = []
    content = raw.get("content")

    if chunk_ids:
        logger.debug("Reassembling article {} from {} chunks", article_id, len(chunk_ids))
        content = reassemble_content(chunk_ids, chunk_map)
        if not content:
            logger.error("Failed to reassemble content for article {}", article_id)
            content = REASSEMBLY_FALLBACK_NOTICE
    elif not isinstance(content, str) or not content.strip():
        logger.warning("Article {} has invalid content, using fallback content", article_id)
        content = LOAD_FALLBACK_NOTICE

    return Article(
        id=article_id,
        title=_str(raw.get("title")),
        url=_str(raw.get("url")),
        domain=_str(raw.get("domain")),
        added_at=parse_datetime(raw.get("addedAt")) or datetime.now(tz=UTC),
        content=ensure_markup(content, article_id),
        status=_status(raw.get("status"), article_id),
        content_chunk_ids=list(chunk_ids),
        excerpt=_opt_str(raw.get("excerpt")),
        author=_opt_str(raw.get("author")),
        site_name=_opt_str(raw.get("siteName")),
        image=_opt_str(raw.get("image")),
        published_at=parse_datetime(raw.get("publishedAt")),
        tags=_tags(raw.get("tags")),
    )


def error_record(raw: Any) -> Article:
    """Build the minimal stand-in for a record that could not be parsed."""
    fields = raw if isinstance(raw, dict) else {}
    article_id = fields.get("id")
    if not isinstance(article_id, str) or not article_id:
        article_id = new_article_id()
    status = fields.get("status")
    return Article(
        id=article_id,
        title=_str(fields.get("title")) or "Untitled Article",
        url=_str(fields.get("url")),
        domain=_str(fields.get("domain")),
        added_at=datetime.now(tz=UTC),
        content=LOAD_ERROR_NOTICE,
        status=status if status in ARTICLE_STATUSES else "unread",
    )
