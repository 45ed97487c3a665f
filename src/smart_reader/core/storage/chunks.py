"""Split large content into bounded-size chunks and reassemble it."""

import uuid
from collections.abc import Mapping, Sequence

from loguru import logger

from smart_reader.config import CONTENT_CHUNK_SIZE


def split_content(content: str, chunk_size: int = CONTENT_CHUNK_SIZE) -> list[str]:
    """Split content into consecutive chunks of exactly chunk_size characters.

    The last chunk holds the remainder. Empty content yields no chunks.
    """
    if chunk_size <= 0:
        msg = f"chunk_size must be positive, got {chunk_size!r}"
        raise ValueError(msg)
    return [content[start : start + chunk_size] for start in range(0, len(content), chunk_size)]


def assign_chunk_ids(article_id: str, chunks: Sequence[str]) -> list[str]:
    """Generate a chunk id per chunk: {article_id}-chunk-{index}-{random8}.

    The random suffix keeps ids from repeated saves of one article distinct.
    """
    return [f"{article_id}-chunk-{index}-{uuid.uuid4().hex[:8]}" for index in range(len(chunks))]


def reassemble_content(chunk_ids: Sequence[str], chunk_map: Mapping[str, object]) -> str:
    """Concatenate chunks in chunk_ids order.

    Missing chunks are logged and skipped, so the result may be partial.
    """
    parts: list[str] = []
    for chunk_id in chunk_ids:
        chunk = chunk_map.get(chunk_id)
        if isinstance(chunk, str):
            parts.append(chunk)
        else:
            logger.warning("Missing content chunk with ID {}", chunk_id)
    return "".join(parts)
