"""Structured content elements of an article body."""

from dataclasses import dataclass
from typing import Literal

ElementType = Literal["paragraph", "heading", "image", "list", "code", "blockquote"]


@dataclass(frozen=True)
class ContentElement:
    """A single structural unit of an article body.

    Ids are unique within one decode of one document only; they are not stable
    across re-parses and must not be persisted.
    """

    id: str
    type: ElementType
    content: str
    level: int | None = None
    src: str | None = None
    alt: str | None = None
    is_highlighted: bool = False

    def structure(self) -> tuple[str, str, int | None, str | None, str | None]:
        """Return the (type, content, level, src, alt) tuple used for comparisons."""
        return (self.type, self.content, self.level, self.src, self.alt)
