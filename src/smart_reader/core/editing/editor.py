"""Element-level editing workflows over one article."""

from collections.abc import Sequence
from dataclasses import replace

from loguru import logger

from smart_reader.core.content.codec import generate_html, parse_article_content
from smart_reader.core.storage.store import ArticleStore
from smart_reader.errors import ElementNotFoundError
from smart_reader.models.article import Article
from smart_reader.models.element import ContentElement
from smart_reader.protocols import NotifierProtocol

MISSING_CONTENT_MARKUP = (
    "<p>No content available for this article. The content may be missing or corrupted.</p>"
)
INVALID_CONTENT_MARKUP = "<p>Content format is invalid. Please try refreshing the article.</p>"
BLANK_CONTENT_MARKUP = (
    "<p>This article appears to be empty. "
    "Please try refreshing or selecting another article.</p>"
)


def editable_markup(article: Article) -> str:
    """Return the article's content, or a notice if it cannot be edited as-is."""
    content: object = article.content
    if content is None or content == "":
        logger.error("Article {} content is missing", article.id)
        return MISSING_CONTENT_MARKUP
    if not isinstance(content, str):
        logger.error("Article {} content is not a string: {}", article.id, type(content).__name__)
        return INVALID_CONTENT_MARKUP
    if not content.strip():
        logger.warning("Article {} content is blank", article.id)
        return BLANK_CONTENT_MARKUP
    if "<" not in content:
        return f"<p>{content}</p>"
    return content


class ContentEditor:
    """Edit one article's body element by element.

    Each workflow applies its change to `elements` right away, then saves the
    regenerated HTML through the store. If the save fails, the previous elements
    are restored, an error notice is sent, and the exception is re-raised.

    Highlights are written into the saved HTML as markers, so they survive a
    reload of the article.
    """

    def __init__(
        self,
        store: ArticleStore,
        article: Article,
        *,
        notifier: NotifierProtocol | None = None,
    ) -> None:
        self._store = store
        self._notifier = notifier
        self.article = article
        self.elements: list[ContentElement] = parse_article_content(editable_markup(article))
        logger.debug("Editing article {}: {} elements", article.id, len(self.elements))

    # --- Queries ---

    @property
    def highlighted_ids(self) -> list[str]:
        return [el.id for el in self.elements if el.is_highlighted]

    @property
    def has_highlights(self) -> bool:
        return any(el.is_highlighted for el in self.elements)

    def is_highlighted(self, element_id: str) -> bool:
        return any(el.id == element_id and el.is_highlighted for el in self.elements)

    def element_content(self, element_id: str) -> str:
        """Return the content of one element, e.g. for copying."""
        return self.elements[self._position(element_id)].content

    def _position(self, element_id: str) -> int:
        for position, element in enumerate(self.elements):
            if element.id == element_id:
                return position
        raise ElementNotFoundError(element_id)

    def _notify(self, title: str, description: str, *, error: bool = False) -> None:
        if self._notifier is not None:
            self._notifier.notify(title, description, error=error)

    # --- Workflows ---

    async def _commit(
        self,
        updated: Sequence[ContentElement],
        *,
        failure_title: str,
        failure_description: str,
    ) -> None:
        previous = self.elements
        self.elements = list(updated)
        article = replace(self.article, content=generate_html(self.elements))
        try:
            await self._store.update_article(article)
        except Exception:
            self.elements = previous
            logger.exception("Failed to save article {}, changes rolled back", article.id)
            self._notify(failure_title, failure_description, error=True)
            raise
        self.article = article

    async def toggle_highlight(self, element_id: str) -> bool:
        """Flip the highlight of one element and save. Returns the new state."""
        position = self._position(element_id)
        element = self.elements[position]
        updated = list(self.elements)
        updated[position] = replace(element, is_highlighted=not element.is_highlighted)

        await self._commit(
            updated,
            failure_title="Highlight failed",
            failure_description="Failed to update the highlight",
        )
        if updated[position].is_highlighted:
            self._notify("Element highlighted", "The element has been highlighted")
        else:
            self._notify("Highlight removed", "The highlight has been removed from the element")
        return updated[position].is_highlighted

    async def delete_element(self, element_id: str) -> None:
        """Remove one element and save."""
        self._position(element_id)
        updated = [el for el in self.elements if el.id != element_id]

        await self._commit(
            updated,
            failure_title="Delete failed",
            failure_description="Failed to remove the element",
        )
        self._notify("Element removed", "The element has been removed from the article")

    async def delete_highlighted(self) -> int:
        """Remove all highlighted elements and save. Returns how many were removed."""
        count = len(self.highlighted_ids)
        if not count:
            return 0
        updated = [el for el in self.elements if not el.is_highlighted]

        await self._commit(
            updated,
            failure_title="Delete failed",
            failure_description="Failed to remove the selected elements",
        )
        self._notify("Elements removed", f"{count} element(s) have been removed from the article")
        return count

    async def clear_highlights(self) -> None:
        """Remove every highlight without deleting elements, and save."""
        if not self.has_highlights:
            return
        updated = [replace(el, is_highlighted=False) for el in self.elements]

        await self._commit(
            updated,
            failure_title="Clear failed",
            failure_description="Failed to clear the highlights",
        )
        self._notify("Selection cleared", "All highlights have been removed")
