"""Exceptions raised by the article store and editor."""


class StoreError(RuntimeError):
    """The store could not complete an operation (host I/O failure, closed store)."""


class ArticleNotFoundError(StoreError):
    """No article with the requested id exists."""

    def __init__(self, article_id: str) -> None:
        self.article_id = article_id
        super().__init__(f"Article with ID {article_id!r} not found")


class ElementNotFoundError(LookupError):
    """No content element with the requested id exists in the editor."""

    def __init__(self, element_id: str) -> None:
        self.element_id = element_id
        super().__init__(f"Content element {element_id!r} not found")
