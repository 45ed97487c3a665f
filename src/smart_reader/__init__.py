"""Read-it-later article store with chunked content persistence."""

from smart_reader.core.content.codec import generate_html, parse_article_content
from smart_reader.core.editing.editor import ContentEditor
from smart_reader.core.storage.blob import JsonFileBlobStore, MemoryBlobStore
from smart_reader.core.storage.store import ArticleStore
from smart_reader.errors import ArticleNotFoundError, ElementNotFoundError, StoreError
from smart_reader.models.article import Article
from smart_reader.models.element import ContentElement
from smart_reader.protocols import BlobStoreProtocol, NotifierProtocol

__all__ = [
    "Article",
    "ArticleNotFoundError",
    "ArticleStore",
    "BlobStoreProtocol",
    "ContentEditor",
    "ContentElement",
    "ElementNotFoundError",
    "JsonFileBlobStore",
    "MemoryBlobStore",
    "NotifierProtocol",
    "StoreError",
    "generate_html",
    "parse_article_content",
]
