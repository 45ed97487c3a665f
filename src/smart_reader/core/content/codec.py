"""Parse article HTML into content elements and generate HTML back from them."""

import html
import re
from collections.abc import Iterable
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag
from bs4.element import NavigableString, PreformattedString
from loguru import logger

from smart_reader.models.element import ContentElement, ElementType

# Attribute that carries an element's highlight state through the stored markup.
HIGHLIGHT_ATTR = "data-highlighted"

EMPTY_CONTENT_NOTICE = "No content available for this article."
UNPARSED_CONTENT_NOTICE = "Content could not be parsed properly."
PARSE_ERROR_NOTICE = "An error occurred while parsing the article content."

_SKIPPED_TAGS = frozenset({"script", "style"})
_HEADING_RE = re.compile(r"^h([1-6])$")
_CONTENT_CLASS_RE = re.compile(r"article|content|post|entry", re.IGNORECASE)


def _notice(element_id: str, text: str) -> list[ContentElement]:
    return [ContentElement(id=element_id, type="paragraph", content=text)]


def _attr(tag: Tag, name: str) -> str | None:
    value = tag.get(name)
    if value is None:
        return None
    if isinstance(value, list):
        return " ".join(value)
    return str(value)


def _pop_highlight(tag: Tag) -> bool:
    """Strip the highlight marker from tag and report whether it was set."""
    value = tag.attrs.pop(HIGHLIGHT_ATTR, None)
    return value is not None and value != "false"


def _content_root(soup: BeautifulSoup) -> Tag:
    """Pick the node whose direct children are the article's elements.

    Fragments are walked as-is. For a full page, the body is narrowed to the first
    <article>, else <main>, else the first element with a content-like class.
    """
    page = soup.find("body") or soup.find("html")
    if not isinstance(page, Tag):
        return soup
    for candidate in (
        page.find("article"),
        page.find("main"),
        page.find(class_=_CONTENT_CLASS_RE),
    ):
        if isinstance(candidate, Tag):
            return candidate
    return page


class _Decoder:
    """Walk a parsed tree once, collecting elements with per-decode ids."""

    def __init__(self, *, base_url: str | None) -> None:
        self.base_url = base_url
        self.elements: list[ContentElement] = []
        self._counter = 0

    def _add(
        self,
        tag_class: str,
        element_type: ElementType,
        content: str,
        *,
        highlighted: bool = False,
        level: int | None = None,
        src: str | None = None,
        alt: str | None = None,
    ) -> None:
        self.elements.append(
            ContentElement(
                id=f"{tag_class}-{self._counter}",
                type=element_type,
                content=content,
                level=level,
                src=src,
                alt=alt,
                is_highlighted=highlighted,
            )
        )
        self._counter += 1

    def walk(self, parent: Tag) -> None:
        for node in list(parent.children):
            # Comments, doctypes, CDATA and processing instructions
            if isinstance(node, PreformattedString):
                continue
            if isinstance(node, NavigableString):
                text = str(node).strip()
                if text:
                    self._add("element", "paragraph", html.escape(text, quote=False))
                continue
            if not isinstance(node, Tag):
                continue
            self._visit_tag(node)

    def _visit_tag(self, tag: Tag) -> None:
        name = tag.name.lower()
        if name in _SKIPPED_TAGS:
            return

        highlighted = _pop_highlight(tag)
        heading = _HEADING_RE.match(name)

        if name == "p":
            self._add("p", "paragraph", tag.decode_contents(), highlighted=highlighted)
        elif heading:
            self._add(
                name,
                "heading",
                tag.decode_contents(),
                highlighted=highlighted,
                level=int(heading.group(1)),
            )
        elif name == "img":
            src = _attr(tag, "src")
            if src and self.base_url:
                src = urljoin(self.base_url, src)
            self._add(
                "img", "image", "", highlighted=highlighted, src=src, alt=_attr(tag, "alt")
            )
        elif name in ("ul", "ol"):
            # Lists are kept whole, not decomposed into items
            self._add("list", "list", str(tag), highlighted=highlighted)
        elif name == "pre":
            self._add("code", "code", str(tag), highlighted=highlighted)
        elif name == "blockquote":
            self._add("blockquote", "blockquote", tag.decode_contents(), highlighted=highlighted)
        elif tag.find(True, recursive=False) is not None:
            self.walk(tag)
        else:
            self._add("element", "paragraph", str(tag), highlighted=highlighted)


def parse_article_content(markup: str, *, base_url: str | None = None) -> list[ContentElement]:
    """Parse article HTML into an ordered list of content elements.

    Never raises and never returns an empty list: blank input, input with nothing
    to show, and parser failures each yield a single notice paragraph.

    Args:
        markup: Article HTML, either a fragment or a full page.
        base_url: If given, relative image sources are resolved against it.

    Returns:
        Elements in document order.
    """
    if not isinstance(markup, str) or not markup.strip():
        logger.warning("Empty content provided to parse_article_content")
        return _notice("empty-content", EMPTY_CONTENT_NOTICE)

    try:
        soup = BeautifulSoup(markup, "html.parser")
        decoder = _Decoder(base_url=base_url)
        decoder.walk(_content_root(soup))
    except Exception:
        logger.exception("Error parsing article content")
        return _notice("parsing-error", PARSE_ERROR_NOTICE)

    if not decoder.elements:
        logger.warning("No content elements found in {} chars of markup", len(markup))
        return _notice("empty-parsed-content", UNPARSED_CONTENT_NOTICE)
    return decoder.elements


def _open_tag(name: str, attrs: dict[str, str]) -> str:
    rendered = "".join(f' {key}="{html.escape(value)}"' for key, value in attrs.items())
    return f"<{name}{rendered}>"


def _wrap(name: str, content: str, attrs: dict[str, str]) -> str:
    return f"{_open_tag(name, attrs)}{content}</{name}>"


def _first_element_html(fragment: str, fallback: str, attrs: dict[str, str]) -> str:
    """Return the first element of an outer-markup fragment, or an empty fallback tag."""
    soup = BeautifulSoup(fragment or "", "html.parser")
    first = soup.find(True, recursive=False)
    if not isinstance(first, Tag):
        first = soup.new_tag(fallback)
    for key, value in attrs.items():
        first[key] = value
    return str(first)


def _element_to_html(element: ContentElement) -> str:
    attrs = {HIGHLIGHT_ATTR: "true"} if element.is_highlighted else {}

    if element.type == "heading":
        level = min(max(element.level or 1, 1), 6)
        return _wrap(f"h{level}", element.content, attrs)
    if element.type == "paragraph":
        return _wrap("p", element.content, attrs)
    if element.type == "blockquote":
        return _wrap("blockquote", element.content, attrs)
    if element.type == "image":
        img_attrs: dict[str, str] = {}
        if element.src is not None:
            img_attrs["src"] = element.src
        if element.alt is not None:
            img_attrs["alt"] = element.alt
        return _open_tag("img", {**img_attrs, **attrs})
    # List and code content already is a complete outer-tag fragment.
    if element.type == "list":
        return _first_element_html(element.content, "div", attrs)
    if element.type == "code":
        return _first_element_html(element.content, "pre", attrs)
    return _wrap("div", element.content, attrs)


def generate_html(elements: Iterable[ContentElement]) -> str:
    """Generate article HTML from content elements.

    Highlighted elements carry a data-highlighted marker, which
    parse_article_content reads back.
    """
    return "".join(_element_to_html(element) for element in elements)
