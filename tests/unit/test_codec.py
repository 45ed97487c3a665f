"""Tests for parsing article HTML into content elements and back."""

import pytest

from smart_reader.core.content.codec import (
    EMPTY_CONTENT_NOTICE,
    HIGHLIGHT_ATTR,
    PARSE_ERROR_NOTICE,
    UNPARSED_CONTENT_NOTICE,
    generate_html,
    parse_article_content,
)
from smart_reader.models.element import ContentElement

MULTI_ELEMENT_HTML = (
    "<h1>Title</h1>"
    "<p>Intro with <a href=\"https://example.com\">a link</a> &amp; more.</p>"
    "<img src=\"https://example.com/a.png\" alt=\"Diagram\">"
    "<ul><li>one</li><li>two</li></ul>"
    "<pre><code>x = 1\ny = 2</code></pre>"
    "<blockquote>Quoted <em>text</em></blockquote>"
    "<h3>Sub</h3>"
    "<ol><li>first</li></ol>"
    "<p>Last</p>"
)


@pytest.mark.parametrize("markup", ["", "   ", "\n\t"])
def test_parse_blank_markup_returns_single_notice(markup: str) -> None:
    elements = parse_article_content(markup)

    assert len(elements) == 1
    assert elements[0].type == "paragraph"
    assert elements[0].content == EMPTY_CONTENT_NOTICE


def test_parse_non_string_markup_returns_notice() -> None:
    elements = parse_article_content(None)  # type: ignore[arg-type]

    assert [el.content for el in elements] == [EMPTY_CONTENT_NOTICE]


def test_parse_paragraph_heading_and_image() -> None:
    elements = parse_article_content("<p>A</p><h2>B</h2><img src='x' alt='y'>")

    assert len(elements) == 3
    assert (elements[0].type, elements[0].content) == ("paragraph", "A")
    assert (elements[1].type, elements[1].level, elements[1].content) == ("heading", 2, "B")
    assert (elements[2].type, elements[2].src, elements[2].alt) == ("image", "x", "y")
    assert elements[2].content == ""


def test_parse_assigns_ids_from_one_counter() -> None:
    elements = parse_article_content("<p>A</p><h2>B</h2><img src='x'><ul><li>c</li></ul>")

    assert [el.id for el in elements] == ["p-0", "h2-1", "img-2", "list-3"]


def test_parse_keeps_list_whole_as_outer_markup() -> None:
    elements = parse_article_content("<ul><li>a</li><li>b</li></ul>")

    assert len(elements) == 1
    assert elements[0].type == "list"
    assert elements[0].content == "<ul><li>a</li><li>b</li></ul>"


def test_parse_pre_becomes_code_with_outer_markup() -> None:
    elements = parse_article_content("<pre>x = 1</pre>")

    assert [(el.type, el.content) for el in elements] == [("code", "<pre>x = 1</pre>")]


def test_parse_blockquote_keeps_inner_markup() -> None:
    elements = parse_article_content("<blockquote>Said <b>this</b></blockquote>")

    assert [(el.type, el.content) for el in elements] == [("blockquote", "Said <b>this</b>")]


def test_parse_skips_comments_scripts_and_styles() -> None:
    markup = "<!-- note --><script>alert(1)</script><style>p {}</style><p>Kept</p>"

    elements = parse_article_content(markup)

    assert [el.content for el in elements] == ["Kept"]


def test_parse_markup_with_nothing_to_show_returns_notice() -> None:
    elements = parse_article_content("<script>alert(1)</script><!-- only a comment -->")

    assert len(elements) == 1
    assert elements[0].content == UNPARSED_CONTENT_NOTICE


def test_parse_childless_unknown_tag_becomes_paragraph_over_outer_markup() -> None:
    elements = parse_article_content("<span>hi</span>")

    assert [(el.id, el.type, el.content) for el in elements] == [
        ("element-0", "paragraph", "<span>hi</span>")
    ]


def test_parse_flattens_unknown_containers_with_children() -> None:
    markup = "<div><p>A</p><section><h3>B</h3><figure><img src='c.png'></figure></section></div>"

    elements = parse_article_content(markup)

    assert [(el.type, el.content, el.src) for el in elements] == [
        ("paragraph", "A", None),
        ("heading", "B", None),
        ("image", "", "c.png"),
    ]


def test_parse_keeps_bare_text_as_escaped_paragraph() -> None:
    elements = parse_article_content("Intro &amp; more<p>A</p>")

    assert [(el.type, el.content) for el in elements] == [
        ("paragraph", "Intro &amp; more"),
        ("paragraph", "A"),
    ]


def test_parse_full_page_prefers_article() -> None:
    page = (
        "<html><head><title>T</title></head><body>"
        "<nav><p>Menu</p></nav><main><p>Main</p></main>"
        "<article><p>Body</p></article>"
        "</body></html>"
    )

    elements = parse_article_content(page)

    assert [el.content for el in elements] == ["Body"]


def test_parse_full_page_falls_back_to_main_then_content_class() -> None:
    with_main = (
        "<html><body><div class='post-content'><p>Classed</p></div>"
        "<main><p>Main</p></main></body></html>"
    )
    classed = "<html><body><nav><p>Menu</p></nav><div class='entry'><p>Classed</p></div></body></html>"

    assert [el.content for el in parse_article_content(with_main)] == ["Main"]
    assert [el.content for el in parse_article_content(classed)] == ["Classed"]


def test_parse_fragment_is_not_narrowed_to_inner_article() -> None:
    elements = parse_article_content("<p>Intro</p><article><p>Body</p></article>")

    assert [el.content for el in elements] == ["Intro", "Body"]


def test_parse_resolves_image_src_against_base_url() -> None:
    elements = parse_article_content(
        "<img src='/img/a.png' alt='A'>", base_url="https://example.com/posts/1"
    )

    assert elements[0].src == "https://example.com/img/a.png"


def test_parse_failure_returns_error_notice(monkeypatch: pytest.MonkeyPatch) -> None:
    def _boom(*args: object, **kwargs: object) -> None:
        raise RuntimeError("parser exploded")

    monkeypatch.setattr("smart_reader.core.content.codec.BeautifulSoup", _boom)

    elements = parse_article_content("<p>fine</p>")

    assert len(elements) == 1
    assert elements[0].id == "parsing-error"
    assert elements[0].content == PARSE_ERROR_NOTICE


def test_parse_reads_highlight_marker_and_strips_it() -> None:
    markup = f'<p {HIGHLIGHT_ATTR}="true">A</p><ul {HIGHLIGHT_ATTR}="true"><li>b</li></ul><p>C</p>'

    elements = parse_article_content(markup)

    assert [el.is_highlighted for el in elements] == [True, True, False]
    assert elements[1].content == "<ul><li>b</li></ul>"


def test_generate_html_per_element_type() -> None:
    elements = [
        ContentElement(id="a", type="heading", content="Head", level=3),
        ContentElement(id="b", type="paragraph", content="Text"),
        ContentElement(id="c", type="image", content="", src="x.png"),
        ContentElement(id="d", type="blockquote", content="Quote"),
        ContentElement(id="e", type="list", content="<ol><li>1</li></ol>"),
        ContentElement(id="f", type="code", content="<pre>code</pre>"),
    ]

    html = generate_html(elements)

    assert html == (
        "<h3>Head</h3><p>Text</p><img src=\"x.png\"><blockquote>Quote</blockquote>"
        "<ol><li>1</li></ol><pre>code</pre>"
    )


def test_generate_html_image_omits_absent_attributes() -> None:
    html = generate_html([ContentElement(id="i", type="image", content="")])

    assert html == "<img>"


def test_generate_html_clamps_heading_level() -> None:
    html = generate_html(
        [
            ContentElement(id="a", type="heading", content="A", level=None),
            ContentElement(id="b", type="heading", content="B", level=9),
        ]
    )

    assert html == "<h1>A</h1><h6>B</h6>"


def test_generate_html_falls_back_to_empty_container_for_unparseable_fragments() -> None:
    html = generate_html(
        [
            ContentElement(id="l", type="list", content=""),
            ContentElement(id="c", type="code", content="just text"),
        ]
    )

    assert html == "<div></div><pre></pre>"


def test_generate_html_marks_highlighted_elements() -> None:
    html = generate_html(
        [
            ContentElement(id="a", type="paragraph", content="A", is_highlighted=True),
            ContentElement(id="b", type="list", content="<ul><li>b</li></ul>", is_highlighted=True),
        ]
    )

    assert html == f'<p {HIGHLIGHT_ATTR}="true">A</p><ul {HIGHLIGHT_ATTR}="true"><li>b</li></ul>'


def test_decode_encode_decode_preserves_structure() -> None:
    first = parse_article_content(MULTI_ELEMENT_HTML)

    second = parse_article_content(generate_html(first))

    assert len(first) == 9
    assert [el.structure() for el in second] == [el.structure() for el in first]


def test_decode_encode_decode_preserves_flattened_and_fallback_elements() -> None:
    markup = "<div><p>A</p><span>inline</span></div>Loose text<hr><img src='a.png' alt=''>"
    first = parse_article_content(markup)

    second = parse_article_content(generate_html(first))

    assert [el.structure() for el in second] == [el.structure() for el in first]


def test_highlights_survive_encode_and_decode() -> None:
    elements = parse_article_content("<p>A</p><pre>b</pre><img src='c'>")
    marked = [
        ContentElement(
            id=el.id,
            type=el.type,
            content=el.content,
            level=el.level,
            src=el.src,
            alt=el.alt,
            is_highlighted=True,
        )
        for el in elements
    ]

    decoded = parse_article_content(generate_html(marked))

    assert all(el.is_highlighted for el in decoded)
    assert [el.structure() for el in decoded] == [el.structure() for el in elements]
