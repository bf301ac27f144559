"""Tests for aione.services.extractor."""

import asyncio

import httpx
import pytest

from aione.errors import FetchFailure, InvalidURL, NoElements
from aione.services.extractor import SAMPLE_MAX_LEN, extract, extract_elements

BASE = "https://example.com/blog/"


def _html(body: str, title: str = "") -> str:
    head = f"<title>{title}</title>" if title else ""
    return f"<!DOCTYPE html><html><head>{head}</head><body>{body}</body></html>"


def _ids(elements):
    return [e.id for e in elements]


class TestExtractElements:
    def test_scan_order_is_by_type_not_document_order(self):
        html = _html(
            '<img src="/a.png"><p>Para</p><a href="/x">X</a><h2>Sub</h2><h1>Head</h1>',
            title="T",
        )
        elements = extract_elements(html, BASE)
        assert [e.type for e in elements] == [
            "title", "heading", "subheading", "paragraph", "link", "image",
        ]
        assert _ids(elements) == ["title", "h1-1", "h2-1", "p-1", "link-1", "img-1"]

    def test_names_follow_type_and_index(self):
        html = _html("<h1>A</h1><h1>B</h1><p>one</p>", title="Site")
        names = [e.name for e in extract_elements(html, BASE)]
        assert names == ["Page Title", "Heading 1", "Heading 2", "Paragraph 1"]

    def test_counts_are_capped_per_type(self):
        body = (
            "<h1>h</h1>" * 6
            + "<h2>s</h2>" * 6
            + "<p>p</p>" * 12
            + '<a href="/l">l</a>' * 20
            + '<img src="/i.png">' * 9
        )
        elements = extract_elements(_html(body, title="T"), BASE)
        counts = {}
        for element in elements:
            counts[element.type] = counts.get(element.type, 0) + 1
        assert counts == {
            "title": 1, "heading": 3, "subheading": 3, "paragraph": 5, "link": 10, "image": 5,
        }

    def test_tags_are_stripped_and_whitespace_collapsed(self):
        html = _html("<p>Hello   <strong>bold</strong>\n\n<em>world</em></p>")
        (element,) = extract_elements(html, BASE)
        assert element.sample == "Hello bold world"

    def test_long_text_is_truncated(self):
        html = _html("<p>" + "word " * 100 + "</p>")
        (element,) = extract_elements(html, BASE)
        assert len(element.sample) <= SAMPLE_MAX_LEN
        assert element.sample.endswith("...")

    def test_empty_tags_are_skipped(self):
        html = _html("<p>   </p><p>Real</p>")
        elements = extract_elements(html, BASE)
        assert _ids(elements) == ["p-1"]
        assert elements[0].sample == "Real"

    def test_links_are_absolute_and_skip_fragments(self):
        html = _html(
            '<a href="#top">Top</a><a href="javascript:void(0)">JS</a>'
            '<a href="mailto:a@b.c">Mail</a><a href="../about">About us</a>'
        )
        (element,) = extract_elements(html, BASE)
        assert element.sample == "About us (https://example.com/about)"

    def test_link_without_text_uses_url(self):
        html = _html('<a href="/only"></a>')
        (element,) = extract_elements(html, BASE)
        assert element.sample == "https://example.com/only"

    def test_images_are_absolute(self):
        html = _html('<img alt="no src"><img src="pics/cat.jpg">')
        (element,) = extract_elements(html, BASE)
        assert element.sample == "https://example.com/blog/pics/cat.jpg"

    def test_only_first_element_is_selected(self):
        html = _html("<h1>A</h1><p>B</p><p>C</p>", title="T")
        elements = extract_elements(html, BASE)
        assert [e.selected for e in elements] == [True, False, False, False]

    def test_no_candidates_returns_empty_list(self):
        assert extract_elements(_html("<div>nothing here</div>"), BASE) == []

    def test_script_content_is_not_a_paragraph(self):
        html = _html("<script>var p = '<p>fake</p>';</script><p>real</p>")
        elements = extract_elements(html, BASE)
        assert [e.sample for e in elements] == ["real"]


class TestExtract:
    def _run(self, url, handler):
        async def run():
            async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
                return await extract(url, ["https://proxy.test/?url={url}"], client=client)

        return asyncio.run(run())

    def test_normalizes_url_and_returns_result(self):
        html = _html("<h1>Hi</h1>", title="Example Domain")
        result = self._run("example.com", lambda request: httpx.Response(200, text=html))
        assert result.url == "https://example.com"
        assert result.elements[0].id == "title"
        assert result.elements[0].sample == "Example Domain"
        assert "<h1>Hi</h1>" in result.raw_html

    def test_no_elements_raises(self):
        html = _html("<div>plain</div>")
        with pytest.raises(NoElements):
            self._run("https://example.com", lambda request: httpx.Response(200, text=html))

    def test_fetch_failure_propagates(self):
        with pytest.raises(FetchFailure):
            self._run("https://example.com", lambda request: httpx.Response(404))

    def test_invalid_url(self):
        with pytest.raises(InvalidURL):
            self._run("ftp://example.com", lambda request: httpx.Response(200, text="<p>x</p>"))
