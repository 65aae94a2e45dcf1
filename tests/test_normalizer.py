"""Tests for the markup normaliser.

Linked-stylesheet fetching is replaced with an ``AsyncMock`` patched onto
``lickui.scraper.normalizer.fetch_stylesheets`` so no network is touched.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest

from lickui.scraper.normalizer import normalize, resolve_stylesheet_href, rewrite_css_urls

_ORIGIN = "https://example.com"


@pytest.fixture(autouse=True)
def no_stylesheets():
    with patch(
        "lickui.scraper.normalizer.fetch_stylesheets",
        new=AsyncMock(return_value=[]),
    ) as mock:
        yield mock


# ---------------------------------------------------------------------------
# Title / body
# ---------------------------------------------------------------------------

class TestTitleAndBody:
    async def test_title_is_trimmed(self) -> None:
        result = await normalize("<title>  My Page \n</title><p>x</p>", _ORIGIN, "https:")
        assert result.title == "My Page"

    async def test_missing_title_falls_back_to_hostname(self) -> None:
        result = await normalize("<p>x</p>", "https://www.example.com:8443", "https:")
        assert result.title == "www.example.com"

    async def test_body_content_is_isolated(self) -> None:
        html = "<html><head><title>T</title></head><body><h1>Hi</h1></body></html>"
        result = await normalize(html, _ORIGIN, "https:")
        assert result.body_html == "<h1>Hi</h1>"

    async def test_document_without_body_is_kept_whole(self) -> None:
        result = await normalize("<h1>Hi</h1><p>there</p>", _ORIGIN, "https:")
        assert result.body_html == "<h1>Hi</h1><p>there</p>"


# ---------------------------------------------------------------------------
# Active content
# ---------------------------------------------------------------------------

class TestActiveContent:
    async def test_scripts_are_removed(self) -> None:
        html = (
            "<body><script>alert(1)</script><p>ok</p>"
            "<SCRIPT src='/x.js'></SCRIPT></body>"
        )
        result = await normalize(html, _ORIGIN, "https:")
        assert "<script" not in result.body_html.lower()
        assert "<p>ok</p>" in result.body_html

    async def test_meta_refresh_is_removed(self) -> None:
        html = (
            '<meta http-equiv="Refresh" content="0;url=https://elsewhere.example">'
            '<meta charset="utf-8"><p>stay</p>'
        )
        result = await normalize(html, _ORIGIN, "https:")
        assert "refresh" not in result.body_html.lower()
        assert 'charset="utf-8"' in result.body_html


# ---------------------------------------------------------------------------
# URL rewriting in markup
# ---------------------------------------------------------------------------

class TestMarkupUrls:
    async def test_root_relative_src_and_href(self) -> None:
        html = '<body><img src="/logo.png"><a href="/about">About</a></body>'
        result = await normalize(html, _ORIGIN, "https:")
        assert 'src="https://example.com/logo.png"' in result.body_html
        assert 'href="https://example.com/about"' in result.body_html

    async def test_protocol_relative_uses_request_scheme(self) -> None:
        html = '<body><img src="//cdn.example.net/i.png"></body>'
        result = await normalize(html, "http://example.test", "http:")
        assert 'src="http://cdn.example.net/i.png"' in result.body_html

    async def test_document_relative_and_absolute_untouched(self) -> None:
        html = '<body><img src="img/a.png"><a href="https://other.example/x">x</a></body>'
        result = await normalize(html, _ORIGIN, "https:")
        assert 'src="img/a.png"' in result.body_html
        assert 'href="https://other.example/x"' in result.body_html

    async def test_inline_style_attribute_urls(self) -> None:
        html = '<body><div style="background: url(/bg.png)">x</div></body>'
        result = await normalize(html, _ORIGIN, "https:")
        assert "url(https://example.com/bg.png)" in result.body_html

    async def test_text_that_looks_like_a_path_is_untouched(self) -> None:
        html = "<body><p>See src=/docs for more</p></body>"
        result = await normalize(html, _ORIGIN, "https:")
        assert "<p>See src=/docs for more</p>" in result.body_html


# ---------------------------------------------------------------------------
# CSS collection
# ---------------------------------------------------------------------------

class TestCssCollection:
    async def test_inline_styles_concatenated_with_newlines(self) -> None:
        html = "<style>a{color:red}</style><style>b{color:blue}</style><p>x</p>"
        result = await normalize(html, _ORIGIN, "https:")
        assert result.css == "a{color:red}\nb{color:blue}\n"

    async def test_root_relative_css_url_made_absolute(self) -> None:
        html = "<style>body{background:url(/bg.png)}</style>"
        result = await normalize(html, _ORIGIN, "https:")
        assert result.css == "body{background:url(https://example.com/bg.png)}\n"

    async def test_parent_relative_css_url_drops_one_level(self) -> None:
        html = '<style>.x{background:url("../img/x.png")}</style>'
        result = await normalize(html, _ORIGIN, "https:")
        assert 'url("https://example.com/img/x.png")' in result.css

    async def test_linked_stylesheets_appended_with_provenance(self, no_stylesheets) -> None:
        no_stylesheets.return_value = [("https://example.com/main.css", "p{margin:0}")]
        html = '<link rel="stylesheet" href="/main.css"><style>a{}</style><p>x</p>'
        result = await normalize(html, _ORIGIN, "https:")

        no_stylesheets.assert_awaited_once_with(["https://example.com/main.css"])
        assert result.css == "a{}\n\n/* From: https://example.com/main.css */\np{margin:0}\n"

    async def test_non_stylesheet_links_ignored(self, no_stylesheets) -> None:
        html = '<link rel="icon" href="/favicon.ico"><p>x</p>'
        await normalize(html, _ORIGIN, "https:")
        no_stylesheets.assert_awaited_once_with([])

    async def test_failed_stylesheets_leave_css_intact(self, no_stylesheets) -> None:
        no_stylesheets.return_value = []
        html = '<link rel="stylesheet" href="https://cdn.example.net/x.css"><style>a{}</style>'
        result = await normalize(html, _ORIGIN, "https:")
        assert result.css == "a{}\n"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

class TestResolveStylesheetHref:
    @pytest.mark.parametrize(
        "href, expected",
        [
            ("/a.css", "https://example.com/a.css"),
            ("https://cdn.example.net/b.css", "https://cdn.example.net/b.css"),
            ("//cdn.example.net/c.css", "https://cdn.example.net/c.css"),
            ("d.css", "https://example.com/d.css"),
        ],
    )
    def test_resolution(self, href: str, expected: str) -> None:
        assert resolve_stylesheet_href(href, _ORIGIN, "https:") == expected


class TestRewriteCssUrls:
    def test_css_without_urls_returned_as_is(self) -> None:
        css = "a { color: red }"
        assert rewrite_css_urls(css, lambda v: "never") is css

    def test_urls_inside_comments_untouched(self) -> None:
        css = "/* url(/a.png) */ b{background:url(/b.png)}"
        out = rewrite_css_urls(css, lambda v: "X" + v)
        assert "/* url(/a.png) */" in out
        assert "url(X/b.png)" in out

    def test_none_leaves_reference_alone(self) -> None:
        css = "b{background:url(img/b.png)}"
        assert rewrite_css_urls(css, lambda v: None) == css
