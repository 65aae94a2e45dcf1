"""Markup normalisation: turns raw page HTML into a self-contained body + CSS pair.

The steps run in a fixed order on a parsed tree (``html.parser``) rather
than as text substitutions, so URLs inside comments or text content are
never touched:

    1. title               (fallback: hostname of the origin)
    2. inline <style>      (concatenated, newline-separated)
    3. <link rel=stylesheet> (resolved, fetched, appended with provenance)
    4. root-relative src/href/url() rewritten against the origin
    5. protocol-relative src/href given the request's scheme
    6. url(/...) and url(../...) in the collected CSS made absolute
    7. <script> removed
    8. <meta http-equiv="refresh"> removed
    9. body content isolated (whole document when there is no <body>)

A step that finds nothing to do is a no-op.  Only a failure to parse or
serialise at all raises :class:`NormalizationError`.
"""

from __future__ import annotations

import logging
from typing import Callable, List
from urllib.parse import urlparse

import tinycss2
from bs4 import BeautifulSoup
from tinycss2.serializer import serialize_string_value, serialize_url

from lickui.errors import NormalizationError
from lickui.scraper.fetcher import fetch_stylesheets
from lickui.scraper.models import NormalizedMarkup

logger = logging.getLogger(__name__)

_URL_ATTRIBUTES = ("src", "href")


# ---------------------------------------------------------------------------
# URL helpers
# ---------------------------------------------------------------------------

def _scheme(requested_protocol: str) -> str:
    """``"https:"`` / ``"https"`` → ``"https:"``."""
    return requested_protocol.rstrip(":").lower() + ":"


def resolve_stylesheet_href(href: str, base_origin: str, requested_protocol: str) -> str:
    """Resolve a ``<link>`` href into a fetchable absolute URL.

    Root-relative hrefs are prefixed with the origin, absolute ones are kept,
    scheme-relative ones get the request's scheme, anything else is treated
    as origin-relative.
    """
    href = href.strip()
    if href.startswith("//"):
        return _scheme(requested_protocol) + href
    if href.startswith("/"):
        return base_origin + href
    if href.lower().startswith(("http://", "https://")):
        return href
    return f"{base_origin}/{href}"


def _absolute_reference(
    value: str,
    base_origin: str,
    requested_protocol: str,
    parent_relative: bool = False,
) -> str | None:
    """Return the rewritten form of *value*, or ``None`` to leave it alone."""
    if value.startswith("//"):
        return _scheme(requested_protocol) + value
    if value.startswith("/"):
        return base_origin + value
    # Only one ``../`` level is dropped; deeper traversal is not resolved.
    if parent_relative and value.startswith("../"):
        return f"{base_origin}/{value[3:]}"
    return None


def _rewrite_tokens(nodes: list, rewrite: Callable[[str], str | None]) -> None:
    for node in nodes:
        node_type = getattr(node, "type", None)
        if node_type == "url":
            new = rewrite(node.value)
            if new is not None:
                node.value = new
                node.representation = f"url({serialize_url(new)})"
        elif node_type == "function":
            if node.lower_name == "url":
                for arg in node.arguments:
                    if arg.type == "string":
                        new = rewrite(arg.value)
                        if new is not None:
                            arg.value = new
                            arg.representation = f'"{serialize_string_value(new)}"'
            else:
                _rewrite_tokens(node.arguments, rewrite)
        elif node_type in ("() block", "[] block", "{} block"):
            _rewrite_tokens(node.content, rewrite)


def rewrite_css_urls(css: str, rewrite: Callable[[str], str | None]) -> str:
    """Apply *rewrite* to every ``url(...)`` reference in *css*.

    Works on the tinycss2 token tree, so strings and comments that merely
    look like ``url(...)`` are left untouched.
    """
    if "url(" not in css.lower():
        return css
    tokens = tinycss2.parse_component_value_list(css, skip_comments=False)
    _rewrite_tokens(tokens, rewrite)
    return tinycss2.serialize(tokens)


# ---------------------------------------------------------------------------
# Tree steps
# ---------------------------------------------------------------------------

def _extract_title(soup: BeautifulSoup, base_origin: str) -> str:
    tag = soup.find("title")
    if tag is not None:
        text = tag.get_text().strip()
        if text:
            return text
    return urlparse(base_origin).hostname or ""


def _collect_inline_css(soup: BeautifulSoup) -> str:
    return "".join(style.get_text() + "\n" for style in soup.find_all("style"))


def _stylesheet_links(soup: BeautifulSoup) -> List[str]:
    hrefs: List[str] = []
    for link in soup.find_all("link", href=True):
        rels = link.get("rel") or []
        if isinstance(rels, str):
            rels = rels.split()
        if any(r.lower() == "stylesheet" for r in rels):
            hrefs.append(link["href"])
    return hrefs


def _rewrite_markup_urls(soup: BeautifulSoup, base_origin: str, requested_protocol: str) -> None:
    def rewrite(value: str) -> str | None:
        return _absolute_reference(value, base_origin, requested_protocol)

    for tag in soup.find_all(True):
        for attr in _URL_ATTRIBUTES:
            value = tag.get(attr)
            if isinstance(value, str):
                new = rewrite(value)
                if new is not None:
                    tag[attr] = new
        inline = tag.get("style")
        if isinstance(inline, str) and inline:
            tag["style"] = rewrite_css_urls(inline, rewrite)

    for style in soup.find_all("style"):
        text = style.get_text()
        new_text = rewrite_css_urls(text, rewrite)
        if new_text != text:
            style.string = new_text


def _strip_active_content(soup: BeautifulSoup) -> None:
    for script in soup.find_all("script"):
        script.decompose()
    for meta in soup.find_all("meta"):
        if str(meta.get("http-equiv", "")).strip().lower() == "refresh":
            meta.decompose()


def _body_content(soup: BeautifulSoup) -> str:
    if soup.body is not None:
        return soup.body.decode_contents()
    return soup.decode()


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

async def normalize(raw_html: str, base_origin: str, requested_protocol: str) -> NormalizedMarkup:
    """Normalise *raw_html* fetched from *base_origin*.

    Args:
        raw_html: Decoded page markup.
        base_origin: Origin of the final (post-redirect) URL.
        requested_protocol: Scheme of the originally requested URL
            (``"http:"`` or ``"https:"``), used for protocol-relative refs.

    Raises:
        NormalizationError: If the markup cannot be parsed or serialised.
    """
    try:
        soup = BeautifulSoup(raw_html, "html.parser")
    except (UnicodeError, ValueError, RecursionError) as exc:
        raise NormalizationError(f"Could not parse page markup: {exc}") from exc

    title = _extract_title(soup, base_origin)
    css = _collect_inline_css(soup)

    hrefs = _stylesheet_links(soup)
    urls = [resolve_stylesheet_href(h, base_origin, requested_protocol) for h in hrefs]
    for url, text in await fetch_stylesheets(urls):
        css += f"\n/* From: {url} */\n{text}\n"

    try:
        _rewrite_markup_urls(soup, base_origin, requested_protocol)
        css = rewrite_css_urls(
            css,
            lambda v: _absolute_reference(v, base_origin, requested_protocol, parent_relative=True),
        )
        _strip_active_content(soup)
        body_html = _body_content(soup)
    except (UnicodeError, RecursionError) as exc:
        raise NormalizationError(f"Could not serialise page markup: {exc}") from exc

    return NormalizedMarkup(body_html=body_html, css=css, title=title)
