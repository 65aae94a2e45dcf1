"""Build the preview tree for a normalised page.

The body HTML is parsed into a ``<div class="html-preview">`` container and
made inert while it is built:

* ``<img>`` with a relative, non-``data:`` ``src`` gets the base URL prefixed.
* ``<a>`` opens in a new tab (``target=_blank``, ``rel=noopener noreferrer``)
  and is marked so a click selects it instead of navigating.
* ``<form>`` loses its submission target and is marked as suppressed.
* Every ``on*`` attribute and every ``javascript:`` URL is stripped.
"""

from __future__ import annotations

from bs4 import BeautifulSoup, Tag

_INERT_ATTR = "data-lickui-inert"


def _absolute_img_src(src: str, base_url: str) -> str:
    if src.startswith(("http:", "https:", "data:", "//")):
        return src
    if src.startswith("/"):
        return f"{base_url}{src}"
    return f"{base_url}/{src}"


def _sanitize(node: Tag, base_url: str) -> None:
    for attr in list(node.attrs):
        if attr.lower().startswith("on"):
            del node[attr]
            continue
        value = node.get(attr)
        if isinstance(value, str) and value.strip().lower().startswith("javascript:"):
            del node[attr]

    if node.name == "img" and node.get("src"):
        node["src"] = _absolute_img_src(node["src"].strip(), base_url)
    elif node.name == "a":
        node["target"] = "_blank"
        node["rel"] = "noopener noreferrer"
        node[_INERT_ATTR] = "click"
    elif node.name == "form":
        for attr in ("action", "method", "target"):
            if attr in node.attrs:
                del node[attr]
        node[_INERT_ATTR] = "submit"


def build_tree(body_html: str, base_url: str, container_class: str) -> Tag:
    """Parse *body_html* under a fresh container and return the container.

    The container is the only child of its own document, so the whole tree
    is replaced wholesale on every load.
    """
    document = BeautifulSoup("", "html.parser")
    container = document.new_tag("div", attrs={"class": container_class})
    document.append(container)

    fragment = BeautifulSoup(body_html or "", "html.parser")
    for child in list(fragment.contents):
        container.append(child.extract())

    for node in container.find_all(True):
        _sanitize(node, base_url)
    return container


def is_inert_link(node: Tag) -> bool:
    return node.name == "a" and node.get(_INERT_ATTR) == "click"


def submission_suppressed(form: Tag) -> bool:
    return form.name == "form" and form.get(_INERT_ATTR) == "submit"


def render_document(root: Tag, scoped_css: str) -> str:
    """Serialise the preview: one scoped ``<style>`` followed by the container."""
    style = f'<style data-lickui-scoped="true">{scoped_css}</style>' if scoped_css else ""
    return style + root.decode()
