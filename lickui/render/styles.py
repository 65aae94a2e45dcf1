"""Inline ``style`` attribute helpers for parsed-HTML nodes."""

from __future__ import annotations

import re
from typing import Dict

import tinycss2
from bs4 import Tag

_PROPERTY_RE = re.compile(r"^(--[A-Za-z0-9_-]+|-?[a-z][a-z0-9-]*)$")
_CAMEL_RE = re.compile(r"(?<=[a-z0-9])([A-Z])")


def css_property_name(name: str) -> str:
    """Normalise a DOM-style property name to its CSS form.

    ``backgroundColor`` → ``background-color``, ``cssFloat`` → ``float``,
    ``WebkitTransform`` → ``-webkit-transform``.  Custom properties
    (``--brand``) are returned verbatim.

    Raises:
        ValueError: If the result is not a syntactically valid property name.
    """
    name = name.strip()
    if name.startswith("--"):
        converted = name
    else:
        if name == "cssFloat":
            name = "float"
        converted = _CAMEL_RE.sub(lambda m: "-" + m.group(1).lower(), name)
        if converted[:1].isupper():
            converted = "-" + converted[0].lower() + converted[1:]
        converted = converted.lower()
    if not _PROPERTY_RE.match(converted):
        raise ValueError(f"Invalid CSS property: {name!r}")
    return converted


def parse_inline_style(style: str | None) -> Dict[str, str]:
    """Parse a ``style`` attribute into an ordered ``{property: value}`` map."""
    result: Dict[str, str] = {}
    if not style:
        return result
    for decl in tinycss2.parse_declaration_list(style, skip_comments=True, skip_whitespace=True):
        if decl.type != "declaration":
            continue
        value = tinycss2.serialize(decl.value).strip()
        if decl.important:
            value += " !important"
        result[decl.lower_name if not decl.name.startswith("--") else decl.name] = value
    return result


def serialize_inline_style(styles: Dict[str, str]) -> str:
    return "; ".join(f"{prop}: {value}" for prop, value in styles.items())


def _write(node: Tag, styles: Dict[str, str]) -> None:
    if styles:
        node["style"] = serialize_inline_style(styles)
    elif "style" in node.attrs:
        del node["style"]


def set_style(node: Tag, prop: str, value: object) -> None:
    """Set one inline property on *node*; an empty value removes it."""
    name = css_property_name(prop)
    styles = parse_inline_style(node.get("style"))
    text = "" if value is None else str(value).strip()
    if text:
        styles[name] = text
    else:
        styles.pop(name, None)
    _write(node, styles)


def remove_style(node: Tag, prop: str) -> None:
    set_style(node, prop, "")


def get_style(node: Tag, prop: str) -> str | None:
    return parse_inline_style(node.get("style")).get(css_property_name(prop))
