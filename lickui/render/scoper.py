"""Namespace a stylesheet under one container selector.

The stylesheet is parsed with tinycss2 and rebuilt rule by rule:

* ``@import`` is dropped (its target has already been inlined).
* ``@font-face``, ``@keyframes`` and every other at-rule without nested
  style rules pass through untouched.
* Grouping at-rules (``@media``, ``@supports``, ``@layer``, ``@container``
  and ``@scope``) keep their prelude; only the rules inside are scoped.
  Block-less statements such as ``@layer a, b;`` pass through.
* Ordinary rules get the container prepended to every selector in their
  comma-separated list, unless the selector already carries it.

Scoping is meant to happen once per fetched page; the "already prefixed"
check makes a second pass a no-op.
"""

from __future__ import annotations

import logging

import tinycss2

logger = logging.getLogger(__name__)

_NESTING_AT_RULES = {"media", "supports", "layer", "container", "scope"}


def _split_selectors(prelude: list) -> list[str]:
    """Split a rule prelude on top-level commas.

    Commas inside ``:is(a, b)`` and friends live in function blocks, so they
    never split.
    """
    groups: list[list] = [[]]
    for token in prelude:
        if token.type == "literal" and token.value == ",":
            groups.append([])
        else:
            groups[-1].append(token)
    return [tinycss2.serialize(g).strip() for g in groups]


def _scope_rule(rule, container: str) -> str:
    prelude = tinycss2.serialize(rule.prelude)
    selectors = [s for s in _split_selectors(rule.prelude) if s]
    body = "{" + tinycss2.serialize(rule.content) + "}"
    if not selectors or all(container in s for s in selectors):
        return prelude + body

    scoped = [s if container in s else f"{container} {s}" for s in selectors]
    trailing = " " if prelude[-1:].isspace() else ""
    return ", ".join(scoped) + trailing + body


def _scope_nodes(nodes: list, container: str) -> str:
    out: list[str] = []
    for node in nodes:
        if node.type == "qualified-rule":
            out.append(_scope_rule(node, container))
        elif node.type == "at-rule":
            keyword = node.lower_at_keyword
            if keyword == "import":
                continue
            if keyword in _NESTING_AT_RULES and node.content is not None:
                inner = tinycss2.parse_rule_list(
                    node.content, skip_comments=False, skip_whitespace=False
                )
                out.append(
                    f"@{node.at_keyword}{tinycss2.serialize(node.prelude)}"
                    f"{{{_scope_nodes(inner, container)}}}"
                )
            else:
                out.append(node.serialize())
        elif node.type == "error":
            logger.debug("Dropping unparsable CSS: %s", node.message)
        else:
            out.append(node.serialize())
    return "".join(out)


def scope_css(css: str, container: str) -> str:
    """Return *css* with every style rule restricted to *container*.

    Args:
        css: The stylesheet text.
        container: The namespacing selector, e.g. ``".html-preview"``.
    """
    if not css:
        return ""
    rules = tinycss2.parse_stylesheet(css, skip_comments=False, skip_whitespace=False)
    return _scope_nodes(rules, container)
