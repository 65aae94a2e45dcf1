"""Selection paths and the element-selection state machine."""

from __future__ import annotations

from enum import Enum
from typing import List

from bs4 import Tag

# Subtree reserved for the floating control panel; never selectable.
CONTROL_PANEL_ID = "lickui-root"
RESERVED_CLASS_PREFIX = "lickui"
HIGHLIGHT_CLASS = "lickui-highlight"
SELECTED_CLASS = "lickui-selected"


class SelectionState(str, Enum):
    IDLE = "idle"
    SELECTING = "selecting"


def in_control_panel(node: Tag) -> bool:
    """Return ``True`` if *node* is the control panel or lives inside it."""
    current: Tag | None = node
    while current is not None:
        if isinstance(current, Tag) and current.get("id") == CONTROL_PANEL_ID:
            return True
        current = current.parent
    return False


def _classes(node: Tag, max_len: int | None = None) -> List[str]:
    raw = node.get("class") or []
    if isinstance(raw, str):
        raw = raw.split()
    return [
        c for c in raw
        if c and not c.startswith(RESERVED_CLASS_PREFIX)
        and (max_len is None or len(c) < max_len)
    ]


def _segment(node: Tag) -> str:
    classes = _classes(node)[:2]
    if classes:
        return node.name + "." + ".".join(classes)
    return node.name


def selection_path(node: Tag, root: Tag, max_depth: int | None = None) -> str:
    """Return the selection path for *node* relative to *root*.

    Walks upwards until *root* (exclusive).  A node with an id contributes
    ``#id`` and stops the walk; other nodes contribute ``tag`` plus up to two
    classes.  Segments are joined with ``" > "``.  *max_depth* bounds the
    number of segments (``None`` or ``0`` means unbounded).

    The path is best-effort: siblings sharing tag and classes yield the same
    path.
    """
    parts: List[str] = []
    current: Tag | None = node
    while current is not None and current is not root and isinstance(current, Tag):
        if current.name == "[document]":
            break
        if max_depth and len(parts) >= max_depth:
            break
        node_id = current.get("id")
        if node_id:
            parts.insert(0, f"#{node_id}")
            break
        parts.insert(0, _segment(current))
        current = current.parent
    return " > ".join(parts)


def best_selector(node: Tag) -> str:
    """Short selector describing *node* alone (used for page summaries)."""
    node_id = node.get("id")
    if node_id:
        return f"#{node_id}"
    classes = _classes(node, max_len=30)[:2]
    if classes:
        return node.name + "." + ".".join(classes)
    return node.name


def strip_reserved_classes(node: Tag) -> None:
    """Remove ``lickui*`` marker classes from *node* and its descendants."""
    for current in [node, *node.find_all(True)]:
        raw = current.get("class")
        if not raw:
            continue
        if isinstance(raw, str):
            raw = raw.split()
        kept = [c for c in raw if not c.startswith(RESERVED_CLASS_PREFIX)]
        if kept:
            current["class"] = kept
        else:
            del current["class"]
