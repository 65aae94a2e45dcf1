"""Preview rendering: CSS scoping, tree building and element selection."""

from lickui.render.renderer import build_tree, render_document
from lickui.render.scoper import scope_css
from lickui.render.selection import SelectionState, selection_path

__all__ = ["build_tree", "render_document", "scope_css", "SelectionState", "selection_path"]
