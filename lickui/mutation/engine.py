"""Apply instruction batches to a parsed-HTML tree.

Every instruction runs on its own: a bad selector, an unknown property or a
missing target is logged and recorded as a failed outcome, then the next
instruction runs.  Nothing here awaits; a batch is applied synchronously.

When an instruction's selector matches nothing and a node is currently
selected, the selected node stands in as the only match.
"""

from __future__ import annotations

import copy
import logging
from typing import List

from bs4 import Tag
from soupsieve import SelectorSyntaxError

from lickui.errors import InstructionError
from lickui.mutation.models import (
    ActionInstruction,
    ApplicationReport,
    CssInstruction,
    InstructionBatch,
    InstructionOutcome,
)
from lickui.render.selection import in_control_panel, strip_reserved_classes
from lickui.render.styles import css_property_name, remove_style, set_style

logger = logging.getLogger(__name__)


class MutationEngine:
    """Interprets CSS and DOM-action instructions against one render root.

    Args:
        root: The container whose descendants instructions may touch.
        selected: The currently selected node, if any.
    """

    def __init__(self, root: Tag, selected: Tag | None = None) -> None:
        self.root = root
        self.selected = selected

    # ------------------------------------------------------------------
    # Selector resolution
    # ------------------------------------------------------------------
    def _select(self, selector: str) -> List[Tag]:
        if not selector or not selector.strip():
            return []
        try:
            matches = self.root.select(selector)
        except (SelectorSyntaxError, ValueError, NotImplementedError) as exc:
            raise InstructionError(f"Invalid selector {selector!r}: {exc}") from exc
        return [m for m in matches if not in_control_panel(m)]

    def _select_one(self, selector: str) -> Tag | None:
        matches = self._select(selector)
        return matches[0] if matches else None

    def _attached(self, node: Tag) -> bool:
        return any(parent is self.root for parent in node.parents)

    def _resolve(self, selector: str) -> tuple[List[Tag], bool]:
        """Return ``(matches, used_selection)`` with the selection fallback."""
        matches = self._select(selector)
        if not matches and self.selected is not None and self._attached(self.selected):
            return [self.selected], True
        return matches, False

    # ------------------------------------------------------------------
    # Instructions
    # ------------------------------------------------------------------
    def apply_css(self, instruction: CssInstruction) -> InstructionOutcome:
        properties = {css_property_name(p): v for p, v in instruction.styles.items()}
        matches, used_selection = self._resolve(instruction.selector)
        if not matches:
            raise InstructionError(f"No elements found for selector: {instruction.selector}")
        for node in matches:
            for prop, value in properties.items():
                set_style(node, prop, value)
        return InstructionOutcome(
            kind="css",
            selector=instruction.selector,
            applied=True,
            matched=len(matches),
            used_selection=used_selection,
        )

    def apply_action(self, action: ActionInstruction) -> InstructionOutcome:
        matches, used_selection = self._resolve(action.selector)
        if not matches:
            raise InstructionError(f"No elements found for selector: {action.selector}")

        if action.type == "hide":
            for node in matches:
                set_style(node, "display", "none")
        elif action.type == "show":
            for node in matches:
                remove_style(node, "display")
        elif action.type == "text":
            if not action.value:
                raise InstructionError("text action requires a value")
            matches[0].string = action.value
        elif action.type == "move":
            self._move(matches[0], action)
        elif action.type == "remove":
            for node in matches:
                node.extract()

        return InstructionOutcome(
            kind=action.type,
            selector=action.selector,
            applied=True,
            matched=len(matches),
            used_selection=used_selection,
        )

    def _move(self, node: Tag, action: ActionInstruction) -> None:
        if not action.target:
            raise InstructionError("move action requires a target")
        target = self._select_one(action.target)
        if target is None:
            raise InstructionError(f"No elements found for target: {action.target}")
        if target is node or any(parent is node for parent in target.parents):
            raise InstructionError("Cannot move an element into itself")
        if target is self.root and action.position in ("before", "after"):
            raise InstructionError("Cannot place an element outside the preview root")

        clone = copy.copy(node)
        strip_reserved_classes(clone)
        if action.position == "before":
            target.insert_before(clone)
        elif action.position == "after":
            target.insert_after(clone)
        else:
            target.append(clone)
        node.extract()

    # ------------------------------------------------------------------
    # Batches
    # ------------------------------------------------------------------
    def apply(self, batch: InstructionBatch) -> ApplicationReport:
        """Apply all CSS instructions, then all actions, in order."""
        report = ApplicationReport(message=batch.message)
        for reason in batch.rejected:
            logger.warning("Rejected instruction %s", reason)
            report.outcomes.append(
                InstructionOutcome(kind="invalid", selector="", applied=False, error=reason)
            )

        for instruction in [*batch.css, *batch.actions]:
            kind = "css" if isinstance(instruction, CssInstruction) else instruction.type
            try:
                if isinstance(instruction, CssInstruction):
                    outcome = self.apply_css(instruction)
                else:
                    outcome = self.apply_action(instruction)
            except (InstructionError, ValueError) as exc:
                logger.warning("Failed to apply %s on %s: %s", kind, instruction.selector, exc)
                outcome = InstructionOutcome(
                    kind=kind, selector=instruction.selector, applied=False, error=str(exc)
                )
            else:
                logger.info("Applied %s on %s (%d element(s))", kind, instruction.selector, outcome.matched)
            report.outcomes.append(outcome)
        return report


def apply_instructions(
    root: Tag,
    batch: InstructionBatch,
    selected: Tag | None = None,
) -> ApplicationReport:
    """Convenience wrapper around :meth:`MutationEngine.apply`."""
    return MutationEngine(root, selected).apply(batch)
