"""Conversation state and prompt construction for the page-editing chat."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List

from bs4 import Tag

from lickui.errors import InvalidInputError
from lickui.render.selection import best_selector, in_control_panel
from lickui.render.styles import parse_inline_style

GREETING = "Hi! Select an element or describe what you want to change."

# Canned prompts offered next to the chat input.
QUICK_PROMPTS = {
    "dark_mode": "Apply dark mode to this page",
    "hide_nav": "Hide the navigation bar",
    "larger_text": "Make all text larger",
}

_CONTEXT_GROUPS = (
    ("Header/Nav", "header, nav, .header, .navbar, [role='banner']", 2),
    ("Main content", "main, article, .main, .content, [role='main']", 2),
    ("Footer", "footer, .footer", 1),
    ("Search", "input[type='search'], .search-box, [role='search']", 2),
)


@dataclass
class Conversation:
    """Role-tagged chat history with one pinned system entry.

    The system entry is always first and is replaced whenever a new page is
    loaded; every other message is append-only.
    """

    system_prompt: str = ""
    messages: List[dict[str, str]] = field(default_factory=list)
    pending: bool = False

    def pin_system(self, prompt: str) -> None:
        self.system_prompt = prompt

    def append(self, role: str, content: str) -> None:
        self.messages.append({"role": role, "content": content})

    def history(self, max_turns: int) -> List[dict[str, str]]:
        """System entry followed by the last *max_turns* messages."""
        recent = self.messages[-max_turns:] if max_turns > 0 else []
        return [{"role": "system", "content": self.system_prompt}, *recent]

    def to_dict(self) -> dict[str, Any]:
        return {
            "greeting": GREETING,
            "system": self.system_prompt,
            "messages": list(self.messages),
            "pending": self.pending,
        }


def quick_prompt(name: str) -> str:
    """Return the canned prompt registered as *name*.

    Raises:
        InvalidInputError: No quick prompt has that name.
    """
    try:
        return QUICK_PROMPTS[name]
    except KeyError as exc:
        raise InvalidInputError(f"Unknown quick prompt: {name}") from exc


def describe_page(root: Tag | None) -> str:
    """List the key landmarks of the page as ``- Label: selector`` lines."""
    if root is None:
        return "No specific elements identified"
    lines: List[str] = []
    for label, selector, limit in _CONTEXT_GROUPS:
        found = [n for n in root.select(selector) if not in_control_panel(n)]
        for node in found[:limit]:
            lines.append(f"- {label}: {best_selector(node)}")
    return "\n".join(lines) or "No specific elements identified"


def build_system_prompt(hostname: str, title: str, page_context: str) -> str:
    return f"""You are LickUI, an AI that modifies website UI using CSS and DOM manipulation.

When the user describes a change, respond ONLY with valid JSON in this exact format:
{{
  "css": [{{"selector": "CSS_SELECTOR", "styles": {{"property": "value"}}}}],
  "actions": [{{"type": "move|hide|show|text|remove", "selector": "CSS_SELECTOR", "target": "TARGET_SELECTOR", "position": "before|after|inside", "value": "TEXT"}}],
  "message": "Brief description of what was done"
}}

Rules:
1. Use camelCase for CSS properties (backgroundColor, not background-color)
2. For "move" actions, the element is cloned to the target location and the original removed
3. For "hide" set display:none, for "show" remove display:none
4. If user says something like "bottom right", use position:fixed and right:0, bottom:0
5. Be creative with selectors - use IDs, classes, tag names, or combinations
6. If unsure, make your best guess based on typical website structure
7. ALWAYS respond with valid JSON only, no extra text

The current page is: {hostname}
Page title: {title}

Key elements on this page:
{page_context}"""


def build_context_prompt(text: str, selected: Tag | None, selected_path: str) -> str:
    """Prefix *text* with a description of the selected node, if any."""
    if selected is None:
        return text
    styles = parse_inline_style(selected.get("style"))
    snippet = selected.get_text()[:50]
    return (
        f"[Selected element: {selected_path}\n"
        f"Tag: {selected.name}\n"
        f"Current styles: position={styles.get('position', 'static')}, "
        f"display={styles.get('display', '')}, width={styles.get('width', 'auto')}, "
        f"height={styles.get('height', 'auto')}\n"
        f'Text content: "{snippet}..."]\n\n'
        f"User request: {text}"
    )
