"""Preview sessions: one rendered page, its selection and its chat.

A :class:`PreviewSession` replaces the single global panel of a browser
extension with an explicit object, so several previews (or tests) can run
side by side without sharing state.

Selection lifecycle::

    IDLE --begin_selection()--> SELECTING
    SELECTING --click(node)--> IDLE        (node becomes the selection)
    SELECTING --cancel_selection()--> IDLE (Escape)
    any --clear_selection()--> selection dropped

Only the most recent :meth:`PreviewSession.load` may update the session; a
result that arrives after a newer load was issued is ignored.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict
from urllib.parse import urlparse
from uuid import uuid4

from bs4 import BeautifulSoup, Tag

from lickui import proxy
from lickui.assistant.conversation import Conversation, build_system_prompt, describe_page
from lickui.config import settings
from lickui.errors import NoPageLoadedError, SessionNotFoundError
from lickui.mutation.engine import apply_instructions
from lickui.mutation.models import ApplicationReport, InstructionBatch
from lickui.proxy import ProxyResponse
from lickui.render.renderer import build_tree, render_document
from lickui.render.scoper import scope_css
from lickui.render.selection import (
    HIGHLIGHT_CLASS,
    SELECTED_CLASS,
    SelectionState,
    in_control_panel,
    selection_path,
)
from lickui.scraper.models import NormalizedPage

logger = logging.getLogger(__name__)

PageLoader = Callable[[str], Awaitable[ProxyResponse]]


@dataclass
class ClickResult:
    path: str
    selected: bool
    link: str | None = None


def _add_class(node: Tag, name: str) -> None:
    classes = node.get("class") or []
    if isinstance(classes, str):
        classes = classes.split()
    if name not in classes:
        node["class"] = [*classes, name]


def _remove_class(node: Tag, name: str) -> None:
    classes = node.get("class") or []
    if isinstance(classes, str):
        classes = classes.split()
    remaining = [c for c in classes if c != name]
    if remaining:
        node["class"] = remaining
    elif "class" in node.attrs:
        del node["class"]


class PreviewSession:
    def __init__(
        self,
        container_class: str | None = None,
        max_depth: int | None = None,
        session_id: str | None = None,
    ) -> None:
        self.id = session_id or uuid4().hex
        self.container_class = container_class or settings.container_class
        self.max_depth = settings.selection_max_depth if max_depth is None else max_depth
        self.root: Tag | None = None
        self.page: NormalizedPage | None = None
        self.scoped_css = ""
        self.state = SelectionState.IDLE
        self.selected: Tag | None = None
        self.selected_path = ""
        self.highlighted: Tag | None = None
        self.conversation = Conversation()
        self._load_generation = 0

    @classmethod
    def from_document(cls, html: str, hostname: str = "", **kwargs) -> PreviewSession:
        """Wrap a live, already-rendered document (no scoping, root = ``<body>``)."""
        session = cls(**kwargs)
        soup = BeautifulSoup(html, "html.parser")
        session.root = soup.body if soup.body is not None else soup
        title = soup.title.get_text().strip() if soup.title else ""
        session.conversation.pin_system(
            build_system_prompt(hostname, title, describe_page(session.root))
        )
        return session

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------
    @property
    def loaded(self) -> bool:
        return self.root is not None

    def require_root(self) -> Tag:
        if self.root is None:
            raise NoPageLoadedError("No page has been loaded in this session.")
        return self.root

    async def load(self, url: str, loader: PageLoader | None = None) -> ProxyResponse | None:
        """Fetch *url* through the proxy and render it.

        Returns ``None`` when a newer :meth:`load` superseded this one.
        """
        self._load_generation += 1
        generation = self._load_generation
        response = await (loader or proxy.handle)(url)
        if generation != self._load_generation:
            logger.info("Discarding stale load of %s in session %s", url, self.id)
            return None
        if response.page.success:
            self.show(response.page)
        return response

    def show(self, page: NormalizedPage) -> None:
        """Replace the rendered tree and its scoped stylesheet with *page*."""
        self.root = build_tree(page.body_html, page.base_url, self.container_class)
        self.scoped_css = scope_css(page.css, f".{self.container_class}")
        self.page = page
        self.state = SelectionState.IDLE
        self.selected = None
        self.selected_path = ""
        self.highlighted = None
        self.conversation.pin_system(
            build_system_prompt(
                urlparse(page.base_url).hostname or "",
                page.title,
                describe_page(self.root),
            )
        )

    def render(self) -> str:
        return render_document(self.require_root(), self.scoped_css)

    def find(self, selector: str) -> Tag | None:
        for node in self.require_root().select(selector):
            if not in_control_panel(node):
                return node
        return None

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------
    def begin_selection(self) -> None:
        self.require_root()
        self.state = SelectionState.SELECTING

    def _clear_highlight(self) -> None:
        if self.highlighted is not None:
            _remove_class(self.highlighted, HIGHLIGHT_CLASS)
            self.highlighted = None

    def hover(self, node: Tag) -> bool:
        """Highlight *node* as the selection candidate (only while selecting)."""
        if self.state is not SelectionState.SELECTING or in_control_panel(node):
            return False
        self._clear_highlight()
        _add_class(node, HIGHLIGHT_CLASS)
        self.highlighted = node
        return True

    def click(self, node: Tag) -> ClickResult | None:
        """Handle a click on *node*.

        While selecting, the click is consumed and *node* becomes the
        selection.  Otherwise the path is reported along with the link the
        click would open in a new tab, if any.  Clicks inside the control
        panel are ignored.
        """
        root = self.require_root()
        if in_control_panel(node):
            return None
        path = selection_path(node, root, self.max_depth)
        if self.state is SelectionState.SELECTING:
            self.select(node)
            self.stop_selection()
            return ClickResult(path=path, selected=True)

        link = None
        for candidate in (node, *node.parents):
            if candidate is root:
                break
            if isinstance(candidate, Tag) and candidate.name == "a" and candidate.get("href"):
                link = candidate["href"]
                break
        return ClickResult(path=path, selected=False, link=link)

    def stop_selection(self) -> None:
        self.state = SelectionState.IDLE
        self._clear_highlight()

    def cancel_selection(self) -> None:
        """Escape: leave selecting mode without changing the selection."""
        self.stop_selection()

    def select(self, node: Tag) -> str:
        self.clear_selection()
        self._clear_highlight()
        _add_class(node, SELECTED_CLASS)
        self.selected = node
        self.selected_path = selection_path(node, self.require_root(), self.max_depth)
        return self.selected_path

    def clear_selection(self) -> None:
        if self.selected is not None:
            _remove_class(self.selected, SELECTED_CLASS)
        if self.root is not None:
            for node in self.root.select(f".{SELECTED_CLASS}"):
                _remove_class(node, SELECTED_CLASS)
        self.selected = None
        self.selected_path = ""

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------
    def apply(self, batch: InstructionBatch) -> ApplicationReport:
        root = self.require_root()
        report = apply_instructions(root, batch, self.selected)
        if self.selected is not None and not any(p is root for p in self.selected.parents):
            self.clear_selection()
        if self.highlighted is not None and not any(p is root for p in self.highlighted.parents):
            self.highlighted = None
        return report


class SessionStore:
    """In-process registry of preview sessions keyed by id."""

    def __init__(self) -> None:
        self._sessions: Dict[str, PreviewSession] = {}

    def create(self) -> PreviewSession:
        session = PreviewSession()
        self._sessions[session.id] = session
        return session

    def get(self, session_id: str) -> PreviewSession:
        try:
            return self._sessions[session_id]
        except KeyError:
            raise SessionNotFoundError(f"Session '{session_id}' not found.") from None

    def delete(self, session_id: str) -> None:
        self.get(session_id)
        del self._sessions[session_id]

    def __len__(self) -> int:
        return len(self._sessions)
