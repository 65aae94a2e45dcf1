"""Preview session endpoints: load, inspect, select and edit a page.

Routes
------
POST   /sessions                              Create an empty session
GET    /sessions/quick-prompts                Canned chat prompts keyed by name
DELETE /sessions/{id}                         Drop a session
POST   /sessions/{id}/load                    Body: {"url": "https://..."}
GET    /sessions/{id}/html                    Rendered preview (scoped <style> + container)
POST   /sessions/{id}/selection/start         Enter selecting mode
POST   /sessions/{id}/selection/cancel        Leave selecting mode (Escape)
DELETE /sessions/{id}/selection               Clear the current selection
POST   /sessions/{id}/hover                   Body: {"selector": "..."}
POST   /sessions/{id}/click                   Body: {"selector": "..."}
POST   /sessions/{id}/apply                   Body: {"css": [...], "actions": [...], "message": "..."}
POST   /sessions/{id}/chat                    Body: {"message": "..."} or {"quick": "dark_mode"}
GET    /sessions/{id}/conversation            Greeting, system prompt and chat history

Note: this router is mounted with prefix ``/sessions`` in ``app.py``.
"""

from __future__ import annotations

from typing import Any

from bs4 import Tag
from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import HTMLResponse, JSONResponse, Response
from pydantic import BaseModel
from soupsieve import SelectorSyntaxError

from lickui.assistant.chat import send_message
from lickui.assistant.conversation import QUICK_PROMPTS, quick_prompt
from lickui.errors import InvalidInputError, NoPageLoadedError, SessionNotFoundError
from lickui.mutation.models import InstructionBatch
from lickui.session import PreviewSession

router = APIRouter()


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------

class LoadRequest(BaseModel):
    url: str


class NodeRequest(BaseModel):
    selector: str


class ChatRequest(BaseModel):
    message: str = ""
    quick: str | None = None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _session(request: Request, session_id: str) -> PreviewSession:
    try:
        return request.app.state.sessions.get(session_id)
    except SessionNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


def _loaded_session(request: Request, session_id: str) -> PreviewSession:
    session = _session(request, session_id)
    if not session.loaded:
        raise HTTPException(status_code=409, detail="No page has been loaded in this session.")
    return session


def _node(session: PreviewSession, selector: str) -> Tag:
    try:
        node = session.find(selector)
    except SelectorSyntaxError as exc:
        raise HTTPException(status_code=422, detail=f"Invalid selector: {exc}") from exc
    if node is None:
        raise HTTPException(status_code=404, detail=f"No element matches '{selector}'.")
    return node


def _selection_out(session: PreviewSession) -> dict[str, Any]:
    return {
        "state": session.state.value,
        "path": session.selected_path or None,
    }


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post("", status_code=201)
def create_session_endpoint(request: Request) -> dict[str, Any]:
    session = request.app.state.sessions.create()
    return {"id": session.id}


@router.get("/quick-prompts")
def quick_prompts_endpoint() -> dict[str, str]:
    return dict(QUICK_PROMPTS)


@router.delete("/{session_id}", status_code=204, response_class=Response, response_model=None)
def delete_session_endpoint(session_id: str, request: Request) -> Response:
    _session(request, session_id)
    request.app.state.sessions.delete(session_id)
    return Response(status_code=204)


@router.post("/{session_id}/load")
async def load_endpoint(session_id: str, body: LoadRequest, request: Request) -> JSONResponse:
    """Load a page through the proxy and render it into the session."""
    session = _session(request, session_id)
    result = await session.load(body.url)
    if result is None:
        raise HTTPException(status_code=409, detail="Superseded by a newer load.")
    page = result.page
    content: dict[str, Any] = {
        "success": page.success,
        "title": page.title,
        "baseUrl": page.base_url,
    }
    if page.error is not None:
        content["error"] = page.error
    return JSONResponse(content=content, status_code=result.status_code)


@router.get("/{session_id}/html", response_class=HTMLResponse)
def html_endpoint(session_id: str, request: Request) -> HTMLResponse:
    session = _loaded_session(request, session_id)
    return HTMLResponse(session.render())


@router.post("/{session_id}/selection/start")
def start_selection_endpoint(session_id: str, request: Request) -> dict[str, Any]:
    session = _loaded_session(request, session_id)
    session.begin_selection()
    return _selection_out(session)


@router.post("/{session_id}/selection/cancel")
def cancel_selection_endpoint(session_id: str, request: Request) -> dict[str, Any]:
    session = _loaded_session(request, session_id)
    session.cancel_selection()
    return _selection_out(session)


@router.delete("/{session_id}/selection")
def clear_selection_endpoint(session_id: str, request: Request) -> dict[str, Any]:
    session = _loaded_session(request, session_id)
    session.clear_selection()
    return _selection_out(session)


@router.post("/{session_id}/hover")
def hover_endpoint(session_id: str, body: NodeRequest, request: Request) -> dict[str, Any]:
    session = _loaded_session(request, session_id)
    highlighted = session.hover(_node(session, body.selector))
    return {"highlighted": highlighted}


@router.post("/{session_id}/click")
def click_endpoint(session_id: str, body: NodeRequest, request: Request) -> dict[str, Any]:
    session = _loaded_session(request, session_id)
    result = session.click(_node(session, body.selector))
    if result is None:
        raise HTTPException(status_code=422, detail="The control panel is not selectable.")
    return {"path": result.path, "selected": result.selected, "link": result.link}


@router.post("/{session_id}/apply")
def apply_endpoint(session_id: str, body: dict[str, Any], request: Request) -> dict[str, Any]:
    """Apply an instruction batch; individual failures are reported, not raised."""
    session = _loaded_session(request, session_id)
    report = session.apply(InstructionBatch.from_payload(body))
    return report.to_dict()


@router.post("/{session_id}/chat")
async def chat_endpoint(session_id: str, body: ChatRequest, request: Request) -> dict[str, Any]:
    session = _loaded_session(request, session_id)
    message = body.message
    if body.quick:
        try:
            message = quick_prompt(body.quick)
        except InvalidInputError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
    try:
        reply = await send_message(session, message)
    except NoPageLoadedError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return reply.to_dict()


@router.get("/{session_id}/conversation")
def conversation_endpoint(session_id: str, request: Request) -> dict[str, Any]:
    return _session(request, session_id).conversation.to_dict()
