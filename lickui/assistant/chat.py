"""Natural-language page editing through a chat model.

``send_message`` turns one user request into instructions:

    1. Describe the selected element (if any) in front of the request.
    2. Send the pinned system prompt plus recent history to the model.
    3. Pull the first JSON object out of the reply and apply it.
    4. If the reply holds no JSON object, show it verbatim instead.

Only one request may be pending per conversation; a second one is refused
without calling the model.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from lickui.assistant.conversation import build_context_prompt
from lickui.config import settings
from lickui.mutation.extraction import extract_json_object
from lickui.mutation.models import ApplicationReport, InstructionBatch

if TYPE_CHECKING:
    from lickui.session import PreviewSession

logger = logging.getLogger(__name__)


@dataclass
class ChatReply:
    content: str
    type: str | None = None  # "success", "error" or None for plain text
    report: ApplicationReport | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "content": self.content,
            "type": self.type,
            "report": self.report.to_dict() if self.report is not None else None,
        }


# ---------------------------------------------------------------------------
# LLM helper
# ---------------------------------------------------------------------------

def _get_llm() -> Any:
    """Return a configured LangChain chat model based on ``settings``."""
    if settings.llm_provider == "openai":
        from langchain_openai import ChatOpenAI

        return ChatOpenAI(
            model=settings.openai_chat_model,
            temperature=settings.llm_temperature,
            max_tokens=settings.llm_max_tokens,
            api_key=settings.openai_api_key,
        )

    from langchain_ollama import ChatOllama

    return ChatOllama(
        model=settings.ollama_chat_model,
        temperature=settings.llm_temperature,
        num_predict=settings.llm_max_tokens,
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def apply_reply(session: PreviewSession, reply_text: str) -> ChatReply:
    """Apply a model reply to *session*, or fall back to the raw text."""
    payload = extract_json_object(reply_text)
    if payload is None:
        return ChatReply(content=reply_text)

    batch = InstructionBatch.from_payload(payload)
    report = session.apply(batch)
    message = batch.message or "Changes applied!"
    return ChatReply(content=f"✓ {message}", type="success", report=report)


async def send_message(session: PreviewSession, text: str) -> ChatReply:
    """Send one user request for *session*'s page and apply the answer.

    Raises:
        NoPageLoadedError: If the session has nothing rendered yet.
    """
    session.require_root()
    conversation = session.conversation
    text = text.strip()
    if not text:
        return ChatReply(content="Please describe the change you want.", type="error")
    if conversation.pending:
        return ChatReply(content="Please wait for the previous response.", type="error")
    if settings.llm_provider == "openai" and not settings.openai_api_key:
        return ChatReply(content="API key not configured.", type="error")

    prompt = build_context_prompt(text, session.selected, session.selected_path)
    conversation.append("user", prompt)
    conversation.pending = True
    try:
        llm = _get_llm()
        response = await llm.ainvoke(conversation.history(settings.chat_history_turns))
        reply_text = response.content if hasattr(response, "content") else str(response)
        if not isinstance(reply_text, str):
            reply_text = json.dumps(reply_text)
    except Exception as exc:  # noqa: BLE001
        logger.error("Chat model call failed: %s", exc)
        return ChatReply(content=f"Error: {exc}", type="error")
    finally:
        conversation.pending = False

    conversation.append("assistant", reply_text)
    return apply_reply(session, reply_text)
