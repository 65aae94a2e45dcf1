"""Tests for the page-editing chat assistant.

The chat model is never contacted: ``lickui.assistant.chat._get_llm`` is
patched to return a ``MagicMock`` whose ``ainvoke`` is an ``AsyncMock``.
"""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from lickui.assistant.chat import apply_reply, send_message
from lickui.assistant.conversation import GREETING, Conversation, build_context_prompt, quick_prompt
from lickui.errors import InvalidInputError, NoPageLoadedError
from lickui.proxy import ProxyResponse
from lickui.scraper.models import NormalizedPage
from lickui.session import PreviewSession

_REPLY = json.dumps({
    "css": [{"selector": "h1", "styles": {"color": "red"}}],
    "actions": [],
    "message": "Made the heading red",
})


def _fake_llm(content: str = _REPLY) -> MagicMock:
    llm = MagicMock()
    llm.ainvoke = AsyncMock(return_value=MagicMock(content=content))
    return llm


@pytest.fixture(autouse=True)
def openai_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("lickui.config.settings.llm_provider", "openai")
    monkeypatch.setattr("lickui.config.settings.openai_api_key", "sk-test")
    monkeypatch.setattr("lickui.config.settings.chat_history_turns", 10)


@pytest.fixture()
async def session() -> PreviewSession:
    page = NormalizedPage(
        body_html='<nav>menu</nav><h1 style="width: 50%">Welcome home</h1>',
        css="",
        base_url="https://example.com",
        title="Home",
        success=True,
    )
    s = PreviewSession()
    await s.load("https://example.com/", loader=AsyncMock(return_value=ProxyResponse(page)))
    return s


# ---------------------------------------------------------------------------
# send_message
# ---------------------------------------------------------------------------

class TestSendMessage:
    async def test_json_reply_is_applied(self, session: PreviewSession) -> None:
        with patch("lickui.assistant.chat._get_llm", return_value=_fake_llm()):
            reply = await send_message(session, "make the heading red")

        assert reply.type == "success"
        assert reply.content == "✓ Made the heading red"
        assert reply.report is not None and reply.report.ok
        assert "color: red" in session.find("h1")["style"]

    async def test_history_starts_with_system_prompt(self, session: PreviewSession) -> None:
        llm = _fake_llm()
        with patch("lickui.assistant.chat._get_llm", return_value=llm):
            await send_message(session, "hide the nav")

        messages = llm.ainvoke.await_args.args[0]
        assert messages[0]["role"] == "system"
        assert "Page title: Home" in messages[0]["content"]
        assert messages[-1] == {"role": "user", "content": "hide the nav"}

    async def test_conversation_records_both_turns(self, session: PreviewSession) -> None:
        with patch("lickui.assistant.chat._get_llm", return_value=_fake_llm()):
            await send_message(session, "make the heading red")

        roles = [m["role"] for m in session.conversation.messages]
        assert roles == ["user", "assistant"]
        assert session.conversation.messages[1]["content"] == _REPLY

    async def test_selected_element_described_in_prompt(self, session: PreviewSession) -> None:
        session.select(session.find("h1"))
        llm = _fake_llm()
        with patch("lickui.assistant.chat._get_llm", return_value=llm):
            await send_message(session, "center this")

        prompt = llm.ainvoke.await_args.args[0][-1]["content"]
        assert prompt.startswith("[Selected element: h1\nTag: h1\n")
        assert "width=50%" in prompt
        assert 'Text content: "Welcome home..."' in prompt
        assert prompt.endswith("User request: center this")

    async def test_plain_text_reply_shown_verbatim(self, session: PreviewSession) -> None:
        with patch("lickui.assistant.chat._get_llm", return_value=_fake_llm("I cannot do that.")):
            reply = await send_message(session, "do something odd")

        assert reply.content == "I cannot do that."
        assert reply.type is None
        assert reply.report is None

    async def test_empty_message_is_refused(self, session: PreviewSession) -> None:
        with patch("lickui.assistant.chat._get_llm") as get_llm:
            reply = await send_message(session, "   ")
        assert reply.type == "error"
        get_llm.assert_not_called()

    async def test_pending_request_blocks_a_second_one(self, session: PreviewSession) -> None:
        session.conversation.pending = True
        with patch("lickui.assistant.chat._get_llm") as get_llm:
            reply = await send_message(session, "again")
        assert reply.content == "Please wait for the previous response."
        get_llm.assert_not_called()

    async def test_missing_api_key(self, session: PreviewSession, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("lickui.config.settings.openai_api_key", "")
        reply = await send_message(session, "make it blue")
        assert reply.to_dict() == {"content": "API key not configured.", "type": "error", "report": None}

    async def test_ollama_needs_no_api_key(self, session: PreviewSession, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("lickui.config.settings.llm_provider", "ollama")
        monkeypatch.setattr("lickui.config.settings.openai_api_key", "")
        with patch("lickui.assistant.chat._get_llm", return_value=_fake_llm()):
            reply = await send_message(session, "make the heading red")
        assert reply.type == "success"

    async def test_model_failure_clears_pending(self, session: PreviewSession) -> None:
        llm = MagicMock()
        llm.ainvoke = AsyncMock(side_effect=RuntimeError("rate limited"))
        with patch("lickui.assistant.chat._get_llm", return_value=llm):
            reply = await send_message(session, "make the heading red")

        assert reply.type == "error"
        assert reply.content == "Error: rate limited"
        assert session.conversation.pending is False

    async def test_requires_a_loaded_page(self) -> None:
        with pytest.raises(NoPageLoadedError):
            await send_message(PreviewSession(), "hello")


# ---------------------------------------------------------------------------
# apply_reply / conversation helpers
# ---------------------------------------------------------------------------

class TestApplyReply:
    async def test_default_message(self, session: PreviewSession) -> None:
        reply = apply_reply(session, 'Here you go: {"actions": [{"type": "hide", "selector": "nav"}]}')
        assert reply.content == "✓ Changes applied!"
        assert "display: none" in session.find("nav")["style"]

    async def test_partial_failures_still_succeed(self, session: PreviewSession) -> None:
        reply = apply_reply(
            session,
            '{"css": [{"selector": ".nope", "styles": {"color": "red"}}], "message": "Tried"}',
        )
        assert reply.type == "success"
        assert reply.report.failures[0].selector == ".nope"


class TestConversation:
    def test_history_is_bounded(self) -> None:
        conversation = Conversation(system_prompt="sys")
        for i in range(6):
            conversation.append("user", str(i))
        history = conversation.history(3)
        assert [m["content"] for m in history] == ["sys", "3", "4", "5"]

    def test_context_prompt_without_selection(self) -> None:
        assert build_context_prompt("hello", None, "") == "hello"

    def test_to_dict_leads_with_greeting(self) -> None:
        conversation = Conversation(system_prompt="sys")
        conversation.append("user", "hi")
        assert conversation.to_dict() == {
            "greeting": GREETING,
            "system": "sys",
            "messages": [{"role": "user", "content": "hi"}],
            "pending": False,
        }

    def test_quick_prompt_lookup(self) -> None:
        assert quick_prompt("larger_text") == "Make all text larger"
        with pytest.raises(InvalidInputError, match="Unknown quick prompt: sepia"):
            quick_prompt("sepia")
