"""Chat assistant: turns natural-language requests into page instructions."""

from lickui.assistant.chat import ChatReply, apply_reply, send_message
from lickui.assistant.conversation import QUICK_PROMPTS, Conversation, quick_prompt

__all__ = [
    "ChatReply",
    "Conversation",
    "QUICK_PROMPTS",
    "apply_reply",
    "quick_prompt",
    "send_message",
]
