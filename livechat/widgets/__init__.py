"""Textual widgets for the chat UI."""

from livechat.widgets.auth import LoginForm, UserBar
from livechat.widgets.chat import ChatInput, ChatMessage, DateHeader
from livechat.widgets.scroll import MessageList

__all__ = [
    "LoginForm",
    "UserBar",
    "ChatInput",
    "ChatMessage",
    "DateHeader",
    "MessageList",
]
