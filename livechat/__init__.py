"""livechat - A terminal chat client with live message updates."""

from livechat.app import ChatApp
from livechat.theme import LIVECHAT_THEME, PRIMARY

__all__ = ["ChatApp", "LIVECHAT_THEME", "PRIMARY"]
__version__ = "0.1.0"
