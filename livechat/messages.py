"""Textual messages carrying backend events into the UI."""

from textual.message import Message

from livechat.models import Entry, User


class EntriesChanged(Message):
    """Posted for every snapshot of the live message subscription."""

    def __init__(self, entries: list[Entry]) -> None:
        self.entries = entries
        super().__init__()


class AuthChanged(Message):
    """Posted when a user signs in or out."""

    def __init__(self, user: User | None) -> None:
        self.user = user
        super().__init__()
