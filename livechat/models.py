"""Chat records shared between the backend and the UI."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class User:
    """A signed-in account as reported by the identity provider."""

    uid: str
    email: str
    display_name: str | None = None

    @property
    def label(self) -> str:
        """Name shown in the UI and stamped on outgoing messages."""
        return self.display_name or self.email


@dataclass(frozen=True)
class Entry:
    """One chat message.

    `created_at` is None until the backend assigns the server timestamp.
    """

    id: str
    uid: str
    name: str
    text: str
    created_at: datetime | None = None
