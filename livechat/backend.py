"""Backend collaborators - message store and identity provider.

The UI only depends on the two protocols below. `LocalBackend` and
`LocalIdentity` are in-process implementations used for local runs and
tests: they keep everything in memory and deliver live snapshots the same
way a hosted document store does, including the pending server timestamp
on freshly created messages.
"""

from __future__ import annotations

import asyncio
import hashlib
import logging
import secrets
import uuid
from collections.abc import AsyncIterator, Callable
from dataclasses import replace
from datetime import datetime, timezone
from typing import Protocol

from livechat.errors import AuthError, PermissionDeniedError, RecordNotFoundError
from livechat.models import Entry, User

log = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6

AuthListener = Callable[[User | None], None]
Unsubscribe = Callable[[], None]


class ChatBackend(Protocol):
    """Live document store holding chat messages."""

    def subscribe(self) -> AsyncIterator[list[Entry]]:
        """Yield the full message list, oldest first, on every change."""
        ...

    async def create(self, user: User, text: str) -> str:
        """Add a message authored by `user`. Returns its id."""
        ...

    async def update(self, user: User, entry_id: str, text: str) -> None:
        ...

    async def delete(self, user: User, entry_id: str) -> None:
        ...


class IdentityProvider(Protocol):
    """Account sign-in/sign-out with change notifications."""

    def current_user(self) -> User | None: ...

    def on_auth_state_changed(self, listener: AuthListener) -> Unsubscribe: ...

    async def sign_in(self, email: str, password: str) -> User: ...

    async def sign_up(self, email: str, password: str) -> User: ...

    async def sign_out(self) -> None: ...


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _sort_key(item: tuple[int, Entry]) -> tuple[bool, datetime, int]:
    seq, entry = item
    # Pending timestamps sort after everything that has one
    if entry.created_at is None:
        return (True, datetime.min.replace(tzinfo=timezone.utc), seq)
    created = entry.created_at
    if created.tzinfo is None:
        created = created.astimezone()
    return (False, created, seq)


class LocalBackend:
    """In-memory message store with live subscriptions.

    Args:
        clock: Source of server timestamps (defaults to UTC now)
    """

    def __init__(self, clock: Callable[[], datetime] = _utcnow) -> None:
        self._clock = clock
        self._records: dict[str, tuple[int, Entry]] = {}
        self._seq = 0
        self._subscribers: set[asyncio.Queue[list[Entry]]] = set()

    def snapshot(self) -> list[Entry]:
        """Current messages ordered by creation time ascending."""
        return [entry for _, entry in sorted(self._records.values(), key=_sort_key)]

    def _publish(self) -> None:
        snapshot = self.snapshot()
        for queue in self._subscribers:
            # Only the latest snapshot matters to a subscriber
            while not queue.empty():
                queue.get_nowait()
            queue.put_nowait(snapshot)

    async def subscribe(self) -> AsyncIterator[list[Entry]]:
        queue: asyncio.Queue[list[Entry]] = asyncio.Queue()
        self._subscribers.add(queue)
        log.info(f"Subscriber added ({len(self._subscribers)} active)")
        try:
            yield self.snapshot()
            while True:
                yield await queue.get()
        finally:
            self._subscribers.discard(queue)
            log.info(f"Subscriber removed ({len(self._subscribers)} active)")

    def _get_own(self, user: User, entry_id: str) -> tuple[int, Entry]:
        try:
            seq, entry = self._records[entry_id]
        except KeyError:
            raise RecordNotFoundError(f"Message {entry_id} not found") from None
        if entry.uid != user.uid:
            raise PermissionDeniedError("You can only change your own messages")
        return seq, entry

    async def create(self, user: User, text: str) -> str:
        entry_id = uuid.uuid4().hex
        self._seq += 1
        seq = self._seq
        entry = Entry(
            id=entry_id,
            uid=user.uid,
            name=user.label,
            text=text,
        )
        self._records[entry_id] = (seq, entry)
        self._publish()

        # Server acknowledges the write and assigns the timestamp
        await asyncio.sleep(0)
        if entry_id in self._records:
            seq, entry = self._records[entry_id]
            self._records[entry_id] = (seq, replace(entry, created_at=self._clock()))
            self._publish()
        log.info(f"Message {entry_id} created by {user.uid}")
        return entry_id

    async def update(self, user: User, entry_id: str, text: str) -> None:
        seq, entry = self._get_own(user, entry_id)
        self._records[entry_id] = (seq, replace(entry, text=text))
        self._publish()
        log.info(f"Message {entry_id} updated")

    async def delete(self, user: User, entry_id: str) -> None:
        self._get_own(user, entry_id)
        del self._records[entry_id]
        self._publish()
        log.info(f"Message {entry_id} deleted")


def _hash_password(password: str, salt: bytes) -> bytes:
    return hashlib.pbkdf2_hmac("sha256", password.encode(), salt, 100_000)


class LocalIdentity:
    """In-memory email/password accounts."""

    def __init__(self) -> None:
        # email -> (user, salt, password hash)
        self._accounts: dict[str, tuple[User, bytes, bytes]] = {}
        self._current: User | None = None
        self._listeners: list[AuthListener] = []

    def current_user(self) -> User | None:
        return self._current

    def on_auth_state_changed(self, listener: AuthListener) -> Unsubscribe:
        """Register a listener; it is called immediately with the current user."""
        self._listeners.append(listener)
        listener(self._current)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set_current(self, user: User | None) -> None:
        self._current = user
        for listener in list(self._listeners):
            listener(user)

    async def sign_up(self, email: str, password: str) -> User:
        email = email.strip().lower()
        if not email or "@" not in email:
            raise AuthError("Invalid email address")
        if email in self._accounts:
            raise AuthError("Email already registered")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise AuthError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
            )
        salt = secrets.token_bytes(16)
        user = User(uid=uuid.uuid4().hex, email=email)
        self._accounts[email] = (user, salt, _hash_password(password, salt))
        log.info(f"Registered {email}")
        self._set_current(user)
        return user

    async def sign_in(self, email: str, password: str) -> User:
        account = self._accounts.get(email.strip().lower())
        if account is None:
            raise AuthError("Invalid email or password")
        user, salt, digest = account
        if not secrets.compare_digest(_hash_password(password, salt), digest):
            raise AuthError("Invalid email or password")
        log.info(f"Signed in {user.email}")
        self._set_current(user)
        return user

    async def sign_out(self) -> None:
        if self._current is None:
            return
        log.info(f"Signed out {self._current.email}")
        self._set_current(None)
