"""UI tests driven through the Textual pilot."""

from datetime import datetime, timedelta

import pytest
from textual.widgets import Button, Input

from livechat import config
from livechat.app import ChatApp
from livechat.backend import LocalBackend, LocalIdentity
from livechat.dates import Today, Yesterday
from livechat.models import User
from livechat.widgets import ChatInput, DateHeader, LoginForm, MessageList

BOB = User(uid="bob", email="bob@example.com", display_name="Bob")


async def settle(pilot, rounds: int = 4) -> None:
    """Let snapshots, re-renders and after-refresh scrolls run."""
    for _ in range(rounds):
        await pilot.pause()
    await pilot.wait_for_scheduled_animations()


async def settle_animated(pilot, rounds: int = 4) -> None:
    """Like settle(), but also waits for animated scrolls and any follow-up."""
    for _ in range(rounds):
        await settle(pilot)
        await pilot.wait_for_animation()


async def signed_in(backend: LocalBackend | None = None, **kwargs) -> tuple[ChatApp, User]:
    identity = LocalIdentity()
    user = await identity.sign_up("ann@example.com", "secret1")
    kwargs.setdefault("threshold", 3)
    kwargs.setdefault("smooth", False)
    app = ChatApp(backend=backend or LocalBackend(), identity=identity, **kwargs)
    return app, user


def _today_at(hour: int) -> datetime:
    return datetime.now().replace(hour=hour, minute=0, second=0, microsecond=0)


@pytest.mark.asyncio
async def test_starts_on_login_screen():
    app = ChatApp(backend=LocalBackend(), identity=LocalIdentity(), smooth=False)
    async with app.run_test(size=(100, 40)) as pilot:
        await settle(pilot)
        assert not app.query_one("#login-view").has_class("hidden")
        assert app.query_one("#chat-pane").has_class("hidden")
        assert app.user is None


@pytest.mark.asyncio
async def test_register_then_chat_screen():
    app = ChatApp(backend=LocalBackend(), identity=LocalIdentity(), smooth=False)
    async with app.run_test(size=(100, 40)) as pilot:
        form = app.query_one(LoginForm)
        form.register_mode = True
        await pilot.pause()
        assert str(app.query_one("#login-submit", Button).label) == "Register"

        app.query_one("#email", Input).value = "ann@example.com"
        app.query_one("#password", Input).value = "secret1"
        app.query_one("#login-submit", Button).press()
        await settle(pilot)

        assert app.user is not None
        assert app.user.email == "ann@example.com"
        assert app.query_one("#login-view").has_class("hidden")
        assert not app.query_one("#chat-pane").has_class("hidden")
        assert app.query_one("#password", Input).value == ""
        assert config.get_last_email() == "ann@example.com"


@pytest.mark.asyncio
async def test_bad_credentials_stay_on_login():
    identity = LocalIdentity()
    app = ChatApp(backend=LocalBackend(), identity=identity, smooth=False)
    async with app.run_test(size=(100, 40)) as pilot:
        app.query_one(LoginForm).post_message(
            LoginForm.Submitted("ghost@example.com", "whatever", register=False)
        )
        await settle(pilot)
        assert app.user is None
        assert not app.query_one("#login-view").has_class("hidden")
        assert config.get_last_email() == ""


@pytest.mark.asyncio
async def test_send_message():
    backend = LocalBackend()
    app, user = await signed_in(backend)
    async with app.run_test(size=(80, 24)) as pilot:
        await settle(pilot)
        chat_input = app.query_one("#input", ChatInput)
        chat_input.value = "hello there"
        chat_input.focus()
        await pilot.pause()
        await pilot.press("enter")
        await settle(pilot)

        assert chat_input.value == ""
        [entry] = backend.snapshot()
        assert entry.text == "hello there"
        assert entry.uid == user.uid
        messages = app.query_one(MessageList).message_widgets
        assert [m.entry.text for m in messages] == ["hello there"]
        assert messages[0].mine


@pytest.mark.asyncio
async def test_blank_message_not_sent():
    backend = LocalBackend()
    app, _ = await signed_in(backend)
    async with app.run_test(size=(80, 24)) as pilot:
        await settle(pilot)
        app.query_one("#input", ChatInput).value = "   "
        app.query_one("#input", ChatInput).focus()
        await pilot.pause()
        await pilot.press("enter")
        await settle(pilot)
        assert backend.snapshot() == []
        assert app.query_one("#input", ChatInput).value == "   "


@pytest.mark.asyncio
async def test_date_headers_once_per_day():
    yesterday = _today_at(12) - timedelta(days=1)
    stamps = [yesterday, yesterday + timedelta(hours=1), _today_at(0) + timedelta(minutes=5)]
    backend = LocalBackend(clock=iter(stamps).__next__)
    await backend.create(BOB, "one")
    await backend.create(BOB, "two")
    await backend.create(BOB, "three")

    app, _ = await signed_in(backend)
    async with app.run_test(size=(80, 40)) as pilot:
        await settle(pilot)
        headers = [h.label for h in app.query(DateHeader) if h.display]
        assert headers == [Yesterday(), Today()]
        messages = app.query_one(MessageList).message_widgets
        assert [m.entry.text for m in messages] == ["one", "two", "three"]
        assert not any(m.mine for m in messages)


@pytest.mark.asyncio
async def test_edit_own_message():
    backend = LocalBackend()
    app, user = await signed_in(backend)
    entry_id = await backend.create(user, "helo")
    async with app.run_test(size=(80, 24)) as pilot:
        await settle(pilot)
        message = app.query_one(MessageList).message_for(entry_id)
        message.start_editing()
        await pilot.pause()
        assert message.editing
        editor = message.query_one(".edit-input", Input)
        assert editor.value == "helo"

        editor.value = "hello"
        message.query_one(".save-btn", Button).press()
        await settle(pilot)

        assert not message.editing
        assert backend.snapshot()[0].text == "hello"
        assert message.entry.text == "hello"


@pytest.mark.asyncio
async def test_cancel_edit_keeps_text():
    backend = LocalBackend()
    app, user = await signed_in(backend)
    entry_id = await backend.create(user, "original")
    async with app.run_test(size=(80, 24)) as pilot:
        await settle(pilot)
        message = app.query_one(MessageList).message_for(entry_id)
        message.start_editing()
        await pilot.pause()
        message.query_one(".edit-input", Input).value = "changed"
        message.query_one(".cancel-btn", Button).press()
        await settle(pilot)
        assert not message.editing
        assert backend.snapshot()[0].text == "original"


@pytest.mark.asyncio
async def test_only_one_editor_open():
    backend = LocalBackend()
    app, user = await signed_in(backend)
    first = await backend.create(user, "first")
    second = await backend.create(user, "second")
    async with app.run_test(size=(80, 24)) as pilot:
        await settle(pilot)
        chat_view = app.query_one(MessageList)
        chat_view.message_for(first).start_editing()
        await pilot.pause()
        chat_view.message_for(second).start_editing()
        await settle(pilot)
        assert not chat_view.message_for(first).editing
        assert chat_view.message_for(second).editing


@pytest.mark.asyncio
async def test_delete_own_message():
    backend = LocalBackend()
    app, user = await signed_in(backend)
    keep = await backend.create(user, "keep")
    drop = await backend.create(user, "drop")
    async with app.run_test(size=(80, 24)) as pilot:
        await settle(pilot)
        chat_view = app.query_one(MessageList)
        chat_view.message_for(drop).query_one(".delete-btn", Button).press()
        await settle(pilot)
        assert [e.id for e in backend.snapshot()] == [keep]
        assert [m.entry.id for m in chat_view.message_widgets] == [keep]


@pytest.mark.asyncio
async def test_other_users_messages_are_read_only():
    backend = LocalBackend()
    entry_id = await backend.create(BOB, "bob's")
    app, _ = await signed_in(backend)
    async with app.run_test(size=(80, 24)) as pilot:
        await settle(pilot)
        message = app.query_one(MessageList).message_for(entry_id)
        assert not message.mine
        message.start_editing()
        await pilot.pause()
        assert not message.editing


@pytest.mark.asyncio
async def test_sign_out_returns_to_login():
    backend = LocalBackend()
    app, user = await signed_in(backend)
    await backend.create(user, "hi")
    async with app.run_test(size=(80, 24)) as pilot:
        await settle(pilot)
        assert app.query_one(MessageList).message_widgets
        app.query_one("#sign-out", Button).press()
        await settle(pilot)
        assert app.user is None
        assert not app.query_one("#login-view").has_class("hidden")
        assert app.query_one(MessageList).message_widgets == []
        assert backend._subscribers == set()


@pytest.mark.asyncio
async def test_follows_new_messages_when_at_bottom():
    backend = LocalBackend()
    for i in range(30):
        await backend.create(BOB, f"message {i}")
    app, _ = await signed_in(backend)
    async with app.run_test(size=(80, 24)) as pilot:
        await settle(pilot)
        chat_view = app.query_one(MessageList)
        assert chat_view.max_scroll_y > 0
        assert chat_view.tracker.is_anchored()
        assert chat_view.max_scroll_y - chat_view.scroll_y < 3

        await backend.create(BOB, "newest")
        await settle(pilot)
        assert chat_view.message_widgets[-1].entry.text == "newest"
        assert chat_view.max_scroll_y - chat_view.scroll_y < 3


@pytest.mark.asyncio
async def test_scrolled_up_view_stays_put():
    backend = LocalBackend()
    for i in range(30):
        await backend.create(BOB, f"message {i}")
    app, _ = await signed_in(backend)
    async with app.run_test(size=(80, 24)) as pilot:
        await settle(pilot)
        chat_view = app.query_one(MessageList)
        chat_view.scroll_home(animate=False)
        await settle(pilot)
        assert chat_view.scroll_y == 0
        assert not chat_view.tracker.is_anchored()

        await backend.create(BOB, "while reading history")
        await settle(pilot)
        assert chat_view.message_widgets[-1].entry.text == "while reading history"
        assert chat_view.scroll_y == 0

        # Returning to the bottom resumes following
        chat_view.scroll_end(animate=False)
        await settle(pilot)
        assert chat_view.tracker.is_anchored()
        await backend.create(BOB, "caught up")
        await settle(pilot)
        assert chat_view.max_scroll_y - chat_view.scroll_y < 3


@pytest.mark.asyncio
async def test_smooth_scroll_follows_back_to_back_messages():
    backend = LocalBackend()
    for i in range(30):
        await backend.create(BOB, f"message {i}")
    # Default threshold from config, animated scrolling
    app, _ = await signed_in(backend, threshold=None, smooth=True)
    async with app.run_test(size=(80, 24)) as pilot:
        await settle_animated(pilot)
        chat_view = app.query_one(MessageList)
        assert chat_view.tracker.threshold == config.get_scroll_threshold()
        assert chat_view.tracker.is_anchored()

        chat_input = app.query_one("#input", ChatInput)
        chat_input.focus()
        for text in ("first of two", "second of two"):
            chat_input.value = text
            await pilot.press("enter")
        await backend.create(BOB, "reply")
        await settle_animated(pilot)

        assert [m.entry.text for m in chat_view.message_widgets[-3:]] == [
            "first of two",
            "second of two",
            "reply",
        ]
        assert chat_view.tracker.is_anchored()
        assert chat_view.max_scroll_y - chat_view.scroll_y < chat_view.tracker.threshold


@pytest.mark.asyncio
async def test_smooth_scroll_user_scroll_up_takes_over():
    backend = LocalBackend()
    for i in range(30):
        await backend.create(BOB, f"message {i}")
    app, _ = await signed_in(backend, smooth=True)
    async with app.run_test(size=(80, 24)) as pilot:
        await settle_animated(pilot)
        chat_view = app.query_one(MessageList)
        assert chat_view.tracker.is_anchored()

        chat_view.action_scroll_home()
        await settle_animated(pilot)
        assert chat_view.scroll_y == 0
        assert not chat_view.tracker.is_anchored()

        await backend.create(BOB, "while reading history")
        await settle_animated(pilot)
        assert chat_view.scroll_y == 0
