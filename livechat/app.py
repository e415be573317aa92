"""livechat Textual UI - Main application."""

import logging
import time
from datetime import datetime
from pathlib import Path

from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.widgets import Footer

from livechat import config
from livechat.backend import ChatBackend, IdentityProvider, LocalBackend, LocalIdentity
from livechat.errors import ChatError, log_exception
from livechat.messages import AuthChanged, EntriesChanged
from livechat.models import User
from livechat.theme import LIVECHAT_THEME
from livechat.widgets import ChatInput, ChatMessage, LoginForm, MessageList, UserBar

log = logging.getLogger(__name__)


class ChatApp(App):
    """Main chat application."""

    CSS_PATH = Path(__file__).parent / "styles.tcss"

    BINDINGS = [
        Binding("ctrl+c", "quit", "Quit", priority=True, show=False),
    ]

    def __init__(
        self,
        backend: ChatBackend | None = None,
        identity: IdentityProvider | None = None,
        threshold: float | None = None,
        smooth: bool | None = None,
    ) -> None:
        super().__init__()
        self.backend = backend if backend is not None else LocalBackend()
        self.identity = identity if identity is not None else LocalIdentity()
        self.threshold = threshold if threshold is not None else config.get_scroll_threshold()
        self.smooth = smooth if smooth is not None else config.get_smooth_scroll()
        self.user: User | None = None
        self._unsubscribe_auth = None

    def compose(self) -> ComposeResult:
        with Vertical(id="login-view"):
            yield LoginForm(email=config.get_last_email(), id="login")
        with Vertical(id="chat-pane", classes="hidden"):
            yield UserBar(id="user-bar")
            yield MessageList(id="chat-view", threshold=self.threshold, smooth=self.smooth)
            with Horizontal(id="input-wrapper"):
                yield ChatInput(id="input")
        yield Footer()

    def on_mount(self) -> None:
        self.register_theme(LIVECHAT_THEME)
        self.theme = LIVECHAT_THEME.name
        self._unsubscribe_auth = self.identity.on_auth_state_changed(
            lambda user: self.post_message(AuthChanged(user))
        )

    def on_unmount(self) -> None:
        if self._unsubscribe_auth:
            self._unsubscribe_auth()
            self._unsubscribe_auth = None

    async def on_auth_changed(self, event: AuthChanged) -> None:
        previous, self.user = self.user, event.user
        chat_view = self.query_one("#chat-view", MessageList)
        if event.user is None:
            self.workers.cancel_group(self, "subscription")
            await chat_view.clear()
            self.query_one("#chat-pane").add_class("hidden")
            self.query_one("#login-view").remove_class("hidden")
            self.query_one("#login", LoginForm).focus_first()
            return

        if previous is not None and previous.uid != event.user.uid:
            await chat_view.clear()
        self.query_one("#user-bar", UserBar).set_user(event.user)
        self.query_one("#login-view").add_class("hidden")
        self.query_one("#chat-pane").remove_class("hidden")
        self.query_one("#input", ChatInput).focus()
        self.follow_messages()

    @work(group="subscription", exclusive=True, exit_on_error=False)
    async def follow_messages(self) -> None:
        """Forward every snapshot of the live message list to the UI."""
        log.info("Subscribing to messages")
        async for snapshot in self.backend.subscribe():
            self.post_message(EntriesChanged(snapshot))

    async def on_entries_changed(self, event: EntriesChanged) -> None:
        if self.user is None:
            return  # Snapshot delivered after sign-out
        chat_view = self.query_one("#chat-view", MessageList)
        # One clock reading for every header and time in this pass
        now = datetime.now()
        await chat_view.show_entries(event.entries, self.user.uid, now)

    async def on_login_form_submitted(self, event: LoginForm.Submitted) -> None:
        form = self.query_one("#login", LoginForm)
        try:
            if event.register:
                await self.identity.sign_up(event.email, event.password)
            else:
                await self.identity.sign_in(event.email, event.password)
        except ChatError as e:
            self.notify(log_exception(e, "Sign-in failed"), severity="error")
            return
        form.clear_password()
        config.set_last_email(event.email)

    async def on_user_bar_sign_out_requested(self, event: UserBar.SignOutRequested) -> None:
        try:
            await self.identity.sign_out()
        except ChatError as e:
            self.notify(log_exception(e, "Sign-out failed"), severity="error")

    async def on_chat_input_send(self, event: ChatInput.Send) -> None:
        if self.user is None:
            return
        self.query_one("#input", ChatInput).clear()
        try:
            await self.backend.create(self.user, event.text)
        except ChatError as e:
            self.notify(log_exception(e, "Send failed"), severity="error")

    async def on_chat_message_edit_saved(self, event: ChatMessage.EditSaved) -> None:
        if self.user is None:
            return
        try:
            await self.backend.update(self.user, event.entry_id, event.text)
        except ChatError as e:
            self.notify(log_exception(e, "Edit failed"), severity="error")
        self.query_one("#input", ChatInput).focus()

    async def on_chat_message_delete_requested(
        self, event: ChatMessage.DeleteRequested
    ) -> None:
        if self.user is None:
            return
        try:
            await self.backend.delete(self.user, event.entry_id)
        except ChatError as e:
            self.notify(log_exception(e, "Delete failed"), severity="error")

    def action_quit(self) -> None:
        now = time.time()
        if hasattr(self, "_last_quit_time") and now - self._last_quit_time < 1.0:
            self.exit()
        else:
            self._last_quit_time = now
            self.notify("Press Ctrl+C again to quit")
