"""Chat widgets - messages, date headers, and input."""

from __future__ import annotations

from datetime import datetime

from rich.text import Text
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.css.query import NoMatches
from textual.message import Message
from textual.widgets import Button, Input, Static

from livechat.dates import BucketLabel, format_label, format_message_time
from livechat.models import Entry


class DateHeader(Static):
    """Day separator shown above the first message of each day."""

    def __init__(self, label: BucketLabel | None = None, **kwargs) -> None:
        super().__init__(format_label(label) if label is not None else "", **kwargs)
        self.label = label

    def on_mount(self) -> None:
        self.set_label(self.label)

    def set_label(self, label: BucketLabel | None) -> None:
        self.label = label
        self.display = label is not None
        self.update(format_label(label) if label is not None else "")


class ChatMessage(Vertical):
    """A single chat message, editable in place when it belongs to the user.

    Messages are reused across snapshots: `refresh_entry()` updates the content
    without remounting, so an edit in progress survives live updates.
    """

    BINDINGS = [Binding("escape", "cancel_edit", "Cancel", show=False)]

    class EditStarted(Message):
        """Posted when the user opens the inline editor."""

        def __init__(self, chat_message: ChatMessage) -> None:
            self.chat_message = chat_message
            super().__init__()

    class EditSaved(Message):
        def __init__(self, entry_id: str, text: str) -> None:
            self.entry_id = entry_id
            self.text = text
            super().__init__()

    class DeleteRequested(Message):
        def __init__(self, entry_id: str) -> None:
            self.entry_id = entry_id
            super().__init__()

    def __init__(
        self,
        entry: Entry,
        now: datetime,
        header: BucketLabel | None = None,
        mine: bool = False,
    ) -> None:
        super().__init__(classes="mine" if mine else "")
        self.entry = entry
        self.header = header
        self.mine = mine
        self._now = now

    @property
    def editing(self) -> bool:
        return self.has_class("editing")

    def compose(self) -> ComposeResult:
        yield DateHeader(self.header)
        with Horizontal(classes="meta"):
            yield Static(self._author(), classes="author")
            yield Static(self._time(), classes="time")
        yield Static(self.entry.text, classes="text", markup=False)
        with Horizontal(classes="editor"):
            yield Input(classes="edit-input")
            yield Button("Save", classes="save-btn")
            yield Button("Cancel", classes="cancel-btn")
        with Horizontal(classes="controls"):
            yield Button("Edit", classes="edit-btn")
            yield Button("Delete", classes="delete-btn")

    def _author(self) -> Text:
        return Text(self.entry.name, style="bold")

    def _time(self) -> str:
        if self.entry.created_at is None:
            return ""
        return format_message_time(self.entry.created_at, self._now)

    def refresh_entry(self, entry: Entry, now: datetime, header: BucketLabel | None) -> None:
        """Refresh with the latest snapshot of the entry."""
        self.entry = entry
        self.header = header
        self._now = now
        try:
            self.query_one(DateHeader).set_label(header)
            self.query_one(".author", Static).update(self._author())
            self.query_one(".time", Static).update(self._time())
            self.query_one(".text", Static).update(entry.text)
        except NoMatches:
            pass  # Not composed yet; compose() reads the new state

    def start_editing(self) -> None:
        if not self.mine or self.editing:
            return
        editor = self.query_one(".edit-input", Input)
        editor.value = self.entry.text
        self.add_class("editing")
        editor.focus()
        self.post_message(self.EditStarted(self))

    def stop_editing(self) -> None:
        self.remove_class("editing")

    def action_cancel_edit(self) -> None:
        self.stop_editing()

    def _save(self) -> None:
        text = self.query_one(".edit-input", Input).value
        self.stop_editing()
        if text.strip() and text != self.entry.text:
            self.post_message(self.EditSaved(self.entry.id, text))

    def on_button_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        if event.button.has_class("edit-btn"):
            self.start_editing()
        elif event.button.has_class("delete-btn"):
            self.post_message(self.DeleteRequested(self.entry.id))
        elif event.button.has_class("save-btn"):
            self._save()
        elif event.button.has_class("cancel-btn"):
            self.stop_editing()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        if self.editing:
            self._save()


class ChatInput(Input):
    """Single-line message box. Enter sends the text; blank text is ignored."""

    class Send(Message):
        """Posted with the text to send."""

        def __init__(self, text: str) -> None:
            self.text = text
            super().__init__()

    def __init__(self, **kwargs) -> None:
        kwargs.setdefault("placeholder", "Type a message...")
        super().__init__(**kwargs)

    async def action_submit(self) -> None:
        text = self.value.strip()
        if text:
            self.post_message(self.Send(text))
