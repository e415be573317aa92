"""Message list container with bottom-anchored auto-scroll."""

import logging
from collections.abc import Sequence
from datetime import datetime
from functools import partial

from textual.containers import VerticalScroll
from textual.scrollbar import ScrollTo

from livechat.autoscroll import AutoScrollController
from livechat.dates import group_by_day
from livechat.models import Entry
from livechat.viewport import DEFAULT_THRESHOLD, ViewportTracker
from livechat.widgets.chat import ChatMessage

log = logging.getLogger(__name__)


class MessageList(VerticalScroll):
    """VerticalScroll that follows new messages while the user is at the bottom.

    Every change of `scroll_y` is fed to a ViewportTracker. After each
    snapshot is rendered the AutoScrollController decides whether to reveal
    the newest message; the scroll runs after the next refresh so the new
    widgets have been laid out, and a burst of snapshots scrolls once.

    Scrolling up to read history clears the anchor, so new messages no
    longer move the view until the user returns near the bottom.
    """

    DEFAULT_CSS = """
    MessageList {
        scrollbar-size-vertical: 1;
    }
    """

    def __init__(
        self,
        *args,
        threshold: float = DEFAULT_THRESHOLD,
        smooth: bool = True,
        **kwargs,
    ) -> None:
        super().__init__(*args, **kwargs)
        self.smooth = smooth
        self.tracker = ViewportTracker(threshold)
        self.controller: AutoScrollController[Entry] = AutoScrollController(
            self.tracker, self._scroll_to_entry, schedule=self.call_after_refresh
        )
        self._messages: dict[str, ChatMessage] = {}
        self._entries: Sequence[Entry] = ()
        self._follow_id = 0
        self._active_follow: int | None = None  # our own animated scroll is running
        self._followed: Sequence[Entry] = ()

    def on_mount(self) -> None:
        self.tracker.attach(self)

    def on_unmount(self) -> None:
        self.tracker.detach()

    def watch_scroll_y(self, old_value: float, new_value: float) -> None:
        """React to scroll position changes after they complete."""
        super().watch_scroll_y(old_value, new_value)
        if self._active_follow is not None:
            # Intermediate frames of our own animation are not user scrolls
            return
        self._sample()

    def _sample(self) -> None:
        self.tracker.on_scroll(
            self.scroll_y,
            self.scrollable_content_region.height,
            self.virtual_size.height,
        )

    def message_for(self, entry_id: str) -> ChatMessage | None:
        return self._messages.get(entry_id)

    @property
    def message_widgets(self) -> list[ChatMessage]:
        """Mounted message widgets in display order."""
        return [child for child in self.children if isinstance(child, ChatMessage)]

    async def show_entries(
        self, entries: Sequence[Entry], current_uid: str | None, now: datetime
    ) -> None:
        """Render a snapshot, reusing widgets of messages already shown.

        Args:
            entries: Full message list, oldest first
            current_uid: Signed-in user; their messages get edit controls
            now: Time snapshot shared by every header and timestamp of the pass
        """
        wanted = {entry.id for entry in entries}
        stale = [m for key, m in self._messages.items() if key not in wanted]
        for key in [key for key in self._messages if key not in wanted]:
            del self._messages[key]
        if stale:
            await self.remove_children(stale)

        previous: ChatMessage | None = None
        for entry, header in group_by_day(entries, now):
            widget = self._messages.get(entry.id)
            if widget is None:
                widget = ChatMessage(entry, now, header, mine=entry.uid == current_uid)
                self._messages[entry.id] = widget
                if previous is not None:
                    await self.mount(widget, after=previous)
                elif self.children:
                    await self.mount(widget, before=0)
                else:
                    await self.mount(widget)
            else:
                widget.refresh_entry(entry, now, header)
                self._keep_order(widget, previous)
            previous = widget

        self._entries = entries
        log.debug(f"Rendered {len(entries)} messages, removed {len(stale)}")
        self.controller.on_entries_changed(entries)

    def _keep_order(self, widget: ChatMessage, previous: ChatMessage | None) -> None:
        children = list(self.children)
        index = children.index(widget)
        if previous is None:
            if index != 0:
                self.move_child(widget, before=0)
        elif index != children.index(previous) + 1:
            self.move_child(widget, after=previous)

    def on_chat_message_edit_started(self, event: ChatMessage.EditStarted) -> None:
        # One editor at a time
        for message in self._messages.values():
            if message is not event.chat_message:
                message.stop_editing()

    async def clear(self) -> None:
        """Drop every message, e.g. after sign-out."""
        self._messages.clear()
        await self.remove_children()

    def _scroll_to_entry(self, entry: Entry) -> None:
        widget = self._messages.get(entry.id)
        if widget is None or not widget.is_mounted:
            return
        if not self.smooth:
            self.scroll_to_widget(widget, animate=False)
            return
        self._follow_id += 1
        follow_id = self._follow_id
        previous = self._active_follow, self._followed
        self._active_follow, self._followed = follow_id, self._entries
        started = self.scroll_to_widget(
            widget,
            animate=True,
            on_complete=partial(self._finish_following, follow_id),
        )
        if not started and self._active_follow == follow_id:
            # Already in view; an earlier animation, if any, keeps running
            self._active_follow, self._followed = previous

    def _finish_following(self, follow_id: int) -> None:
        """Resume tracking at the animation's end position."""
        if follow_id != self._active_follow:
            return  # Superseded by a newer scroll or by the user
        self._active_follow = None
        self._sample()
        if self._entries is not self._followed:
            # Messages arrived during the animation
            self.controller.on_entries_changed(self._entries)

    def _user_scroll(self) -> None:
        """The user took over; their scrolls are tracked from here on."""
        self._active_follow = None

    def action_scroll_up(self) -> None:
        self._user_scroll()
        super().action_scroll_up()

    def action_scroll_down(self) -> None:
        self._user_scroll()
        super().action_scroll_down()

    def action_page_up(self) -> None:
        self._user_scroll()
        super().action_page_up()

    def action_page_down(self) -> None:
        self._user_scroll()
        super().action_page_down()

    def action_scroll_home(self) -> None:
        self._user_scroll()
        super().action_scroll_home()

    def action_scroll_end(self) -> None:
        self._user_scroll()
        super().action_scroll_end()

    def _on_mouse_scroll_up(self, event) -> None:
        self._user_scroll()
        super()._on_mouse_scroll_up(event)

    def _on_mouse_scroll_down(self, event) -> None:
        self._user_scroll()
        super()._on_mouse_scroll_down(event)

    def _on_scroll_to(self, message: ScrollTo) -> None:
        """User dragged scrollbar."""
        self._user_scroll()
        super()._on_scroll_to(message)
