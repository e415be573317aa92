"""Snap the message list to its newest entry when the user is anchored."""

import logging
from collections.abc import Callable, Sequence
from typing import Generic, TypeVar

from livechat.viewport import ViewportTracker

log = logging.getLogger(__name__)

T = TypeVar("T")


class AutoScrollController(Generic[T]):
    """Issues one "reveal last entry" action per qualifying change.

    Without a scheduler the action runs immediately. With one (e.g. Textual's
    `call_after_refresh`) the action is deferred to the end of the render
    pass; further changes before it runs only update the target, so a burst
    of changes yields a single scroll.
    """

    def __init__(
        self,
        tracker: ViewportTracker,
        scroll_to: Callable[[T], None],
        schedule: Callable[[Callable[[], None]], object] | None = None,
    ) -> None:
        self._tracker = tracker
        self._scroll_to = scroll_to
        self._schedule = schedule
        self._latest: Sequence[T] = ()
        self._pending = False

    @property
    def pending(self) -> bool:
        return self._pending

    def on_entries_changed(self, entries: Sequence[T]) -> bool:
        """Evaluate a new entry sequence (oldest first).

        Returns True if a scroll was issued or scheduled.
        """
        self._latest = entries
        if not self._tracker.attached or not entries:
            return False
        if not self._tracker.is_anchored():
            return False
        if self._schedule is None:
            self._scroll_to(entries[-1])
            return True
        if self._pending:
            # already scheduled for this pass, it will read _latest
            return False
        self._pending = True
        self._schedule(self._flush)
        return True

    def _flush(self) -> None:
        self._pending = False
        entries = self._latest
        if not self._tracker.attached or not entries:
            return
        if self._tracker.is_anchored():
            log.debug(f"Scrolling to last of {len(entries)} entries")
            self._scroll_to(entries[-1])
