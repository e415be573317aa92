"""Tracks whether the user is anchored to the bottom of a scroll container."""

import logging

log = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 80


class ViewportTracker:
    """Maintains the "anchored to bottom" flag from scroll notifications.

    The flag is recomputed from the latest notification only
    (last-write-wins). While no container is attached every operation is a
    no-op and the flag keeps its previous value.
    """

    def __init__(self, threshold: float = DEFAULT_THRESHOLD) -> None:
        if threshold < 0:
            raise ValueError(f"threshold must be non-negative, got {threshold}")
        self.threshold = threshold
        self._container: object | None = None
        self._anchored = True  # a fresh view starts at the newest entry

    @property
    def container(self) -> object | None:
        return self._container

    @property
    def attached(self) -> bool:
        return self._container is not None

    def attach(self, container: object) -> None:
        """Start observing `container`."""
        log.debug(f"Tracking viewport of {type(container).__name__}")
        self._container = container

    def detach(self) -> None:
        """Stop observing. State is left as it was."""
        self._container = None

    def on_scroll(self, offset: float, visible: float, extent: float) -> None:
        """Recompute the flag from the container's scroll metrics.

        Args:
            offset: Current scroll offset from the top
            visible: Height of the visible region
            extent: Total height of the scrollable content
        """
        if self._container is None:
            return
        # Negative measurements come from mounting races; treat them as zero
        offset, visible, extent = max(offset, 0), max(visible, 0), max(extent, 0)
        distance = extent - (offset + visible)
        self._anchored = distance < self.threshold

    def is_anchored(self) -> bool:
        return self._anchored
