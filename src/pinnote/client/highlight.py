import asyncio
from uuid import UUID

DEFAULT_HIGHLIGHT_SECONDS = 10.0


class HighlightTimer:
    """Keeps at most one comment highlighted, for a fixed window after it was opened."""

    def __init__(self, duration: float = DEFAULT_HIGHLIGHT_SECONDS) -> None:
        self._duration = duration
        self._active: UUID | None = None
        self._handle: asyncio.TimerHandle | None = None

    @property
    def active(self) -> UUID | None:
        return self._active

    def highlight(self, comment_id: UUID) -> None:
        """Highlight comment_id, replacing any highlight still running."""
        self._cancel_timer()
        self._active = comment_id
        self._handle = asyncio.get_running_loop().call_later(self._duration, self._expire, comment_id)

    def clear(self) -> None:
        self._cancel_timer()
        self._active = None

    def _expire(self, comment_id: UUID) -> None:
        if self._active == comment_id:
            self._active = None
        self._handle = None

    def _cancel_timer(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
