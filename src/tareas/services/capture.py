"""Debounced capture session for interactive task entry.

Every keystroke reschedules a parse; only the newest one is allowed to
update the suggestion tray, so results computed for text the user has
already changed are dropped.
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from tareas.services.parser import ParseResult, Parser
from tareas.services.suggestions import Suggestion, SuggestionTray

logger = logging.getLogger(__name__)


@dataclass
class CaptureSubmission:
    raw_text: str
    applied: list[Suggestion] = field(default_factory=list)
    suggestions: list[Suggestion] = field(default_factory=list)


class CaptureSession:
    """One input box: current text, its chips and the debounced parser."""

    def __init__(
        self,
        parser: Parser,
        debounce_seconds: float | None = None,
        on_update: Callable[[list[Suggestion]], None] | None = None,
    ):
        if debounce_seconds is None:
            from tareas.config import settings

            debounce_seconds = settings.debounce_seconds

        self.parser = parser
        self.debounce_seconds = debounce_seconds
        self.on_update = on_update
        self.tray = SuggestionTray()
        self.text = ""
        self.last_parse: ParseResult | None = None
        self._generation = 0
        self._pending: asyncio.Task[None] | None = None

    @property
    def suggestions(self) -> list[Suggestion]:
        return self.tray.pending

    def on_input(self, text: str) -> None:
        """Record new input and schedule a parse. Must run inside an event loop."""
        self.text = text
        self._generation += 1
        self._cancel_pending()

        if not text.strip():
            self.last_parse = None
            self.tray.clear_pending()
            self._notify()
            return

        self._pending = asyncio.get_running_loop().create_task(
            self._debounced_parse(text, self._generation)
        )

    async def flush(self) -> None:
        """Wait for the scheduled parse, if any, to finish."""
        if self._pending is None:
            return
        try:
            await self._pending
        except asyncio.CancelledError:
            pass

    def accept(self, suggestion: Suggestion) -> None:
        self.tray.accept(suggestion)
        self._notify()

    def dismiss(self, suggestion: Suggestion) -> None:
        self.tray.dismiss(suggestion)
        self._notify()

    def remove(self, suggestion: Suggestion) -> None:
        self.tray.remove(suggestion)
        self._notify()

    def submit(self) -> CaptureSubmission:
        """Hand over the text and chips, then start a fresh session.

        Submitting inside the debounce window parses the current text right
        away, so pending chips never describe text the user already replaced.
        """
        self._cancel_pending()
        if self.text.strip() and (
            self.last_parse is None or self.last_parse.raw_text != self.text
        ):
            self._generation += 1
            self._apply_parse(self.text, self._generation)

        submission = CaptureSubmission(
            raw_text=self.text,
            applied=list(self.tray.applied),
            suggestions=self.tray.finalize(),
        )
        self._restart()
        return submission

    def close(self) -> None:
        """Discard everything without side effects."""
        self._cancel_pending()
        self.tray.reset()
        self._restart()

    async def _debounced_parse(self, text: str, generation: int) -> None:
        await asyncio.sleep(self.debounce_seconds)
        self._apply_parse(text, generation)

    def _apply_parse(self, text: str, generation: int) -> None:
        if generation != self._generation:
            logger.debug("Dropping stale parse")
            return

        self.last_parse = self.parser.parse(text)
        self.tray.update(self.last_parse.suggestions)
        self._notify()

    def _cancel_pending(self) -> None:
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = None

    def _restart(self) -> None:
        self.text = ""
        self.last_parse = None
        self._generation += 1

    def _notify(self) -> None:
        if self.on_update is not None:
            self.on_update(self.tray.pending)
