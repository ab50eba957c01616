"""
Query Router - Classifies each keystroke and dispatches it to one handler.

Every text change bumps a generation counter. Handlers either answer
synchronously (calculator, command, web, app search) or hand back an
awaitable (file search). Whatever comes back is only published if its
generation is still the current one, so a slow answer for an old
keystroke can never overwrite the results for a newer one.
"""

import asyncio
import inspect
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

from loguru import logger

from lodestar.search.modes import Classification, Mode, classify

SYSTEM_SETTING_HINT = " - System Setting"


class ResultKind(str, Enum):
    APP = "app"
    FILE = "file"
    COMMAND = "command"
    WEB = "web"
    CALC = "calc"


@dataclass
class ResultRecord:
    """A single search result from any handler."""
    kind: ResultKind
    primary_text: str
    secondary_text: str = ""
    icon: str = "image-missing"
    # AppIndexEntry (app), absolute path (file), command string (command),
    # URL (web) or the formatted number (calc)
    payload: Any = None
    is_system_setting: bool = False

    def __post_init__(self):
        if not self.primary_text:
            raise ValueError("ResultRecord.primary_text must not be empty")

    @property
    def sort_key(self) -> str:
        return self.primary_text.lower()


@dataclass(frozen=True)
class Suggestion:
    """Inline autocomplete offered for the selected app."""
    text: str
    is_replacement: bool  # True: replace the typed text, False: append suffix
    hint: str = ""


@dataclass
class QueryState:
    """Everything the router knows about the current query."""
    raw_text: str = ""
    mode: Mode = Mode.EMPTY
    generation: int = 0
    results: list[ResultRecord] = field(default_factory=list)
    selected_index: int = -1


class SearchHandler(ABC):
    """Base class for all search handlers."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Handler identifier."""
        ...

    @property
    @abstractmethod
    def mode(self) -> Mode:
        """The query mode this handler answers."""
        ...

    @abstractmethod
    def get_results(
        self, query: Classification, limit: int
    ) -> list[ResultRecord] | Awaitable[Optional[list[ResultRecord]]]:
        """Return results, or an awaitable resolving to them (None = cancelled)."""
        ...

    def cancel(self) -> None:
        """Stop any in-flight work. Synchronous handlers have none."""


class QueryRouter:
    """Routes queries to the handler for their mode and owns QueryState."""

    def __init__(
        self,
        max_results: int = 10,
        engine_prefixes: Optional[dict[str, str]] = None,
        on_change: Optional[Callable[["QueryRouter"], None]] = None,
    ):
        self.max_results = max_results
        self.engine_prefixes = engine_prefixes
        self.on_change = on_change
        self.state = QueryState()
        self._handlers: dict[Mode, SearchHandler] = {}
        self._pending: set[asyncio.Task] = set()

    def register(self, handler: SearchHandler) -> None:
        """Register a handler, replacing any earlier one for the same mode."""
        self._handlers[handler.mode] = handler

    # -- queries -----------------------------------------------------------

    def on_text_changed(self, text: str) -> None:
        """
        Handle a (debounced) text change from the search entry.

        Synchronous modes are published before this returns. Asynchronous
        modes clear the current results right away, notify, and publish
        when the handler answers, provided no newer text has arrived in
        the meantime.
        File search needs a running event loop.
        """
        state = self.state
        state.generation += 1
        generation = state.generation
        state.raw_text = text or ""
        self._cancel_handlers()

        query = classify(state.raw_text, self.engine_prefixes)
        results = self._dispatch(query)

        if query.mode == Mode.CALCULATOR and not results:
            # Not a valid calculation after all; treat it as an app search
            query = Classification(Mode.APP_SEARCH, state.raw_text.strip())
            results = self._dispatch(query)

        state.mode = query.mode

        if inspect.isawaitable(results):
            state.results = []
            state.selected_index = -1
            task = asyncio.ensure_future(self._await_results(generation, results))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)
            self._notify()
            return

        self._publish(generation, results)

    def _dispatch(self, query: Classification):
        if query.mode == Mode.EMPTY:
            return []
        handler = self._handlers.get(query.mode)
        if handler is None:
            logger.debug(f"No handler registered for {query.mode.value}")
            return []
        return handler.get_results(query, self.max_results)

    async def _await_results(self, generation: int, pending: Awaitable) -> None:
        try:
            results = await pending
        except Exception:
            logger.exception(f"Search for generation {generation} failed")
            results = []

        if results is None:
            # Cancelled search: nothing to report
            return
        self._publish(generation, results)

    def _publish(self, generation: int, results: list[ResultRecord]) -> bool:
        state = self.state
        if generation != state.generation:
            logger.debug(
                f"Discarding stale results for generation {generation} "
                f"(current {state.generation})"
            )
            return False

        state.results = list(results[:self.max_results])
        state.selected_index = 0 if state.results else -1
        self._notify()
        return True

    def _notify(self) -> None:
        if self.on_change is not None:
            self.on_change(self)

    def _cancel_handlers(self) -> None:
        for handler in self._handlers.values():
            handler.cancel()

    def reset(self) -> None:
        """Cancel outstanding searches and clear the query (launcher closed)."""
        self._cancel_handlers()
        self.state = QueryState(generation=self.state.generation + 1)
        self._notify()

    async def wait_idle(self) -> None:
        """Wait until every outstanding asynchronous search has settled."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    # -- results & selection ----------------------------------------------

    @property
    def results(self) -> list[ResultRecord]:
        return self.state.results

    @property
    def has_results(self) -> bool:
        return bool(self.state.results)

    @property
    def selected(self) -> Optional[ResultRecord]:
        index = self.state.selected_index
        if 0 <= index < len(self.state.results):
            return self.state.results[index]
        return None

    def select_next(self) -> None:
        count = len(self.state.results)
        if count == 0:
            return
        self.state.selected_index = (self.state.selected_index + 1) % count
        self._notify()

    def select_prev(self) -> None:
        count = len(self.state.results)
        if count == 0:
            return
        if self.state.selected_index < 0:
            self.state.selected_index = count - 1
        else:
            self.state.selected_index = (self.state.selected_index - 1) % count
        self._notify()

    @property
    def autocomplete_suggestion(self) -> Optional[Suggestion]:
        """
        Inline completion for the selected app.

        If the app name starts with the typed text the suggestion is the
        remaining suffix; otherwise it is the whole name, flagged as a
        replacement. Only produced in app search mode.
        """
        if self.state.mode != Mode.APP_SEARCH:
            return None

        record = self.selected
        typed = self.state.raw_text
        if record is None or record.kind != ResultKind.APP or not typed:
            return None

        hint = SYSTEM_SETTING_HINT if record.is_system_setting else ""
        if record.sort_key.startswith(typed.lower()):
            suffix = record.primary_text[len(typed):]
            if not suffix and not hint:
                return None
            return Suggestion(suffix, is_replacement=False, hint=hint)

        return Suggestion(record.primary_text, is_replacement=True, hint=hint)


class Debouncer:
    """
    Delay a callback until input has been quiet for delay_ms.

    Each call cancels the previously scheduled one, so only the last
    value typed within the window is delivered.
    """

    def __init__(self, delay_ms: int, callback: Callable[..., None]):
        self.delay = delay_ms / 1000
        self.callback = callback
        self._handle: Optional[asyncio.TimerHandle] = None

    def __call__(self, *args) -> None:
        self.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.delay, self._fire, args)

    def _fire(self, args) -> None:
        self._handle = None
        self.callback(*args)

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
