"""
Launcher Core - The root context the presentation layer talks to.

Owns the application index, the file search engine, the router, the
keystroke debouncer and the action dispatcher. The UI:

  - calls feed(text) on every edit (debounced, ~120ms)
  - calls select_next() / select_prev() / activate() for navigation
  - calls close() when the launcher is dismissed
  - reads results, suggestion and has_results from on_change

Usage:
    core = LauncherCore.create(on_change=render)
    core.feed("fire")
"""

import locale
from typing import Callable, Optional

from loguru import logger

from lodestar.search.handlers import (
    AppSearchHandler,
    ApplicationIndex,
    CalculatorHandler,
    CommandHandler,
    FileSearchEngine,
    FileSearchHandler,
    WebSearchHandler,
)
from lodestar.search.handlers.web_search import DEFAULT_ENGINES
from lodestar.search.modes import mode_hint
from lodestar.search.router import Debouncer, QueryRouter, ResultRecord, Suggestion
from lodestar.services.actions import ActionDispatcher
from lodestar.services.applications import GioAppRegistry, HyprlandClients
from lodestar.utils.helpers import deep_merge, default_settings, load_settings


class LauncherCore:
    """Wires the search components together and exposes one small API."""

    def __init__(
        self,
        router: QueryRouter,
        index: ApplicationIndex,
        file_engine: FileSearchEngine,
        dispatcher: ActionDispatcher,
        debounce_ms: int = 120,
    ):
        self.router = router
        self.index = index
        self.file_engine = file_engine
        self.dispatcher = dispatcher
        self.debouncer = Debouncer(debounce_ms, router.on_text_changed)

    @classmethod
    def create(
        cls,
        settings: Optional[dict] = None,
        registry=None,
        running_apps=None,
        dispatcher: Optional[ActionDispatcher] = None,
        on_change: Optional[Callable[[QueryRouter], None]] = None,
    ) -> "LauncherCore":
        """
        Build a launcher from settings.

        Args:
            settings: Settings dict (merged over defaults), or None to load data/settings.toml
            registry: Installed application registry, defaults to GioAppRegistry
            running_apps: Running application lookup, defaults to HyprlandClients
            dispatcher: ActionDispatcher override
            on_change: Called with the router whenever results or selection change
        """
        _use_user_collation()

        if settings is None:
            settings = load_settings()
        else:
            settings = deep_merge(default_settings(), settings)

        registry = registry if registry is not None else GioAppRegistry()
        index = ApplicationIndex(registry)

        web = WebSearchHandler(deep_merge(DEFAULT_ENGINES, settings["web_search"]))

        file_settings = settings["file_search"]
        file_engine = FileSearchEngine(batch_size=file_settings["batch_size"])

        router = QueryRouter(
            max_results=settings["search"]["max_results"],
            engine_prefixes=web.prefixes,
            on_change=on_change,
        )
        router.register(CalculatorHandler())
        router.register(CommandHandler())
        router.register(web)
        router.register(FileSearchHandler(
            file_engine,
            root_dir=file_settings["root"],
            max_depth=file_settings["max_depth"],
            limit=file_settings["limit"],
        ))
        router.register(AppSearchHandler(index, app_limit=settings["search"]["app_limit"]))

        if dispatcher is None:
            dispatcher = ActionDispatcher(
                running_apps=running_apps if running_apps is not None else HyprlandClients(),
                launch_app=getattr(registry, "launch", None),
                terminals=settings["terminal"]["preferred"],
            )

        logger.debug("Launcher core created")
        return cls(
            router,
            index,
            file_engine,
            dispatcher,
            debounce_ms=settings["launcher"]["debounce_ms"],
        )

    # -- input -------------------------------------------------------------

    def feed(self, text: str) -> None:
        """Text changed in the entry; searches once typing pauses."""
        self.debouncer(text)

    def search_now(self, text: str) -> None:
        """Search immediately, dropping any pending debounced search."""
        self.debouncer.cancel()
        self.router.on_text_changed(text)

    def select_next(self) -> None:
        self.router.select_next()

    def select_prev(self) -> None:
        self.router.select_prev()

    def activate(self) -> Optional[ResultRecord]:
        """
        Execute the selected result.

        Returns:
            The activated record, or None when nothing is selected
        """
        record = self.router.selected
        if record is None:
            return None
        self.dispatcher.execute(record)
        return record

    def close(self) -> None:
        """Launcher dismissed: cancel pending work and clear the query."""
        self.debouncer.cancel()
        self.router.reset()

    def dispose(self) -> None:
        """Tear everything down (extension disabled / app exit)."""
        self.close()
        self.index.dispose()
        logger.debug("Launcher core disposed")

    # -- output ------------------------------------------------------------

    @property
    def results(self) -> list[ResultRecord]:
        return self.router.results

    @property
    def has_results(self) -> bool:
        return self.router.has_results

    @property
    def suggestion(self) -> Optional[Suggestion]:
        return self.router.autocomplete_suggestion

    @staticmethod
    def mode_hint(text: str) -> Optional[str]:
        return mode_hint(text)


def _use_user_collation() -> None:
    """Sort app names by the user's locale (strxfrm follows LC_COLLATE)."""
    try:
        locale.setlocale(locale.LC_COLLATE, "")
    except locale.Error as e:
        logger.warning(f"Could not apply user collation locale, sorting by codepoint: {e}")
