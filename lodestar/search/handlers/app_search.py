"""
App Search Handler - Substring search over installed applications.

ApplicationIndex keeps an in-memory snapshot of the installed apps. It is
built on first use, marked stale when the host reports that the set of
installed apps changed, and rebuilt wholesale before the next search.

Ranking: apps whose name starts with the query come first, then the rest;
each group is sorted alphabetically (locale-aware).
"""

import locale
from dataclasses import dataclass
from typing import Any, Optional

from loguru import logger

from lodestar.search.modes import Classification, Mode
from lodestar.search.router import ResultKind, ResultRecord, SearchHandler

# Control-center panels are hidden from menus but still worth surfacing
SETTINGS_MARKERS = ("gnome-control-center", "panel", "org.gnome.settings")


@dataclass(frozen=True)
class AppIndexEntry:
    """One installed application, with pre-lowered search keys."""
    name: str
    search_name: str
    app_id: str
    search_id: str
    description: str
    icon: str
    is_setting: bool
    launch_handle: Any = None


def is_settings_panel(app_id: str) -> bool:
    return any(marker in app_id for marker in SETTINGS_MARKERS)


class ApplicationIndex:
    """
    Lazily-built cache of installed applications.

    Args:
        registry: Host application registry. Needs list_apps(),
            connect_changed(callback) and disconnect(handle).
    """

    def __init__(self, registry):
        self.registry = registry
        self._entries: Optional[tuple[AppIndexEntry, ...]] = None
        self._stale = True
        self._subscription = None

    def ensure_built(self) -> tuple[AppIndexEntry, ...]:
        """Return the current snapshot, (re)building it if needed."""
        if self._subscription is None:
            self._subscription = self.registry.connect_changed(self.invalidate)

        if self._stale or self._entries is None:
            # Swap in a complete snapshot; readers never see a partial build
            self._entries = self._build()
            self._stale = False
        return self._entries

    def _build(self) -> tuple[AppIndexEntry, ...]:
        try:
            apps = list(self.registry.list_apps())
        except Exception:
            logger.exception("Failed to enumerate installed applications")
            return ()

        entries = []
        for app in apps:
            if not app.name:
                continue

            app_id = app.app_id or ""
            is_setting = is_settings_panel(app_id)
            if not app.should_show and not is_setting:
                continue

            entries.append(AppIndexEntry(
                name=app.name,
                search_name=app.name.lower(),
                app_id=app_id,
                search_id=app_id.lower(),
                description=app.description or "",
                icon=app.icon or "application-x-executable",
                is_setting=is_setting,
                launch_handle=app.handle,
            ))

        logger.debug(f"Indexed {len(entries)} applications")
        return tuple(entries)

    def invalidate(self, *_args) -> None:
        """Mark the snapshot stale (installed applications changed)."""
        logger.debug("Application set changed, index will be rebuilt")
        self._stale = True

    def search(self, query: str, limit: int = 50) -> list[AppIndexEntry]:
        """
        Find apps whose name or id contains query (case-insensitive).

        Args:
            query: Text typed by the user
            limit: Maximum number of entries to return

        Returns:
            Entries with name-prefix matches first, then alphabetical
        """
        q = (query or "").strip().lower()
        if not q:
            return []

        matches = [
            entry for entry in self.ensure_built()
            if q in entry.search_name or q in entry.search_id
        ]
        matches.sort(key=lambda e: (
            not e.search_name.startswith(q),
            locale.strxfrm(e.search_name),
        ))
        return matches[:limit]

    def dispose(self) -> None:
        """Release the change subscription and drop the cache."""
        if self._subscription is not None:
            self.registry.disconnect(self._subscription)
            self._subscription = None
        self._entries = None
        self._stale = True


class AppSearchHandler(SearchHandler):
    """Search installed applications."""

    name = "app_search"
    mode = Mode.APP_SEARCH

    def __init__(self, index: ApplicationIndex, app_limit: int = 50):
        self.index = index
        self.app_limit = app_limit

    def get_results(self, query: Classification, limit: int) -> list[ResultRecord]:
        entries = self.index.search(query.residual, min(limit, self.app_limit))
        return [self._entry_to_result(entry) for entry in entries]

    def _entry_to_result(self, entry: AppIndexEntry) -> ResultRecord:
        """Convert an index entry to a ResultRecord."""
        return ResultRecord(
            kind=ResultKind.APP,
            primary_text=entry.name,
            secondary_text=entry.description,
            icon=entry.icon,
            payload=entry,
            is_system_setting=entry.is_setting,
        )
