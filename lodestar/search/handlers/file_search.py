"""
File Search Handler - Find files and folders by name under the home directory.

Triggers on "." prefix followed by at least two characters (".notes").

The walk is breadth-first and depth-bounded: the root is listed at depth
0 and subdirectories are entered while depth < max_depth. Directory
reads happen in the default executor in batches so the event loop never
blocks, and every subdirectory is its own task inside one TaskGroup, so
the search is finished exactly when every branch has finished, hit the
limit, or noticed it was cancelled.
"""

import asyncio
import mimetypes
import os
from pathlib import Path
from typing import Any, Callable, Coroutine, Optional

from loguru import logger

from lodestar.search.modes import Classification, Mode
from lodestar.search.router import ResultKind, ResultRecord, SearchHandler
from lodestar.utils.helpers import collapse_home

FOLDER_ICON = "folder"
GENERIC_FILE_ICON = "text-x-generic"


class CancellationToken:
    """Cooperative cancellation flag shared by all branches of one search."""

    def __init__(self):
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


def file_icon(name: str, is_dir: bool) -> str:
    """Freedesktop icon name for a file, derived from its MIME type."""
    if is_dir:
        return FOLDER_ICON
    mime, _ = mimetypes.guess_type(name)
    if not mime:
        return GENERIC_FILE_ICON
    return mime.replace("/", "-")


def _read_batch(entries, count: int) -> list[tuple[str, bool]]:
    """Pull up to count (name, is_dir) pairs from a scandir iterator."""
    batch = []
    for entry in entries:
        try:
            is_dir = entry.is_dir(follow_symlinks=False)
        except OSError:
            is_dir = False
        batch.append((entry.name, is_dir))
        if len(batch) >= count:
            break
    return batch


class FileSearchEngine:
    """
    Cancellable, depth-bounded directory walker.

    Only one search is live at a time: starting a search cancels the
    token of the previous one, whose branches then stop without
    reporting anything.
    """

    def __init__(
        self,
        batch_size: int = 20,
        home: Optional[str] = None,
        icon_for: Callable[[str, bool], str] = file_icon,
    ):
        self.batch_size = batch_size
        self.home = home if home is not None else str(Path.home())
        self.icon_for = icon_for
        self._token: Optional[CancellationToken] = None

    def cancel(self) -> None:
        """Cancel the in-flight search, if any."""
        if self._token is not None:
            self._token.cancel()
            self._token = None

    def search(
        self,
        query: str,
        root_dir: Optional[str] = None,
        max_depth: int = 3,
        limit: int = 50,
        on_result: Optional[Callable[[ResultRecord], None]] = None,
    ) -> Coroutine[Any, Any, Optional[list[ResultRecord]]]:
        """
        Start a search for entries under root_dir whose name contains query.

        The previous search is cancelled right away, before the returned
        coroutine is first awaited.

        Args:
            query: Case-insensitive substring to look for in file names
            root_dir: Directory to start from (defaults to home)
            max_depth: How many directory levels below the root to enter
            limit: Stop once this many matches have been collected
            on_result: Called for each match as soon as it is found

        Returns:
            Coroutine resolving to the matches in discovery order, or to
            None if the search was cancelled before it finished.
        """
        self.cancel()
        token = CancellationToken()
        self._token = token
        return self._walk(token, query, root_dir, max_depth, limit, on_result)

    async def _walk(
        self,
        token: CancellationToken,
        query: str,
        root_dir: Optional[str],
        max_depth: int,
        limit: int,
        on_result: Optional[Callable[[ResultRecord], None]],
    ) -> Optional[list[ResultRecord]]:
        needle = query.lower()
        results: list[ResultRecord] = []
        root = Path(root_dir).expanduser() if root_dir else Path(self.home)
        loop = asyncio.get_running_loop()

        def done() -> bool:
            return token.cancelled or len(results) >= limit

        async def walk(directory: Path, depth: int, group: asyncio.TaskGroup):
            if done():
                return
            try:
                entries = await loop.run_in_executor(None, os.scandir, directory)
            except OSError as e:
                logger.debug(f"Skipping unreadable directory {directory}: {e}")
                return

            try:
                while not done():
                    try:
                        batch = await loop.run_in_executor(
                            None, _read_batch, entries, self.batch_size
                        )
                    except OSError as e:
                        logger.debug(f"Stopped reading {directory}: {e}")
                        return
                    if not batch or done():
                        return

                    for name, is_dir in batch:
                        if len(results) >= limit:
                            break
                        if name.startswith("."):
                            continue

                        path = directory / name
                        if needle in name.lower():
                            record = ResultRecord(
                                kind=ResultKind.FILE,
                                primary_text=name,
                                secondary_text=collapse_home(str(path), self.home),
                                icon=self.icon_for(name, is_dir) or GENERIC_FILE_ICON,
                                payload=str(path),
                            )
                            results.append(record)
                            if on_result is not None:
                                on_result(record)

                        if is_dir and depth < max_depth:
                            group.create_task(walk(path, depth + 1, group))
            finally:
                entries.close()

        async with asyncio.TaskGroup() as group:
            group.create_task(walk(root, 0, group))

        if self._token is token:
            self._token = None
        if token.cancelled:
            logger.debug(f"File search for '{query}' cancelled")
            return None

        logger.debug(f"File search for '{query}' found {len(results)} matches")
        return results


class FileSearchHandler(SearchHandler):
    """Route '.name' queries to the FileSearchEngine."""

    name = "file_search"
    mode = Mode.FILE_SEARCH

    def __init__(
        self,
        engine: FileSearchEngine,
        root_dir: Optional[str] = None,
        max_depth: int = 3,
        limit: int = 50,
    ):
        self.engine = engine
        self.root_dir = root_dir
        self.max_depth = max_depth
        self.limit = limit

    def get_results(self, query: Classification, limit: int):
        return self.engine.search(
            query.residual,
            root_dir=self.root_dir,
            max_depth=self.max_depth,
            limit=min(limit, self.limit),
        )

    def cancel(self) -> None:
        self.engine.cancel()
