"""
Web Search Handler - Open web searches in the default browser.

Triggers on prefix patterns:
  g query     → Google
  yt query    → YouTube

Search engines are configurable via settings.toml [web_search] section.
Each engine table needs a name, a url containing {query}, and a prefix.
"""

import urllib.parse
from typing import Optional

from loguru import logger

from lodestar.search.modes import Classification, Mode
from lodestar.search.router import ResultKind, ResultRecord, SearchHandler

# Default search engines (can be overridden in settings.toml)
DEFAULT_ENGINES = {
    "google": {
        "name": "Google",
        "prefix": "g ",
        "url": "https://www.google.com/search?q={query}",
        "icon": "web-browser-symbolic",
    },
    "youtube": {
        "name": "YouTube",
        "prefix": "yt ",
        "url": "https://www.youtube.com/results?search_query={query}",
        "icon": "video-x-generic",
    },
}


class WebSearchHandler(SearchHandler):
    """Turn 'g ...' / 'yt ...' queries into a search URL."""

    name = "web_search"
    mode = Mode.WEB_SEARCH

    def __init__(self, engines: Optional[dict] = None):
        self.engines = {}
        for key, engine in (engines or DEFAULT_ENGINES).items():
            if not isinstance(engine, dict) or not {"name", "url", "prefix"} <= engine.keys():
                logger.warning(f"Skipping malformed web search engine '{key}'")
                continue
            self.engines[key] = engine

    @property
    def prefixes(self) -> dict[str, str]:
        """Prefix → engine key, for the mode classifier."""
        return {engine["prefix"]: key for key, engine in self.engines.items()}

    def get_results(self, query: Classification, limit: int) -> list[ResultRecord]:
        engine = self.engines.get(query.engine)
        term = query.residual.strip()
        if engine is None or not term:
            return []

        url = engine["url"].format(query=urllib.parse.quote_plus(term))
        return [ResultRecord(
            kind=ResultKind.WEB,
            primary_text=f"Search {engine['name']}",
            secondary_text=term,
            icon=engine.get("icon", "web-browser-symbolic"),
            payload=url,
        )]
