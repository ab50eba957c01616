"""
Mode Classifier - Decide which retrieval strategy a query belongs to.

Rules are checked in priority order against the trimmed text:
  2 + 2 * 3   → Calculator (digits, whitespace and + - * / % ^ ( ) .)
  > cmd       → Command
  g query     → Web search (Google)
  yt query    → Web search (YouTube)
  .name       → File search (needs at least 2 characters)
  anything    → App search

Sigils with nothing useful after them degrade to app search, or to EMPTY
for file search so that a single character never walks the whole disk.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

CALC_CHARS = re.compile(r"^[\d\s+\-*/^%().]+$")
CALC_OPERATORS = re.compile(r"[+\-*/^%]")

COMMAND_PREFIX = ">"
FILE_PREFIX = "."
MIN_FILE_QUERY = 2

# prefix → engine key (see web_search.DEFAULT_ENGINES)
ENGINE_PREFIXES = {
    "g ": "google",
    "yt ": "youtube",
}

MODE_HINTS = {
    ".": "Search Files/Folders...",
    ">": "Run Linux Command...",
    "g ": "Search Google...",
    "yt ": "Search YouTube...",
}


class Mode(str, Enum):
    EMPTY = "empty"
    CALCULATOR = "calculator"
    COMMAND = "command"
    WEB_SEARCH = "web_search"
    FILE_SEARCH = "file_search"
    APP_SEARCH = "app_search"


@dataclass(frozen=True)
class Classification:
    """Result of classifying a query."""
    mode: Mode
    residual: str
    engine: Optional[str] = None  # web search only


def looks_like_math(text: str) -> bool:
    """True when text uses only calculator characters and has an operator."""
    return bool(CALC_CHARS.match(text)) and bool(CALC_OPERATORS.search(text))


def classify(text: str, engines: Optional[dict[str, str]] = None) -> Classification:
    """
    Map raw input text to a query mode and the residual query.

    Args:
        text: Raw text from the search entry (may be None or untrimmed)
        engines: Optional prefix → engine key mapping, defaults to ENGINE_PREFIXES

    Returns:
        Classification. Never raises.
    """
    trimmed = (text or "").strip()
    if not trimmed:
        return Classification(Mode.EMPTY, "")

    if looks_like_math(trimmed):
        return Classification(Mode.CALCULATOR, text)

    if trimmed.startswith(COMMAND_PREFIX):
        command = trimmed[len(COMMAND_PREFIX):].strip()
        if command:
            return Classification(Mode.COMMAND, command)
        return Classification(Mode.APP_SEARCH, trimmed)

    for prefix, engine in (engines or ENGINE_PREFIXES).items():
        if trimmed.startswith(prefix):
            term = trimmed[len(prefix):].strip()
            if term:
                return Classification(Mode.WEB_SEARCH, term, engine)
            return Classification(Mode.APP_SEARCH, trimmed)

    if trimmed.startswith(FILE_PREFIX):
        name = trimmed[len(FILE_PREFIX):].strip()
        if len(name) < MIN_FILE_QUERY:
            return Classification(Mode.EMPTY, name)
        return Classification(Mode.FILE_SEARCH, name)

    return Classification(Mode.APP_SEARCH, trimmed)


def mode_hint(text: str) -> Optional[str]:
    """Placeholder hint to show after a bare mode sigil, if any."""
    if not text:
        return None
    for sigil, hint in MODE_HINTS.items():
        if text in (sigil, sigil + " "):
            return hint
    return None
