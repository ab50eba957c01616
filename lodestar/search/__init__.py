"""
Search package - Query classification, routing and handlers.

Each keystroke is classified into a mode (calculator, command, web, file,
app search) and dispatched to the handler registered for that mode.
"""

from .modes import Classification, Mode, classify
from .router import (
    Debouncer,
    QueryRouter,
    QueryState,
    ResultKind,
    ResultRecord,
    SearchHandler,
    Suggestion,
)

__all__ = [
    "Classification",
    "Debouncer",
    "Mode",
    "QueryRouter",
    "QueryState",
    "ResultKind",
    "ResultRecord",
    "SearchHandler",
    "Suggestion",
    "classify",
]
