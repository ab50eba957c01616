"""
Search handlers - One per query mode.

Each handler answers the queries of its mode with ResultRecords.
"""

from .app_search import AppSearchHandler, ApplicationIndex
from .calculator import CalculatorHandler
from .commands import CommandHandler
from .file_search import FileSearchEngine, FileSearchHandler
from .web_search import WebSearchHandler

__all__ = [
    "AppSearchHandler",
    "ApplicationIndex",
    "CalculatorHandler",
    "CommandHandler",
    "FileSearchEngine",
    "FileSearchHandler",
    "WebSearchHandler",
]
