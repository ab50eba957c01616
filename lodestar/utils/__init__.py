# Lodestar Utilities Package
"""
Shared utility functions and helpers for the Lodestar launcher.
"""

from .helpers import collapse_home, deep_merge, load_settings, notify

__all__ = ["collapse_home", "deep_merge", "load_settings", "notify"]
