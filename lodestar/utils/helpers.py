"""
Helper utilities for the Lodestar launcher.

Provides common functions used across the core:
- Settings loading
- Home directory shortening for display
- Thin wrappers around desktop tools (xdg-open, wl-copy, notify-send)
- Terminal emulator discovery
"""

import copy
import shutil
import subprocess
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

import toml
from loguru import logger

# Preference-ordered terminals and the argv that makes each one run a command
TERMINALS = {
    "kgx": ["kgx", "--"],
    "ptyxis": ["ptyxis", "--"],
    "gnome-terminal": ["gnome-terminal", "--"],
    "konsole": ["konsole", "-e"],
    "xfce4-terminal": ["xfce4-terminal", "-x"],
    "kitty": ["kitty"],
    "foot": ["foot"],
    "alacritty": ["alacritty", "-e"],
    "wezterm": ["wezterm", "start", "--"],
    "xterm": ["xterm", "-e"],
}

# Own line, so a trailing "&" or "# comment" in the command cannot swallow it
KEEP_OPEN_SUFFIX = "\necho; read -n 1 -s -r -p 'Press any key to close...'"

DEFAULT_SETTINGS_PATH = Path(__file__).parent.parent.parent / "data" / "settings.toml"

DEFAULT_SETTINGS = {
    "launcher": {
        "debounce_ms": 120,
    },
    "search": {
        "max_results": 10,
        "app_limit": 50,
    },
    "file_search": {
        "root": "~",
        "max_depth": 3,
        "limit": 50,
        "batch_size": 20,
    },
    "terminal": {
        "preferred": list(TERMINALS),
    },
    "web_search": {},
}


def default_settings() -> Dict[str, Any]:
    """Fresh copy of the built-in defaults."""
    return copy.deepcopy(DEFAULT_SETTINGS)


def load_settings(path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load launcher settings from TOML file.

    Args:
        path: Settings file to read, defaults to data/settings.toml

    Returns:
        Dictionary containing settings with defaults applied

    Missing or unreadable files fall back to DEFAULT_SETTINGS. Engines
    under [web_search.<key>] are merged over the built-in ones.
    """
    defaults = default_settings()

    settings_path = Path(path) if path is not None else DEFAULT_SETTINGS_PATH

    if not settings_path.exists():
        logger.info(f"Settings file not found at {settings_path}, using defaults")
        return defaults

    try:
        loaded = toml.load(settings_path)
    except (toml.TomlDecodeError, OSError) as e:
        logger.warning(f"Could not load settings from {settings_path}: {e}")
        return defaults

    return deep_merge(defaults, loaded)


def deep_merge(base: Dict, override: Dict) -> Dict:
    """
    Deep merge two dictionaries.

    Args:
        base: Base dictionary with defaults
        override: Dictionary with overrides

    Returns:
        Merged dictionary (override takes precedence)
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def collapse_home(path: str, home: Optional[str] = None) -> str:
    """Replace a leading home directory with ~ (only as a whole path prefix)."""
    home = (home if home is not None else str(Path.home())).rstrip("/")
    if home and (path == home or path.startswith(home + "/")):
        return "~" + path[len(home):]
    return path


def open_uri(uri: str) -> None:
    """
    Open a URI or URL with the user's default handler via xdg-open.

    Raises:
        FileNotFoundError: xdg-open is not installed
    """
    subprocess.Popen(
        ["xdg-open", uri],
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
    )


def copy_to_clipboard(text: str) -> None:
    """
    Copy text to the Wayland clipboard using wl-copy.

    Raises:
        FileNotFoundError: wl-copy is not installed
    """
    subprocess.Popen(
        ["wl-copy", text],
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
    )


def notify(title: str, body: str = "") -> None:
    """Show a desktop notification. Never raises."""
    try:
        subprocess.Popen(
            ["notify-send", "--app-name=Lodestar", title, body],
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )
    except OSError:
        logger.warning(f"notify-send unavailable, dropped notification: {title}: {body}")


def find_terminal(preferred: Iterable[str] = TERMINALS) -> Optional[list[str]]:
    """
    Find the first installed terminal emulator.

    Args:
        preferred: Terminal names in order of preference

    Returns:
        argv prefix that makes the terminal execute a command, or None
    """
    for name in preferred:
        prefix = TERMINALS.get(name)
        if prefix is None:
            logger.warning(f"Unknown terminal emulator '{name}' in settings")
            continue
        if shutil.which(prefix[0]):
            return list(prefix)
    return None


def wrap_in_terminal(terminal: list[str], command: str) -> list[str]:
    """Build argv that runs command in terminal and waits for a key before closing."""
    return [*terminal, "bash", "-c", command + KEEP_OPEN_SUFFIX]
