"""
Application Services - Installed and running applications on the host.

GioAppRegistry lists installed .desktop applications through Gio and
reports when that set changes (package installed/removed).
HyprlandClients finds a running window for an app and focuses it.
"""

import json
import subprocess
from dataclasses import dataclass
from typing import Any, Callable, Iterator, Optional

from loguru import logger


@dataclass(frozen=True)
class HostApp:
    """An installed application as reported by the host."""
    name: str
    app_id: str
    description: str = ""
    icon: str = ""
    should_show: bool = True
    handle: Any = None  # launch handle (Gio.AppInfo)


class GioAppRegistry:
    """Installed applications via Gio.AppInfo and Gio.AppInfoMonitor."""

    def __init__(self):
        from gi.repository import Gio

        self._gio = Gio
        self._monitor = None

    def list_apps(self) -> Iterator[HostApp]:
        for info in self._gio.AppInfo.get_all():
            icon = info.get_icon()
            yield HostApp(
                name=info.get_name() or "",
                app_id=info.get_id() or "",
                description=info.get_description() or "",
                icon=icon.to_string() if icon is not None else "",
                should_show=info.should_show(),
                handle=info,
            )

    def connect_changed(self, callback: Callable[[], None]) -> int:
        """Call callback whenever the installed application set changes."""
        if self._monitor is None:
            self._monitor = self._gio.AppInfoMonitor.get()
        return self._monitor.connect("changed", lambda *_: callback())

    def disconnect(self, handle: int) -> None:
        if self._monitor is not None:
            self._monitor.disconnect(handle)

    @staticmethod
    def launch(handle) -> None:
        """Cold-launch an application from its Gio.AppInfo."""
        handle.launch([], None)


def _window_class(app_id: str) -> str:
    """firefox.desktop → firefox, org.gnome.Nautilus.desktop → org.gnome.nautilus"""
    if app_id.endswith(".desktop"):
        app_id = app_id[: -len(".desktop")]
    return app_id.lower()


class HyprlandClients:
    """Running application lookup through hyprctl."""

    def _clients(self) -> list[dict]:
        try:
            result = subprocess.run(
                ["hyprctl", "clients", "-j"],
                capture_output=True,
                text=True,
                timeout=1,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            logger.debug(f"hyprctl unavailable: {e}")
            return []

        if result.returncode != 0:
            return []
        try:
            return json.loads(result.stdout)
        except json.JSONDecodeError:
            logger.warning("hyprctl returned invalid JSON for clients")
            return []

    def find(self, app_id: str) -> Optional[dict]:
        """Return the first client window whose class matches app_id."""
        wanted = _window_class(app_id)
        if not wanted:
            return None
        for client in self._clients():
            window_class = (client.get("class") or "").lower()
            if window_class == wanted or wanted.endswith("." + window_class):
                return client
        return None

    def activate(self, app_id: str) -> bool:
        """
        Focus a running window of app_id.

        Returns:
            True if a running instance was found and focused
        """
        client = self.find(app_id)
        if client is None:
            return False

        subprocess.run(
            ["hyprctl", "dispatch", "focuswindow", f"address:{client['address']}"],
            capture_output=True,
            timeout=1,
            check=True,
        )
        logger.debug(f"Focused running instance of {app_id}")
        return True
