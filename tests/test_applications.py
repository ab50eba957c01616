"""
Tests for the host application services.

Gio is replaced by fake modules in sys.modules (headless testing);
hyprctl is replaced by a patched subprocess.run.
"""

import json
import subprocess
import types
from unittest.mock import MagicMock, patch

import pytest

from lodestar.services.applications import GioAppRegistry, HyprlandClients, _window_class


def _app_info(name, app_id, should_show=True, icon="firefox"):
    info = MagicMock()
    info.get_name.return_value = name
    info.get_id.return_value = app_id
    info.get_description.return_value = None
    info.should_show.return_value = should_show
    if icon is None:
        info.get_icon.return_value = None
    else:
        info.get_icon.return_value.to_string.return_value = icon
    return info


@pytest.fixture
def fake_gio():
    gio = MagicMock()
    fake_gi = types.ModuleType("gi")
    fake_repo = types.ModuleType("gi.repository")
    fake_repo.Gio = gio
    fake_gi.repository = fake_repo
    with patch.dict("sys.modules", {"gi": fake_gi, "gi.repository": fake_repo}):
        yield gio


class TestGioAppRegistry:

    def test_lists_apps(self, fake_gio):
        firefox = _app_info("Firefox", "firefox.desktop")
        hidden = _app_info("Panel", "gnome-wifi-panel.desktop", should_show=False, icon=None)
        fake_gio.AppInfo.get_all.return_value = [firefox, hidden]

        apps = list(GioAppRegistry().list_apps())
        assert [a.name for a in apps] == ["Firefox", "Panel"]
        assert apps[0].icon == "firefox"
        assert apps[0].description == ""
        assert apps[0].handle is firefox
        assert apps[1].should_show is False
        assert apps[1].icon == ""

    def test_change_subscription(self, fake_gio):
        monitor = fake_gio.AppInfoMonitor.get.return_value
        monitor.connect.return_value = 7
        callback = MagicMock()

        registry = GioAppRegistry()
        handle = registry.connect_changed(callback)
        assert handle == 7

        signal, handler = monitor.connect.call_args.args
        assert signal == "changed"
        handler(monitor)
        callback.assert_called_once_with()

        registry.disconnect(handle)
        monitor.disconnect.assert_called_once_with(7)

    def test_launch(self):
        info = MagicMock()
        GioAppRegistry.launch(info)
        info.launch.assert_called_once_with([], None)


def _completed(stdout, returncode=0):
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr="")


CLIENTS = [
    {"address": "0x1", "class": "firefox"},
    {"address": "0x2", "class": "org.gnome.Nautilus"},
    {"address": "0x3", "class": "kitty"},
]


class TestHyprlandClients:

    def test_window_class(self):
        assert _window_class("firefox.desktop") == "firefox"
        assert _window_class("org.gnome.Nautilus.desktop") == "org.gnome.nautilus"

    def test_find_by_class(self):
        with patch("lodestar.services.applications.subprocess.run",
                   return_value=_completed(json.dumps(CLIENTS))):
            assert HyprlandClients().find("org.gnome.Nautilus.desktop")["address"] == "0x2"

    def test_find_reverse_dns_suffix(self):
        with patch("lodestar.services.applications.subprocess.run",
                   return_value=_completed(json.dumps(CLIENTS))):
            assert HyprlandClients().find("net.kovidgoyal.kitty.desktop")["address"] == "0x3"

    def test_not_running(self):
        with patch("lodestar.services.applications.subprocess.run",
                   return_value=_completed(json.dumps(CLIENTS))):
            assert HyprlandClients().activate("gimp.desktop") is False

    def test_activate_focuses_window(self):
        with patch("lodestar.services.applications.subprocess.run",
                   return_value=_completed(json.dumps(CLIENTS))) as run:
            assert HyprlandClients().activate("firefox.desktop") is True
        assert run.call_args.args[0] == ["hyprctl", "dispatch", "focuswindow", "address:0x1"]

    def test_hyprctl_missing(self):
        with patch("lodestar.services.applications.subprocess.run", side_effect=FileNotFoundError("hyprctl")):
            assert HyprlandClients().activate("firefox.desktop") is False

    def test_hyprctl_error_code(self):
        with patch("lodestar.services.applications.subprocess.run", return_value=_completed("", returncode=1)):
            assert HyprlandClients().find("firefox.desktop") is None

    def test_invalid_json(self):
        with patch("lodestar.services.applications.subprocess.run", return_value=_completed("not json")):
            assert HyprlandClients().find("firefox.desktop") is None
