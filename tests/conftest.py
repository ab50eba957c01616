"""
Shared test fixtures for the Lodestar test suite.

Provides a fake application registry, settings files and directory trees
that use real file I/O (no mocking of the filesystem).
"""

from pathlib import Path

import pytest
import toml

from lodestar.services.applications import HostApp


class FakeRegistry:
    """In-memory stand-in for GioAppRegistry."""

    def __init__(self, apps):
        self.apps = list(apps)
        self.callbacks = {}
        self.list_calls = 0
        self.fail = False
        self._next_handle = 1

    def list_apps(self):
        self.list_calls += 1
        if self.fail:
            raise RuntimeError("registry unavailable")
        return list(self.apps)

    def connect_changed(self, callback):
        handle = self._next_handle
        self._next_handle += 1
        self.callbacks[handle] = callback
        return handle

    def disconnect(self, handle):
        del self.callbacks[handle]

    def emit_changed(self):
        for callback in list(self.callbacks.values()):
            callback()


def make_app(name, app_id, should_show=True, description=""):
    return HostApp(
        name=name,
        app_id=app_id,
        description=description,
        icon=app_id.replace(".desktop", ""),
        should_show=should_show,
        handle=f"handle:{app_id}",
    )


@pytest.fixture
def installed_apps():
    """A small, varied set of installed applications."""
    return [
        make_app("Firefox", "firefox.desktop", description="Web Browser"),
        make_app("Files", "org.gnome.Nautilus.desktop", description="Access and organize files"),
        make_app("Profile Manager", "profiles.desktop"),
        make_app("Code", "code-fi.desktop", description="Code Editor"),
        make_app("Terminal", "org.gnome.Terminal.desktop"),
        # Hidden from menus but a settings panel: must be kept
        make_app("Wi-Fi Settings", "gnome-wifi-panel.desktop", should_show=False),
        # Hidden and not a setting: must be skipped
        make_app("Firmware Helper", "fwupd-helper.desktop", should_show=False),
        # No display name: must be skipped
        make_app("", "nameless.desktop"),
    ]


@pytest.fixture
def registry(installed_apps):
    return FakeRegistry(installed_apps)


@pytest.fixture
def file_tree(tmp_path):
    """
    Directory tree for file search tests:

        root/
          notes.md
          report_target.pdf
          a/b/mid_target.txt                   (directory depth 2)
          l1/l2/l3/edge_target.txt             (directory depth 3)
          l1/l2/l3/l4/deep_target.txt          (directory depth 4)
          target_dir/
          .secret/hidden_target.txt
          .target_dotfile
    """
    root = tmp_path / "root"
    (root / "a" / "b").mkdir(parents=True)
    (root / "l1" / "l2" / "l3" / "l4").mkdir(parents=True)
    (root / "target_dir").mkdir()
    (root / ".secret").mkdir()

    (root / "notes.md").write_text("notes")
    (root / "report_target.pdf").write_text("pdf")
    (root / "a" / "b" / "mid_target.txt").write_text("mid")
    (root / "l1" / "l2" / "l3" / "edge_target.txt").write_text("edge")
    (root / "l1" / "l2" / "l3" / "l4" / "deep_target.txt").write_text("deep")
    (root / ".secret" / "hidden_target.txt").write_text("hidden")
    (root / ".target_dotfile").write_text("dot")
    return root


@pytest.fixture
def tmp_settings(tmp_path):
    """Create a real settings TOML file with all sections."""
    settings_path = tmp_path / "settings.toml"
    data = {
        "launcher": {"debounce_ms": 50},
        "search": {"max_results": 5, "app_limit": 20},
        "file_search": {"root": "~", "max_depth": 2, "limit": 10, "batch_size": 4},
        "terminal": {"preferred": ["foot", "xterm"]},
        "web_search": {
            "wikipedia": {
                "name": "Wikipedia",
                "prefix": "w ",
                "url": "https://en.wikipedia.org/w/index.php?search={query}",
            },
        },
    }
    settings_path.write_text(toml.dumps(data))
    return settings_path


@pytest.fixture(name="make_app")
def make_app_fixture():
    return make_app


@pytest.fixture(name="fake_registry")
def fake_registry_factory():
    """Build a FakeRegistry from any list of HostApps."""
    return FakeRegistry
