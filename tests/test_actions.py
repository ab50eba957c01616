"""
Tests for the ActionDispatcher.

Host tools (xdg-open, wl-copy, terminals) are replaced with mocks; the
dispatcher must never let an exception escape.
"""

from unittest.mock import MagicMock, patch

import pytest

from lodestar.search.handlers.app_search import AppIndexEntry
from lodestar.search.router import ResultKind, ResultRecord
from lodestar.services.actions import ActionDispatcher


def _entry(app_id="firefox.desktop"):
    return AppIndexEntry(
        name="Firefox",
        search_name="firefox",
        app_id=app_id,
        search_id=app_id,
        description="",
        icon="firefox",
        is_setting=False,
        launch_handle=MagicMock(name="app_info"),
    )


def _dispatcher(**kwargs):
    defaults = dict(
        running_apps=MagicMock(),
        launch_app=MagicMock(),
        terminals=["foot"],
        open_uri=MagicMock(),
        copy_to_clipboard=MagicMock(),
        notify=MagicMock(),
    )
    defaults.update(kwargs)
    return ActionDispatcher(**defaults)


class TestApps:

    def test_focuses_running_instance(self):
        dispatcher = _dispatcher()
        dispatcher.running_apps.activate.return_value = True
        entry = _entry()
        assert dispatcher.execute(ResultRecord(ResultKind.APP, "Firefox", payload=entry)) is True
        dispatcher.running_apps.activate.assert_called_once_with("firefox.desktop")
        dispatcher.launch_app.assert_not_called()

    def test_cold_launches_when_not_running(self):
        dispatcher = _dispatcher()
        dispatcher.running_apps.activate.return_value = False
        entry = _entry()
        dispatcher.execute(ResultRecord(ResultKind.APP, "Firefox", payload=entry))
        dispatcher.launch_app.assert_called_once_with(entry.launch_handle)

    def test_without_running_registry(self):
        dispatcher = _dispatcher(running_apps=None)
        entry = _entry()
        dispatcher.execute(ResultRecord(ResultKind.APP, "Firefox", payload=entry))
        dispatcher.launch_app.assert_called_once_with(entry.launch_handle)

    def test_default_launch_uses_app_info(self):
        dispatcher = _dispatcher(running_apps=None, launch_app=None)
        entry = _entry()
        dispatcher.execute(ResultRecord(ResultKind.APP, "Firefox", payload=entry))
        entry.launch_handle.launch.assert_called_once_with([], None)


class TestUris:

    def test_file_opens_as_uri(self):
        dispatcher = _dispatcher()
        dispatcher.execute(ResultRecord(ResultKind.FILE, "a b.txt", payload="/home/me/a b.txt"))
        dispatcher.open_uri.assert_called_once_with("file:///home/me/a%20b.txt")

    def test_web_opens_url(self):
        dispatcher = _dispatcher()
        url = "https://www.google.com/search?q=cats"
        dispatcher.execute(ResultRecord(ResultKind.WEB, "Search Google", payload=url))
        dispatcher.open_uri.assert_called_once_with(url)


class TestCalc:

    def test_copies_result(self):
        dispatcher = _dispatcher()
        dispatcher.execute(ResultRecord(ResultKind.CALC, "4", payload="4"))
        dispatcher.copy_to_clipboard.assert_called_once_with("4")


class TestCommands:

    def test_runs_in_terminal(self):
        dispatcher = _dispatcher()
        with patch("lodestar.services.actions.helpers.find_terminal", return_value=["foot"]) as find, \
                patch("lodestar.services.actions.subprocess.Popen") as popen:
            dispatcher.execute(ResultRecord(ResultKind.COMMAND, "Run Command", payload="htop"))

        find.assert_called_once_with(["foot"])
        argv = popen.call_args.args[0]
        assert argv[:3] == ["foot", "bash", "-c"]
        assert argv[3].startswith("htop; ")
        assert "read" in argv[3]
        dispatcher.notify.assert_not_called()

    def test_headless_without_terminal(self):
        dispatcher = _dispatcher()
        with patch("lodestar.services.actions.helpers.find_terminal", return_value=None), \
                patch("lodestar.services.actions.subprocess.Popen") as popen:
            assert dispatcher.execute(ResultRecord(ResultKind.COMMAND, "Run Command", payload="touch /tmp/x")) is True

        assert popen.call_args.args[0] == "touch /tmp/x"
        assert popen.call_args.kwargs["shell"] is True
        title = dispatcher.notify.call_args.args[0]
        assert "terminal" in title.lower()


class TestFailures:
    """Errors become notifications, never exceptions."""

    @pytest.mark.parametrize("error", [FileNotFoundError("xdg-open"), RuntimeError("boom")])
    def test_open_failure_is_reported(self, error):
        dispatcher = _dispatcher(open_uri=MagicMock(side_effect=error))
        ok = dispatcher.execute(ResultRecord(ResultKind.WEB, "Search Google", payload="https://x"))
        assert ok is False
        dispatcher.notify.assert_called_once()
        assert str(error) in dispatcher.notify.call_args.args[1]

    def test_launch_failure_is_reported(self):
        dispatcher = _dispatcher(running_apps=None, launch_app=MagicMock(side_effect=OSError("no exec")))
        assert dispatcher.execute(ResultRecord(ResultKind.APP, "Firefox", payload=_entry())) is False
        dispatcher.notify.assert_called_once()

    def test_running_lookup_failure_is_reported(self):
        dispatcher = _dispatcher()
        dispatcher.running_apps.activate.side_effect = RuntimeError("hyprctl died")
        assert dispatcher.execute(ResultRecord(ResultKind.APP, "Firefox", payload=_entry())) is False
