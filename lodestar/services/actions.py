"""
Action Dispatcher - Perform the action behind a selected result.

  app      → focus a running instance, else cold-launch it
  file     → open with the default handler
  web      → open the URL in the default browser
  command  → run in a terminal that stays open until a keypress
  calc     → copy the result to the clipboard

Failures never propagate: they are logged and shown as a notification.
"""

import subprocess
from pathlib import Path
from typing import Callable, Iterable, Optional

from loguru import logger

from lodestar.search.router import ResultKind, ResultRecord
from lodestar.services.applications import GioAppRegistry
from lodestar.utils import helpers


class ActionDispatcher:
    """Execute ResultRecords against the host desktop."""

    def __init__(
        self,
        running_apps=None,
        launch_app: Optional[Callable] = None,
        terminals: Iterable[str] = helpers.TERMINALS,
        open_uri: Callable[[str], None] = helpers.open_uri,
        copy_to_clipboard: Callable[[str], None] = helpers.copy_to_clipboard,
        notify: Callable[[str, str], None] = helpers.notify,
    ):
        self.running_apps = running_apps
        self.launch_app = launch_app or GioAppRegistry.launch
        self.terminals = list(terminals)
        self.open_uri = open_uri
        self.copy_to_clipboard = copy_to_clipboard
        self.notify = notify

        self._actions = {
            ResultKind.APP: self._activate_app,
            ResultKind.FILE: self._open_file,
            ResultKind.WEB: self._open_url,
            ResultKind.COMMAND: self._run_command,
            ResultKind.CALC: self._copy_result,
        }

    def execute(self, record: ResultRecord) -> bool:
        """
        Run the action for record.

        Returns:
            True on success, False if the action failed (already reported)
        """
        try:
            self._actions[record.kind](record)
            return True
        except Exception as e:
            logger.exception(f"Failed to execute {record.kind.value} result '{record.primary_text}'")
            self.notify("Error running command", str(e))
            return False

    def _activate_app(self, record: ResultRecord):
        entry = record.payload
        if self.running_apps is not None and self.running_apps.activate(entry.app_id):
            return
        logger.debug(f"Launching {entry.app_id}")
        self.launch_app(entry.launch_handle)

    def _open_file(self, record: ResultRecord):
        self.open_uri(Path(record.payload).as_uri())

    def _open_url(self, record: ResultRecord):
        self.open_uri(record.payload)

    def _run_command(self, record: ResultRecord):
        command = record.payload
        terminal = helpers.find_terminal(self.terminals)

        if terminal is None:
            subprocess.Popen(
                command,
                shell=True,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
            self.notify("No terminal emulator found", f"Ran in background: {command}")
            return

        subprocess.Popen(
            helpers.wrap_in_terminal(terminal, command),
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )

    def _copy_result(self, record: ResultRecord):
        self.copy_to_clipboard(record.payload)
