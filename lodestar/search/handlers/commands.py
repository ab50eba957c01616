"""
Command Handler - Run a shell command typed after the ">" sigil.

Usage: > htop, > sudo dnf upgrade, etc.

The command itself is not executed here; the single result carries the
command string and the ActionDispatcher runs it in a terminal.
"""

from lodestar.search.modes import Classification, Mode
from lodestar.search.router import ResultKind, ResultRecord, SearchHandler

COMMAND_ICON = "utilities-terminal-symbolic"


class CommandHandler(SearchHandler):
    """Offer to run the typed shell command."""

    name = "commands"
    mode = Mode.COMMAND

    def get_results(self, query: Classification, limit: int) -> list[ResultRecord]:
        command = query.residual.strip()
        if not command:
            return []

        return [ResultRecord(
            kind=ResultKind.COMMAND,
            primary_text="Run Command",
            secondary_text=command,
            icon=COMMAND_ICON,
            payload=command,
        )]
