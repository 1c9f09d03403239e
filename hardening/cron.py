"""
Crontab management for the reporting script.

The crontab is handled as an ordered list of lines. Lines produced from a
CronEntry are identified by the script they run, so registering a script a
second time replaces its line instead of appending a duplicate.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from .errors import CronError, ExecutionError
from .utils import Runner, run_command

logger = logging.getLogger(__name__)

MIDNIGHT_DAILY = "0 0 * * *"

ADDED = "added"
UPDATED = "updated"
UNCHANGED = "unchanged"


@dataclass(frozen=True)
class CronEntry:
    """A daily job that runs a script and redirects its output to a log."""

    script: str
    log_file: str
    schedule: str = MIDNIGHT_DAILY

    def render(self) -> str:
        return f"{self.schedule} {self.script} >{self.log_file} 2>&1"


def script_of(line: str) -> Optional[str]:
    """Return the command run by a crontab line, or None for comments, env and blanks."""
    stripped = line.strip()
    if not stripped or stripped.startswith("#"):
        return None
    fields = stripped.split()
    if fields[0].startswith("@"):
        return fields[1] if len(fields) > 1 else None
    if "=" in fields[0]:
        return None
    if len(fields) < 6:
        return None
    return fields[5]


class CronTable:
    """An ordered crontab whose managed entries are keyed on script path."""

    def __init__(self, lines: Optional[List[str]] = None):
        self.lines: List[str] = list(lines or [])

    @classmethod
    def parse(cls, text: str) -> "CronTable":
        return cls([line for line in text.splitlines()])

    def render(self) -> str:
        lines = list(self.lines)
        while lines and not lines[-1].strip():
            lines.pop()
        return "\n".join(lines) + "\n" if lines else ""

    def find(self, script: str) -> List[int]:
        return [i for i, line in enumerate(self.lines) if script_of(line) == script]

    def ensure(self, entry: CronEntry) -> str:
        """
        Make ``entry`` the only line for its script.

        Returns:
            ``"unchanged"``, ``"updated"`` or ``"added"``.
        """
        wanted = entry.render()
        matches = self.find(entry.script)
        if not matches:
            self.lines.append(wanted)
            return ADDED

        if len(matches) == 1 and self.lines[matches[0]].strip() == wanted:
            return UNCHANGED

        first = matches[0]
        self.lines[first] = wanted
        for i in reversed(matches[1:]):
            del self.lines[i]
        return UPDATED


class CronRegistrar:
    """Reads and writes the invoking user's crontab through the crontab command."""

    def __init__(self, runner: Runner = run_command):
        self.runner = runner

    def read(self) -> CronTable:
        """Current crontab; a user without one gets an empty table."""
        result = self.runner(["crontab", "-l"], check=False)
        if result.returncode != 0:
            logger.info("No existing crontab for user. Creating new crontab...")
            return CronTable()
        return CronTable.parse(result.stdout or "")

    def write(self, table: CronTable) -> None:
        try:
            self.runner(["crontab", "-"], input=table.render())
        except ExecutionError as e:
            raise CronError(f"Failed to install crontab: {e}") from e

    def register(self, entry: CronEntry) -> str:
        """
        Ensure the crontab holds exactly one line for ``entry.script``.

        Raises:
            CronError: If the new crontab cannot be installed.
        """
        table = self.read()
        outcome = table.ensure(entry)
        if outcome == UNCHANGED:
            logger.info("Cron job already up to date.")
            return outcome

        logger.info("Cron job for script not found or not up-to-date. Updating crontab...")
        self.write(table)
        logger.info(f"Cron job {outcome}: {entry.render()}")
        return outcome
