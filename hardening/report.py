"""Daily audit report generation and delivery through the local MTA."""

import datetime
import logging
import socket
from email.mime.text import MIMEText
from typing import Optional

from .config import ReportSettings
from .errors import ExecutionError
from .utils import Runner, run_command

logger = logging.getLogger(__name__)


def report_subject(hostname: str, day: datetime.date) -> str:
    return f"[{hostname}] - [Auditd Review Report] - [{day.strftime('%Y-%m-%d')}]"


def compose_message(report: str, settings: ReportSettings, subject: str) -> str:
    """Build the plain text email piped to the mail tool."""
    msg = MIMEText(report)
    msg["Subject"] = subject
    msg["To"] = ", ".join(settings.recipients)
    msg["From"] = settings.sender
    return msg.as_string()


class ReportMailer:
    """Generates today's aureport summary and mails it when it is not empty."""

    def __init__(
        self,
        settings: ReportSettings,
        runner: Runner = run_command,
        hostname: Optional[str] = None,
        today: Optional[datetime.date] = None,
        log: Optional[logging.Logger] = None,
    ):
        self.settings = settings
        self.runner = runner
        self.hostname = hostname or socket.getfqdn()
        self.today = today or datetime.date.today()
        self.log = log or logger

    def generate_report(self) -> str:
        """Run the report command and return its output."""
        result = self.runner(list(self.settings.report_command))
        return result.stdout or ""

    def send(self, report: str) -> bool:
        """Pipe the report to the mail tool with an explicit envelope."""
        subject = report_subject(self.hostname, self.today)
        message = compose_message(report, self.settings, subject)
        cmd = [self.settings.mail_tool, "-f", self.settings.sender, *self.settings.recipients]
        try:
            self.runner(cmd, input=message)
        except ExecutionError as e:
            self.log.error("Error: Failed to send email.")
            self.log.debug(str(e))
            return False
        self.log.info(f"Email sent: {subject}")
        return True

    def run(self) -> bool:
        """
        Generate and send today's report.

        An empty report is not sent and counts as success.

        Returns:
            False if the report could not be produced or the mail tool failed.
        """
        if not self.settings.recipients:
            self.log.error("No report recipients configured.")
            return False

        try:
            report = self.generate_report()
        except ExecutionError as e:
            self.log.error(f"Error: Failed to generate audit report: {e}")
            return False

        if not report.strip():
            self.log.info("No relevant audit information found.")
            return True

        if not self.send(report):
            return False
        self.log.info("Audit report sent.")
        return True
