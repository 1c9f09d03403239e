"""auditd installation, audit rules and the daily report job."""

import logging
import os
import shlex
import sys
from typing import Dict, List

from .config import AuditdConfig, ReportSettings
from .configfile import ConfigWriter, update_key_values
from .cron import CronEntry, CronRegistrar
from .errors import ConfigurationError, ExecutionError
from .packages import InstallReport, PackageInstaller
from .services import ServiceController
from .ui import print_install_summary, print_section, print_success
from .utils import Runner, run_command

logger = logging.getLogger(__name__)

# comment -> rules written under it
AUDIT_RULES: Dict[str, List[str]] = {
    "Monitor system changes": [
        "-w /etc/passwd -p wa",
        "-w /etc/shadow -p wa",
        "-w /etc/sudoers -p wa",
        "-w /etc/group -p wa",
    ],
    "Monitor login and authentication events": [
        "-w /var/log/auth.log -p wa",
        "-w /var/log/secure -p wa",
    ],
    "Monitor executable files": [
        "-a always,exit -F arch=b64 -S execve",
        "-a always,exit -F arch=b32 -S execve",
    ],
}


def render_rules(rules: Dict[str, List[str]] = AUDIT_RULES) -> str:
    blocks = []
    for comment, lines in rules.items():
        blocks.append("\n".join([f"# {comment}"] + lines))
    return "\n\n".join(blocks) + "\n"


def render_report_script(settings_path: str, python: str = sys.executable) -> str:
    """Shell wrapper run by cron; the mail settings live in the JSON file."""
    return (
        "#!/bin/sh\n"
        "# Generated by hardening-auditd: mails the daily auditd summary.\n"
        f"exec {shlex.quote(python)} -m hardening audit-report "
        f"--config {shlex.quote(settings_path)} \"$@\"\n"
    )


class AuditdSetup:
    """Installs auditd, applies custom rules and schedules the report mailer."""

    def __init__(self, config: AuditdConfig, runner: Runner = run_command):
        self.config = config
        self.runner = runner
        self.installer = PackageInstaller(config.lock_wait, runner=runner)
        self.service = ServiceController(config.service, runner=runner)
        self.writer = ConfigWriter(config.backup_dir)
        self.cron = CronRegistrar(runner=runner)

    def install(self) -> InstallReport:
        print_section("Installing auditd")
        report = self.installer.install(self.config.packages)
        print_install_summary(report.installed, report.skipped, report.failed)
        return report

    def configure_rules(self) -> None:
        logger.info("Configuring Auditd rules...")
        self.writer.write(self.config.rules_file, render_rules(), mode=0o640)
        logger.info("Custom Auditd rules configured.")

    def configure_logging(self) -> None:
        """Force RAW log format and the standard audit log location."""
        logger.info("Configuring Auditd logging...")
        content = update_key_values(
            self.config.auditd_conf,
            {"log_format": "RAW", "log_file": self.config.audit_log},
        )
        self.writer.write(self.config.auditd_conf, content, mode=0o640)
        logger.info("Auditd logging configured.")

    def show_aureport(self) -> None:
        logger.info("Showing aureport...")
        try:
            result = self.runner(["aureport", "--summary"])
        except ExecutionError as e:
            logger.warning(f"aureport failed: {e}")
            return
        logger.info(result.stdout or "")

    def view_config(self) -> None:
        """Log the loaded rules, the rule file and auditd.conf."""
        logger.info("Viewing Auditd rules...")
        try:
            logger.info(self.runner(["auditctl", "-l"]).stdout or "")
        except ExecutionError as e:
            logger.warning(f"auditctl failed: {e}")
        for path in (self.config.rules_file, self.config.auditd_conf):
            if path.is_file():
                logger.info(f"{path}:\n{path.read_text()}")

    def report_settings(self) -> ReportSettings:
        return ReportSettings(
            recipients=list(self.config.recipients),
            sender=self.config.sender,
            log_file=str(self.config.report_log),
        )

    def write_reporting(self) -> None:
        """Write the report settings and the executable reporting script."""
        settings_path = self.config.report_settings
        script = self.config.report_script
        try:
            self.report_settings().save(settings_path)
            script.parent.mkdir(parents=True, exist_ok=True)
            script.write_text(render_report_script(str(settings_path)))
            os.chmod(script, 0o755)
            if os.geteuid() == 0:
                os.chown(script, 0, 0)
        except OSError as e:
            raise ConfigurationError(f"Failed to write reporting script {script}: {e}") from e
        logger.info(f"Audit reporting script written to {script}")

    def schedule_reporting(self) -> str:
        entry = CronEntry(str(self.config.report_script), str(self.config.report_log))
        return self.cron.register(entry)

    def run(self) -> None:
        """
        Run the full auditd setup.

        Raises:
            SetupError: On lock timeouts, write failures, failed service
                operations and crontab errors.
        """
        logger.info("Initializing Auditd...")
        self.install()

        print_section("Configuring auditd")
        self.configure_rules()
        self.configure_logging()

        print_section("Starting auditd")
        self.service.status()
        self.service.start()
        self.service.enable()
        self.service.restart()
        self.show_aureport()
        self.view_config()

        print_section("Scheduling audit report")
        self.write_reporting()
        self.schedule_reporting()
        print_success("Auditd initialization complete.")
