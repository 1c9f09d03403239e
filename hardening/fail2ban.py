"""fail2ban installation and SSH jail configuration."""

import logging
from typing import Dict, Optional

from .config import Fail2banConfig
from .configfile import ConfigWriter, ensure_writable, render_sections
from .packages import InstallReport, PackageInstaller
from .services import ServiceController
from .ui import print_install_summary, print_section, print_success
from .utils import Runner, run_command

logger = logging.getLogger(__name__)


def jail_sections(config: Fail2banConfig) -> Dict[str, Dict[str, Optional[object]]]:
    """
    Build the jail.local sections for the SSH jail.

    ``ignoreip`` is None (and therefore omitted) when the allow-list is empty.
    """
    return {
        "DEFAULT": {
            "ignoreip": " ".join(config.ignore_ips) if config.ignore_ips else None,
            "bantime": config.bantime,
            "findtime": config.findtime,
            "maxretry": config.maxretry,
            "destemail": ",".join(config.recipients),
            "sender": config.sender,
            "mta": "sendmail",
            "action": "%(action_mwl)s",
        },
        "sshd": {
            "enabled": "true",
            "port": config.ssh_port,
            "filter": "sshd",
            "logpath": config.auth_log,
            "backend": "auto",
            "maxretry": config.ssh_maxretry,
        },
    }


def render_jail(config: Fail2banConfig) -> str:
    header = "# Managed by hardening-fail2ban; local changes are overwritten.\n\n"
    return header + render_sections(jail_sections(config))


class Fail2banSetup:
    """Installs fail2ban and protects SSH with a custom jail."""

    def __init__(self, config: Fail2banConfig, runner: Runner = run_command):
        self.config = config
        self.runner = runner
        self.installer = PackageInstaller(config.lock_wait, runner=runner)
        self.service = ServiceController(config.service, runner=runner)
        self.writer = ConfigWriter(config.backup_dir)

    def install(self) -> InstallReport:
        print_section("Installing fail2ban")
        report = self.installer.install(self.config.packages)
        print_install_summary(report.installed, report.skipped, report.failed)
        return report

    def view_config(self) -> None:
        """Log the jail configuration currently on disk."""
        jail = self.config.jail_file
        if jail.is_file():
            logger.info(f"Current fail2ban configuration ({jail}):")
            logger.debug(jail.read_text())
        else:
            logger.info(f"No existing {jail}; a new one will be created.")

    def write_jail(self) -> None:
        print_section("Configuring SSH jail")
        backup = self.writer.write(self.config.jail_file, render_jail(self.config))
        if backup:
            logger.info(f"Previous jail configuration saved as {backup}")
        if not self.config.ignore_ips:
            logger.info("No IP allow-list given; ignoreip directive omitted.")

    def run(self) -> None:
        """
        Run the full fail2ban setup.

        Raises:
            SetupError: On lock timeouts, backup or write failures and failed
                service restarts.
        """
        logger.info("Initializing Fail2Ban...")
        self.install()

        ensure_writable(self.config.log_file)

        print_section("Starting fail2ban")
        self.service.status()
        self.service.start()
        self.service.enable()

        self.view_config()
        self.write_jail()
        self.service.restart()
        print_success("fail2ban configured.")

