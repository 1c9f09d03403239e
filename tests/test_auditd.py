"""
Tests for the auditd setup pipeline.
"""
import json
import os

import pytest

from hardening.auditd import AUDIT_RULES, AuditdSetup, render_report_script, render_rules
from hardening.config import ReportSettings
from hardening.errors import ServiceError


class TestRendering:
    def test_rules_cover_identity_files_and_execve(self):
        text = render_rules()

        assert "-w /etc/shadow -p wa" in text.splitlines()
        assert "-a always,exit -F arch=b64 -S execve" in text.splitlines()
        assert text.count("# ") == len(AUDIT_RULES)

    def test_report_script_points_at_settings(self):
        script = render_report_script("/etc/hardening/audit-report.json", python="/usr/bin/python3")

        assert script.startswith("#!/bin/sh\n")
        assert (
            "exec /usr/bin/python3 -m hardening audit-report "
            "--config /etc/hardening/audit-report.json"
        ) in script


class TestAuditdSetup:
    @pytest.fixture(autouse=True)
    def setup(self, runner, crontab, auditd_config):
        self.runner = runner
        self.crontab = crontab
        self.config = auditd_config
        self.setup = AuditdSetup(auditd_config, runner=runner)

    def test_full_run(self):
        self.runner.on("aureport", stdout="Summary Report\n")

        self.setup.run()

        assert self.runner.commands("apt-get", "install") == [["apt-get", "install", "-y", "auditd"]]
        systemctl = [c[1] for c in self.runner.commands("systemctl")]
        assert systemctl == ["status", "start", "enable", "start", "restart"]
        assert self.config.rules_file.read_text() == render_rules()

    def test_run_views_loaded_rules(self):
        self.setup.run()

        assert self.runner.commands("auditctl") == [["auditctl", "-l"]]


    def test_auditd_conf_logging_keys(self):
        self.setup.run()

        lines = self.config.auditd_conf.read_text().splitlines()
        assert lines == [
            "local_events = yes",
            "log_file = /var/log/audit/audit.log",
            "log_format = RAW",
        ]
        assert len(list(self.config.backup_dir.glob("auditd.conf.*"))) == 1

    def test_report_settings_and_script(self):
        self.setup.run()

        settings = ReportSettings.load(self.config.report_settings)
        assert settings.recipients == ["ops@example.com"]
        assert settings.sender == "auditd@example.com"
        assert settings.log_file == str(self.config.report_log)

        script = self.config.report_script
        assert os.access(script, os.X_OK)
        assert str(self.config.report_settings) in script.read_text()
        assert json.loads(self.config.report_settings.read_text())["mail_tool"] == "sendmail"

    def test_cron_registered_once_across_runs(self):
        self.setup.run()
        self.setup.run()

        expected = f"0 0 * * * {self.config.report_script} >{self.config.report_log} 2>&1"
        assert self.crontab.text.splitlines().count(expected) == 1
        assert self.crontab.writes == 1

    def test_installed_package_skips_apt(self):
        self.runner.on("dpkg", "-s", "auditd", returncode=0)

        self.setup.run()

        assert self.runner.commands("apt-get") == []

    def test_aureport_failure_is_not_fatal(self):
        self.runner.on("aureport", returncode=1)

        self.setup.run()

        assert self.crontab.writes == 1

    def test_restart_failure_stops_before_reporting(self):
        self.runner.on("systemctl", "restart", returncode=1)

        with pytest.raises(ServiceError):
            self.setup.run()

        assert not self.config.report_script.exists()
        assert self.crontab.writes == 0

    def test_view_config_lists_rules(self):
        self.runner.on("auditctl", "-l", stdout="-w /etc/passwd -p wa\n")
        self.setup.configure_rules()

        self.setup.view_config()

        assert self.runner.commands("auditctl") == [["auditctl", "-l"]]
