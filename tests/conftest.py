"""
Shared fixtures for the hardening tests.
"""
import subprocess
from typing import Callable, Dict, List, Optional, Tuple, Union

import pytest

from hardening.config import AuditdConfig, Fail2banConfig, LockWaitPolicy
from hardening.errors import ExecutionError

Response = Union[subprocess.CompletedProcess, Callable[..., subprocess.CompletedProcess], Exception]


class FakeRunner:
    """
    Stand-in for hardening.utils.run_command.

    Commands are answered by the most recently registered handler whose
    prefix matches; unmatched commands succeed with empty output.
    """

    def __init__(self):
        self.calls: List[List[str]] = []
        self.inputs: List[Optional[str]] = []
        self._handlers: List[Tuple[Tuple[str, ...], Response]] = []

    def on(self, *prefix: str, returncode: int = 0, stdout: str = "", stderr: str = "", response: Optional[Response] = None) -> None:
        if response is None:
            response = subprocess.CompletedProcess(list(prefix), returncode, stdout, stderr)
        self._handlers.append((tuple(prefix), response))

    def __call__(self, cmd, check=True, capture_output=True, input=None, env=None, timeout=None):
        self.calls.append(list(cmd))
        self.inputs.append(input)

        result = subprocess.CompletedProcess(list(cmd), 0, "", "")
        for prefix, response in reversed(self._handlers):
            if tuple(cmd[: len(prefix)]) == prefix:
                if isinstance(response, Exception):
                    raise response
                if callable(response):
                    result = response(cmd, input)
                else:
                    result = subprocess.CompletedProcess(
                        list(cmd), response.returncode, response.stdout, response.stderr
                    )
                break

        if check and result.returncode != 0:
            raise ExecutionError(f"Command failed with exit code {result.returncode}: {' '.join(cmd)}")
        return result

    def commands(self, *prefix: str) -> List[List[str]]:
        return [c for c in self.calls if tuple(c[: len(prefix)]) == prefix]


class FakeCrontab:
    """Keeps a crontab in memory behind ``crontab -l`` / ``crontab -``."""

    def __init__(self, text: Optional[str] = None):
        self.text = text
        self.writes = 0

    def install(self, runner: FakeRunner) -> None:
        runner.on("crontab", "-l", response=self._list)
        runner.on("crontab", "-", response=self._write)

    def _list(self, cmd, input):
        if self.text is None:
            return subprocess.CompletedProcess(cmd, 1, "", "no crontab for root\n")
        return subprocess.CompletedProcess(cmd, 0, self.text, "")

    def _write(self, cmd, input):
        self.text = input
        self.writes += 1
        return subprocess.CompletedProcess(cmd, 0, "", "")


@pytest.fixture
def runner() -> FakeRunner:
    fake = FakeRunner()
    # fuser exits 1 when nobody holds the file
    fake.on("fuser", returncode=1)
    # packages are missing unless a test says otherwise
    fake.on("dpkg", "-s", returncode=1)
    return fake


@pytest.fixture
def crontab(runner) -> FakeCrontab:
    fake = FakeCrontab()
    fake.install(runner)
    return fake


@pytest.fixture
def no_wait() -> LockWaitPolicy:
    return LockWaitPolicy(attempts=3, delay=0)


@pytest.fixture
def fail2ban_config(tmp_path, no_wait) -> Fail2banConfig:
    return Fail2banConfig(
        ssh_port=2222,
        recipients=["ops@example.com", "sec@example.com"],
        sender="fail2ban@example.com",
        ignore_ips=["10.0.0.0/8", "192.168.1.10/32"],
        jail_file=tmp_path / "etc" / "fail2ban" / "jail.local",
        backup_dir=tmp_path / "backups" / "fail2ban",
        log_file=tmp_path / "log" / "fail2ban-setup.log",
        lock_wait=no_wait,
    )


@pytest.fixture
def auditd_config(tmp_path, no_wait) -> AuditdConfig:
    conf = tmp_path / "etc" / "audit" / "auditd.conf"
    conf.parent.mkdir(parents=True)
    conf.write_text("local_events = yes\nlog_file = /var/log/audit.log\nlog_format = ENRICHED\n")
    return AuditdConfig(
        recipients=["ops@example.com"],
        sender="auditd@example.com",
        rules_file=tmp_path / "etc" / "audit" / "rules.d" / "custom-audit-rules.rules",
        auditd_conf=conf,
        backup_dir=tmp_path / "backups" / "auditd",
        log_file=tmp_path / "log" / "auditd-setup.log",
        report_script=tmp_path / "bin" / "audit-report.sh",
        report_settings=tmp_path / "etc" / "hardening" / "audit-report.json",
        report_log=tmp_path / "log" / "audit-report.log",
        lock_wait=no_wait,
    )
