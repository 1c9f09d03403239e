"""
Configuration for the hardening setup commands.

Every pipeline receives one of these dataclasses explicitly; the defaults hold
the fixed system paths used on Debian and Ubuntu hosts.
"""

import json
import os
import socket
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Union

# ----------------------------------------------------------------
# Configuration & Constants
# ----------------------------------------------------------------
APP_NAME: str = "Hardening"
VERSION: str = "1.0.0"

BACKUP_ROOT = Path("/var/backups/hardening")
REPORT_SETTINGS_FILE = Path("/etc/hardening/audit-report.json")
REPORT_SETTINGS_ENV = "HARDENING_REPORT_CONFIG"

APT_LOCK_FILES: List[str] = [
    "/var/lib/dpkg/lock",
    "/var/lib/dpkg/lock-frontend",
    "/var/lib/apt/lists/lock",
    "/var/cache/apt/archives/lock",
]

AUDIT_REPORT_COMMAND: List[str] = ["aureport", "--summary", "-i", "-ts", "today"]


def default_address() -> str:
    """Fallback mail address for the local root account."""
    return f"root@{socket.getfqdn()}"


# ----------------------------------------------------------------
# Data Structures
# ----------------------------------------------------------------
@dataclass
class LockWaitPolicy:
    """How long to wait for another package manager to release its locks."""

    attempts: int = 120
    delay: float = 1.0
    lock_files: List[str] = field(default_factory=lambda: list(APT_LOCK_FILES))


@dataclass
class Fail2banConfig:
    """Parameters of the fail2ban setup run."""

    ssh_port: int
    recipients: List[str]
    sender: str
    ignore_ips: List[str] = field(default_factory=list)
    service: str = "fail2ban"
    packages: List[str] = field(default_factory=lambda: ["fail2ban"])
    jail_file: Path = Path("/etc/fail2ban/jail.local")
    backup_dir: Path = BACKUP_ROOT / "fail2ban"
    log_file: Path = Path("/var/log/fail2ban-setup.log")
    auth_log: str = "/var/log/auth.log"
    bantime: int = 3600
    findtime: int = 600
    maxretry: int = 5
    ssh_maxretry: int = 3
    lock_wait: LockWaitPolicy = field(default_factory=LockWaitPolicy)


@dataclass
class AuditdConfig:
    """Parameters of the auditd setup run."""

    recipients: List[str]
    sender: str
    service: str = "auditd"
    packages: List[str] = field(default_factory=lambda: ["auditd"])
    rules_file: Path = Path("/etc/audit/rules.d/custom-audit-rules.rules")
    auditd_conf: Path = Path("/etc/audit/auditd.conf")
    audit_log: str = "/var/log/audit/audit.log"
    backup_dir: Path = BACKUP_ROOT / "auditd"
    log_file: Path = Path("/var/log/auditd-setup.log")
    report_script: Path = Path("/usr/local/bin/audit-report.sh")
    report_settings: Path = REPORT_SETTINGS_FILE
    report_log: Path = Path("/var/log/audit-report.log")
    lock_wait: LockWaitPolicy = field(default_factory=LockWaitPolicy)


@dataclass
class ReportSettings:
    """Who receives the daily audit report and how it is produced."""

    recipients: List[str]
    sender: str
    log_file: str = "/var/log/audit-report.log"
    mail_tool: str = "sendmail"
    report_command: List[str] = field(default_factory=lambda: list(AUDIT_REPORT_COMMAND))

    def to_dict(self) -> Dict[str, Any]:
        """Convert the settings to a dictionary."""
        return asdict(self)

    def save(self, path: Union[str, Path]) -> None:
        """Write the settings as JSON, readable by root only."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(self.to_dict(), indent=2) + "\n")
        os.chmod(path, 0o600)

    @classmethod
    def load(cls, path: Union[str, Path]) -> "ReportSettings":
        """
        Read settings written by ``save``.

        Raises:
            ValueError: If the file is not valid JSON, misses a required key or
                holds a value of the wrong type.
        """
        data = json.loads(Path(path).read_text())
        if not isinstance(data, dict):
            raise ValueError(f"Report settings in {path} must be a JSON object")
        missing = [key for key in ("recipients", "sender") if key not in data]
        if missing:
            raise ValueError(f"Report settings in {path} miss: {', '.join(missing)}")
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        if not _is_str_list(known["recipients"]):
            raise ValueError(f"Report settings in {path}: recipients must be a list of strings")
        for key in ("sender", "log_file", "mail_tool"):
            if key in known and not isinstance(known[key], str):
                raise ValueError(f"Report settings in {path}: {key} must be a string")
        if "report_command" in known and not _is_str_list(known["report_command"]):
            raise ValueError(
                f"Report settings in {path}: report_command must be a list of strings"
            )
        return cls(**known)


def _is_str_list(value) -> bool:
    return isinstance(value, list) and all(isinstance(v, str) for v in value)

