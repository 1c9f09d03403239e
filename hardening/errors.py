"""Exceptions raised by the hardening setup pipelines."""


class SetupError(Exception):
    """Base exception for setup errors."""

    pass


class PrivilegeError(SetupError):
    """Raised when the process is not running as root."""

    pass


class UsageError(SetupError):
    """Raised when positional arguments are missing or malformed."""

    pass


class PackageLockError(SetupError):
    """Raised when the package manager lock is still held after waiting."""

    pass


class ExecutionError(SetupError):
    """Raised when command execution fails."""

    pass


class ServiceError(ExecutionError):
    """Raised when a systemctl operation fails."""

    pass


class CronError(ExecutionError):
    """Raised when the crontab cannot be updated."""

    pass


class ConfigurationError(SetupError):
    """Raised when configuration changes fail."""

    pass


class BackupError(ConfigurationError):
    """Raised when an existing configuration file cannot be backed up."""

    pass
