"""Idempotent apt package installation."""

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from .config import LockWaitPolicy
from .errors import ExecutionError, PackageLockError
from .utils import Runner, run_command

PACKAGE_TIMEOUT: int = 300  # seconds
APT_ENV = {"DEBIAN_FRONTEND": "noninteractive"}

logger = logging.getLogger(__name__)


@dataclass
class InstallReport:
    """Outcome of one installation run."""

    installed: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


class PackageInstaller:
    """Installs apt packages, skipping those already present."""

    def __init__(
        self,
        lock_wait: Optional[LockWaitPolicy] = None,
        runner: Runner = run_command,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.lock_wait = lock_wait or LockWaitPolicy()
        self.runner = runner
        self.sleep = sleep

    def is_installed(self, package: str) -> bool:
        """Query the dpkg database for a package."""
        result = self.runner(["dpkg", "-s", package], check=False)
        return result.returncode == 0

    def lock_held(self) -> bool:
        """True if any process holds one of the package manager locks."""
        for lock_file in self.lock_wait.lock_files:
            try:
                result = self.runner(["fuser", lock_file], check=False)
            except ExecutionError:
                logger.debug("fuser not available; assuming package locks are free")
                return False
            if result.returncode == 0:
                return True
        return False

    def wait_for_lock(self) -> None:
        """
        Poll the package manager locks until they are released.

        Raises:
            PackageLockError: If the locks are still held after the configured
                number of attempts.
        """
        for attempt in range(self.lock_wait.attempts):
            if not self.lock_held():
                return
            logger.info(
                f"Waiting for other software managers to finish... "
                f"({attempt + 1}/{self.lock_wait.attempts})"
            )
            self.sleep(self.lock_wait.delay)
        if self.lock_held():
            raise PackageLockError(
                f"Package manager still locked after "
                f"{self.lock_wait.attempts * self.lock_wait.delay:.0f}s"
            )

    def update_lists(self) -> bool:
        """Refresh package lists; failure is logged and tolerated."""
        self.wait_for_lock()
        try:
            self.runner(["apt-get", "update", "-y"], env=APT_ENV, timeout=PACKAGE_TIMEOUT)
        except ExecutionError as e:
            logger.warning(f"Failed to update package lists. Continuing with installation... ({e})")
            return False
        logger.info("Package lists updated successfully.")
        return True

    def install(self, packages: List[str]) -> InstallReport:
        """
        Ensure every package in the list is installed.

        Failures are collected in the returned report; the run does not stop
        at the first failing package.

        Raises:
            PackageLockError: If another package manager never releases its lock.
        """
        logger.info(f"Starting package installation process: {', '.join(packages)}")
        report = InstallReport()
        missing = []
        for package in packages:
            if self.is_installed(package):
                logger.info(f"{package} is already installed.")
                report.skipped.append(package)
            else:
                missing.append(package)

        if missing:
            self.update_lists()

        for package in missing:
            self.wait_for_lock()
            try:
                self.runner(
                    ["apt-get", "install", "-y", package],
                    env=APT_ENV,
                    timeout=PACKAGE_TIMEOUT,
                )
            except ExecutionError as e:
                logger.error(f"Failed to install {package}: {e}")
                report.failed.append(package)
            else:
                logger.info(f"Successfully installed {package}.")
                report.installed.append(package)

        if report.ok:
            logger.info("All packages were installed successfully.")
        else:
            logger.error(
                f"Failed to install the following packages: {' '.join(report.failed)}"
            )
        return report
