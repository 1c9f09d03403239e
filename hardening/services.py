"""Thin wrapper over systemctl for a single unit."""

import logging
from dataclasses import dataclass

from .errors import ExecutionError, ServiceError
from .utils import Runner, run_command

logger = logging.getLogger(__name__)

# systemctl status exit codes
STATUS_ACTIVE = 0
STATUS_INACTIVE = 3


@dataclass
class ServiceStatus:
    unit: str
    active: bool
    output: str


class ServiceController:
    """Enable, start, restart and inspect one systemd unit."""

    def __init__(self, unit: str, runner: Runner = run_command):
        self.unit = unit
        self.runner = runner

    def _systemctl(self, action: str) -> None:
        try:
            self.runner(["systemctl", action, self.unit, "--no-pager"])
        except ExecutionError as e:
            raise ServiceError(f"Failed to {action} {self.unit}: {e}") from e

    def start(self) -> None:
        self._systemctl("start")
        logger.info(f"Service {self.unit} started.")

    def restart(self) -> None:
        self._systemctl("restart")
        logger.info(f"Service {self.unit} restarted.")

    def enable(self) -> bool:
        """
        Enable the unit at boot and start it.

        Failures are logged and reported through the return value only.
        """
        try:
            self._systemctl("enable")
            self.start()
        except ServiceError as e:
            logger.error(str(e))
            return False
        logger.info(f"Service {self.unit} enabled.")
        return True

    def status(self) -> ServiceStatus:
        """
        Query the unit state.

        An inactive unit is a normal result; any other non-zero exit code (for
        example an unknown unit) raises ServiceError.
        """
        try:
            result = self.runner(["systemctl", "status", self.unit, "--no-pager"], check=False)
        except ExecutionError as e:
            raise ServiceError(f"Failed to query {self.unit}: {e}") from e

        if result.returncode not in (STATUS_ACTIVE, STATUS_INACTIVE):
            raise ServiceError(
                f"systemctl status {self.unit} exited with code {result.returncode}"
            )
        status = ServiceStatus(
            unit=self.unit,
            active=result.returncode == STATUS_ACTIVE,
            output=(result.stdout or "").strip(),
        )
        logger.info(f"Service {self.unit} is {'active' if status.active else 'inactive'}.")
        logger.debug(status.output)
        return status
