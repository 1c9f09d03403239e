"""Timestamped backups and rendering of key/value configuration files."""

import datetime
import logging
import os
import re
import shutil
from pathlib import Path
from typing import Dict, Mapping, Optional, Union

from .errors import BackupError, ConfigurationError

logger = logging.getLogger(__name__)

BACKUP_TIMESTAMP = "%Y%m%d_%H%M%S"

# section name -> key -> value; a None value omits the directive
Sections = Mapping[str, Mapping[str, Optional[object]]]


def backup_file(
    file_path: Union[str, Path],
    backup_dir: Union[str, Path],
    now: Optional[datetime.datetime] = None,
) -> Optional[Path]:
    """
    Copy an existing file into the backup directory with a timestamp suffix.

    Backups are never overwritten: when two backups land in the same second a
    numeric suffix is added.

    Args:
        file_path: File to back up.
        backup_dir: Directory receiving the copy; created if absent.
        now: Timestamp to use instead of the current time.

    Returns:
        Path of the new backup, or None if there was nothing to back up.

    Raises:
        BackupError: If the directory or the copy cannot be created.
    """
    file_path = Path(file_path)
    if not file_path.is_file():
        logger.debug(f"No existing {file_path} to back up")
        return None

    timestamp = (now or datetime.datetime.now()).strftime(BACKUP_TIMESTAMP)
    backup_dir = Path(backup_dir)
    try:
        backup_dir.mkdir(parents=True, exist_ok=True)
        backup_path = backup_dir / f"{file_path.name}.{timestamp}"
        counter = 1
        while backup_path.exists():
            backup_path = backup_dir / f"{file_path.name}.{timestamp}.{counter}"
            counter += 1
        shutil.copy2(file_path, backup_path)
    except OSError as e:
        raise BackupError(f"Failed to back up {file_path} to {backup_dir}: {e}") from e

    logger.info(f"Backed up {file_path} to {backup_path}")
    return backup_path


def render_sections(sections: Sections) -> str:
    """
    Render section mappings as INI-style text.

    Keys whose value is None are left out. A section named "" is rendered
    without a header.
    """
    blocks = []
    for name, values in sections.items():
        lines = [f"[{name}]"] if name else []
        for key, value in values.items():
            if value is None:
                continue
            lines.append(f"{key} = {value}")
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks) + "\n"


def ensure_writable(file_path: Union[str, Path]) -> None:
    """
    Make sure a file can be written, creating it (and parents) if missing.

    Raises:
        ConfigurationError: If the file cannot be created or is read-only.
    """
    file_path = Path(file_path)
    try:
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.touch(exist_ok=True)
    except OSError as e:
        raise ConfigurationError(f"Cannot create {file_path}: {e}") from e
    if not os.access(file_path, os.W_OK):
        raise ConfigurationError(f"{file_path} is not writable")


class ConfigWriter:
    """Writes configuration files, backing up the previous version first."""

    def __init__(self, backup_dir: Union[str, Path]):
        self.backup_dir = Path(backup_dir)

    def write(self, file_path: Union[str, Path], content: str, mode: int = 0o644) -> Optional[Path]:
        """
        Back up and overwrite a configuration file.

        Returns:
            Path of the backup taken, if any.

        Raises:
            BackupError: If the existing file cannot be backed up.
            ConfigurationError: If the new content cannot be written.
        """
        file_path = Path(file_path)
        backup = backup_file(file_path, self.backup_dir)
        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            file_path.write_text(content)
            os.chmod(file_path, mode)
        except OSError as e:
            raise ConfigurationError(f"Failed to write {file_path}: {e}") from e
        logger.info(f"Configuration written to {file_path}")
        return backup


def update_key_values(file_path: Union[str, Path], values: Dict[str, str]) -> str:
    """
    Set ``key = value`` lines in a flat configuration file.

    Every existing line for a key is rewritten in place; keys that do not
    appear are appended.

    Returns:
        The new file content.
    """
    file_path = Path(file_path)
    try:
        lines = file_path.read_text().splitlines() if file_path.exists() else []
    except OSError as e:
        raise ConfigurationError(f"Failed to read {file_path}: {e}") from e

    matched = set()
    for i, line in enumerate(lines):
        for key, value in values.items():
            if re.match(rf"^\s*{re.escape(key)}\s*=", line):
                lines[i] = f"{key} = {value}"
                matched.add(key)
                break
    lines.extend(f"{key} = {value}" for key, value in values.items() if key not in matched)
    return "\n".join(lines) + "\n"

