"""Privilege checks and positional argument parsing."""

import ipaddress
import os
from typing import List

from .errors import PrivilegeError, UsageError


def check_root() -> None:
    """
    Verify that the process runs with root privileges.

    Raises:
        PrivilegeError: If the effective user is not root.
    """
    if os.geteuid() != 0:
        raise PrivilegeError("This script must be run as root. Exiting...")


def _split_list(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def parse_address_list(value: str) -> List[str]:
    """
    Split a comma separated list of email addresses.

    Raises:
        UsageError: If the list is empty or an entry is not an address.
    """
    addresses = _split_list(value)
    if not addresses:
        raise UsageError("At least one email address is required")
    for address in addresses:
        local, _, domain = address.partition("@")
        if not local or not domain:
            raise UsageError(f"Invalid email address: {address}")
    return addresses


def parse_address(value: str) -> str:
    """Parse a single email address."""
    addresses = parse_address_list(value)
    if len(addresses) != 1:
        raise UsageError(f"Expected a single email address, got: {value}")
    return addresses[0]


def parse_cidr_list(value: str) -> List[str]:
    """
    Split a comma separated IP allow-list.

    An empty string yields an empty list. Entries are kept as written so the
    rendered directive matches what the operator passed in.

    Raises:
        UsageError: If an entry is not an IP address or network.
    """
    entries = _split_list(value)
    for entry in entries:
        try:
            ipaddress.ip_network(entry, strict=False)
        except ValueError as e:
            raise UsageError(f"Invalid IP/CIDR entry: {entry}") from e
    return entries


def parse_port(value: str) -> int:
    """Parse a TCP port number."""
    try:
        port = int(value)
    except ValueError as e:
        raise UsageError(f"Invalid SSH port: {value}") from e
    if not 1 <= port <= 65535:
        raise UsageError(f"SSH port out of range: {port}")
    return port
