"""
Hardening - fail2ban and auditd setup for Debian/Ubuntu hosts
"""

from .config import VERSION

__version__ = VERSION
