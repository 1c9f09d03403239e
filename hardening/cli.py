"""
Command line entry points.

Each command checks for root before anything else, validates its positional
arguments and then runs one pipeline. SetupError subclasses are turned into
exit status 1 here and nowhere else.
"""

import sys
from pathlib import Path
from typing import Callable, List, NoReturn, Tuple

import click

from .auditd import AuditdSetup
from .config import (
    APP_NAME,
    REPORT_SETTINGS_ENV,
    REPORT_SETTINGS_FILE,
    AuditdConfig,
    Fail2banConfig,
    ReportSettings,
    default_address,
)
from .errors import SetupError, UsageError
from .fail2ban import Fail2banSetup
from .guard import check_root, parse_address, parse_address_list, parse_cidr_list, parse_port
from .log import setup_logger, setup_report_logger
from .report import ReportMailer
from .ui import console, create_header, print_error, print_warning

FAIL2BAN_USAGE = (
    "Usage: {prog} <ssh_port> <recipient_emails> <sender_email> <ip_cidr_list>\n"
    "Example: {prog} 22 recipient1@ex.com,recipient2@ex.com sender@ex.com "
    "1.1.1.1/32,2.2.2.2/32"
)
AUDITD_USAGE = (
    "Usage: {prog} [recipient_email_addresses] [sender_email_address]\n"
    "Example: {prog} recipient1@ex.com,recipient2@ex.com sender@ex.com"
)


def fail_usage(ctx: click.Context, usage: str, message: str = "") -> NoReturn:
    if message:
        print_error(message)
    click.echo(usage.format(prog=ctx.command_path), err=True)
    sys.exit(1)


def require_root() -> None:
    try:
        check_root()
    except SetupError as e:
        print_error(str(e))
        sys.exit(1)


def run_pipeline(step: Callable[[], None]) -> None:
    """Run a setup step, mapping failures to exit codes."""
    try:
        step()
    except SetupError as e:
        print_error(str(e))
        sys.exit(1)
    except KeyboardInterrupt:
        print_warning("Setup interrupted by user.")
        sys.exit(130)


# ----------------------------------------------------------------
# fail2ban
# ----------------------------------------------------------------
@click.command(
    "fail2ban",
    context_settings={"ignore_unknown_options": True},
    add_help_option=False,
)
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def fail2ban_command(ctx: click.Context, args: Tuple[str, ...]) -> None:
    """Install fail2ban and write an SSH jail."""
    require_root()
    if len(args) != 4:
        fail_usage(ctx, FAIL2BAN_USAGE)

    port, recipients, sender, ip_list = args
    try:
        config = Fail2banConfig(
            ssh_port=parse_port(port),
            recipients=parse_address_list(recipients),
            sender=parse_address(sender),
            ignore_ips=parse_cidr_list(ip_list),
        )
    except UsageError as e:
        fail_usage(ctx, FAIL2BAN_USAGE, str(e))

    console.print(create_header(f"{APP_NAME} fail2ban"))
    run_pipeline(lambda: _run_fail2ban(config))


def _run_fail2ban(config: Fail2banConfig) -> None:
    setup_logger(config.log_file)
    Fail2banSetup(config).run()


# ----------------------------------------------------------------
# auditd
# ----------------------------------------------------------------
@click.command(
    "auditd",
    context_settings={"ignore_unknown_options": True},
    add_help_option=False,
)
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def auditd_command(ctx: click.Context, args: Tuple[str, ...]) -> None:
    """Install auditd, apply audit rules and schedule the daily report."""
    require_root()
    if len(args) > 2:
        fail_usage(ctx, AUDITD_USAGE)

    values: List[str] = [a or default_address() for a in args]
    values += [default_address()] * (2 - len(values))
    try:
        config = AuditdConfig(
            recipients=parse_address_list(values[0]),
            sender=parse_address(values[1]),
        )
    except UsageError as e:
        fail_usage(ctx, AUDITD_USAGE, str(e))

    console.print(create_header(f"{APP_NAME} auditd"))
    run_pipeline(lambda: _run_auditd(config))


def _run_auditd(config: AuditdConfig) -> None:
    setup_logger(config.log_file)
    AuditdSetup(config).run()


# ----------------------------------------------------------------
# audit report
# ----------------------------------------------------------------
@click.command("audit-report")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    envvar=REPORT_SETTINGS_ENV,
    default=REPORT_SETTINGS_FILE,
    show_default=True,
    help="JSON file with recipients, sender and log file.",
)
def audit_report_command(config_path: Path) -> None:
    """Mail today's auditd summary to the configured recipients."""
    require_root()
    try:
        settings = ReportSettings.load(config_path)
    except (OSError, ValueError, TypeError) as e:
        print_error(f"Cannot load report settings from {config_path}: {e}")
        sys.exit(1)

    log = setup_report_logger(settings.log_file)
    if not ReportMailer(settings, log=log).run():
        sys.exit(1)


@click.group()
def main() -> None:
    """Host hardening for fail2ban and auditd."""


main.add_command(fail2ban_command)
main.add_command(auditd_command)
main.add_command(audit_report_command)
