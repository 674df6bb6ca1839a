"""
One-shot front-end — perform exactly one action per process run.

    cert-registry -add -serial SN001 -signer AcmeCA -components bootloader,kernel
    cert-registry -check -serial SN001

Flags are validated before the database is touched: exactly one of -add and
-check, plus the values that action needs. Argument errors print usage and
exit 1. A repository failure is logged, reported and also exits 1. This
front-end uses the simple (no dates) schema.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import NoReturn

import click
import structlog

from cert_registry.commands import build_certificate, format_existence, require
from cert_registry.config import CLI_DATABASE_FILE
from cert_registry.domain.models import Certificate
from cert_registry.domain.ports import CertificateRepository
from cert_registry.main import configure_structlog, load_settings, open_repository
from cert_registry.railway import ErrorCode, FailureDescription
from cert_registry.railway.result import Result

log = structlog.get_logger()


@dataclass(frozen=True, slots=True)
class AddAction:
    certificate: Certificate


@dataclass(frozen=True, slots=True)
class CheckAction:
    serial_number: str


type Action = AddAction | CheckAction


def parse_action(
    add: bool,
    check: bool,
    serial: str | None,
    signer: str | None,
    components: str | None,
) -> Result[Action]:
    """Validate the flag combination and the values the chosen action needs."""
    if add and check:
        return Result.failure(ErrorCode.ARGUMENT_ERROR, "Specify only one of -add or -check")
    if add:
        return build_certificate(serial, signer, components).map(AddAction)
    if check:
        return require(serial, "Serial number").map(CheckAction)
    return Result.failure(ErrorCode.ARGUMENT_ERROR, "Specify one of -add or -check")


def perform(repository: CertificateRepository, action: Action) -> Result[str]:
    """Run the action against the repository and render the result line."""
    match action:
        case AddAction(cert):
            return repository.insert_certificate(cert).map(
                lambda stored: f"Certificate {stored.serial_number} added."
            )
        case CheckAction(serial_number):
            return repository.certificate_exists(serial_number).map(
                lambda exists: format_existence(serial_number, exists)
            )
    raise TypeError(f"unsupported action: {action!r}")  # pragma: no cover


def _fatal(error: FailureDescription) -> NoReturn:
    log.info("cli.fatal", code=error.code.value, error=error.describe())
    click.echo(f"Error: {error.describe()}", err=True)
    sys.exit(1)


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("-add", "--add", "add", is_flag=True, default=False, help="Add a certificate")
@click.option("-check", "--check", "check", is_flag=True, default=False, help="Check a serial number")
@click.option("-serial", "--serial", "serial", default=None, help="Certificate serial number")
@click.option("-signer", "--signer", "signer", default=None, help="Certificate signer")
@click.option(
    "-components",
    "--components",
    "components",
    default=None,
    help="Comma-separated list of components",
)
@click.option(
    "--db",
    "db_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Database file (default: certificates.db)",
)
@click.pass_context
def main(
    ctx: click.Context,
    add: bool,
    check: bool,
    serial: str | None,
    signer: str | None,
    components: str | None,
    db_path: Path | None,
) -> None:
    """Add a certificate or check whether a serial number is registered."""
    parsed = parse_action(add, check, serial, signer, components)
    if parsed.is_failure():
        click.echo(f"Error: {parsed.error().message}", err=True)
        click.echo(ctx.get_usage(), err=True)
        ctx.exit(1)

    settings_result = load_settings()
    if settings_result.is_failure():
        click.echo(f"FATAL: Configuration error — {settings_result.error().exception}", err=True)
        sys.exit(1)
    settings = settings_result.value()
    configure_structlog(settings.log_level)

    path = db_path or settings.database.resolve(CLI_DATABASE_FILE)
    opened = open_repository(path, track_dates=False)
    if opened.is_failure():
        _fatal(opened.error())

    with opened.value() as repository:
        outcome = perform(repository, parsed.value())
    if outcome.is_failure():
        _fatal(outcome.error())
    click.echo(outcome.value())


if __name__ == "__main__":
    main()
