"""
Interactive front-end — a line-oriented read-eval loop over the repository.

    $ cert-registry-shell
    Enter command (insert, check, get, exit): insert SN001 AcmeCA bootloader,kernel
    Certificate inserted successfully.
    Enter command (insert, check, get, exit): check SN001
    Certificate with serial number SN001 exists.

Commands are recognised by prefix. Every per-command failure is printed and
the loop continues; only `exit` (or end of input) stops it. This front-end
uses the date-tracking schema.
"""

from __future__ import annotations

import sys
from collections.abc import Callable
from typing import TextIO

import click
import structlog

from cert_registry.commands import build_certificate, format_certificate, format_existence
from cert_registry.config import SHELL_DATABASE_FILE
from cert_registry.domain.ports import CertificateRepository
from cert_registry.main import configure_structlog, load_settings, open_repository

log = structlog.get_logger()

PROMPT = "Enter command (insert, check, get, exit): "
INSERT_USAGE = "Usage: insert <serialNumber> <signer> <component1,component2,...>"
CHECK_USAGE = "Usage: check <serialNumber>"
UNKNOWN_COMMAND = "Unknown command. Valid commands are: insert, check, get, exit."


def _write_prompt(text: str) -> None:
    click.echo(text, nl=False)


class CommandDispatcher:
    """
    Translate one command line into one repository call and print the outcome.

    `echo` receives every output line; `prompt` receives the prompt text,
    which is written without a trailing newline.
    """

    def __init__(
        self,
        repository: CertificateRepository,
        echo: Callable[[str], None] = click.echo,
        prompt: Callable[[str], None] = _write_prompt,
    ) -> None:
        self._repository = repository
        self._echo = echo
        self._prompt = prompt

    def dispatch(self, line: str) -> bool:
        """Handle one line. Returns False when the loop should stop."""
        command = line.strip()
        if command.startswith("insert"):
            self._insert(command.split())
        elif command.startswith("check"):
            self._check(command.split())
        elif command.startswith("get"):
            self._get()
        elif command == "exit":
            self._echo("Exiting...")
            return False
        else:
            self._echo(UNKNOWN_COMMAND)
        return True

    def run(self, stream: TextIO) -> None:
        """Prompt and dispatch until `exit` or end of input."""
        while True:
            self._prompt(PROMPT)
            line = stream.readline()
            if not line:
                self._echo("")
                self._echo("Exiting...")
                return
            log.debug("shell.command", command=line.strip())
            if not self.dispatch(line):
                return

    def _insert(self, tokens: list[str]) -> None:
        if len(tokens) != 4:
            self._echo(INSERT_USAGE)
            return
        built = build_certificate(*tokens[1:])
        if built.is_failure():
            self._echo(f"Invalid certificate: {built.error().message}")
            self._echo(INSERT_USAGE)
            return
        self._echo(
            built.flat_map(self._repository.insert_certificate).either(
                on_success=lambda _: "Certificate inserted successfully.",
                on_failure=lambda err: f"Failed to insert certificate: {err.describe()}",
            )
        )

    def _check(self, tokens: list[str]) -> None:
        if len(tokens) < 2:
            self._echo(CHECK_USAGE)
            return
        serial_number = tokens[1]
        self._echo(
            self._repository.certificate_exists(serial_number).either(
                on_success=lambda exists: format_existence(serial_number, exists),
                on_failure=lambda err: f"Error checking certificate existence: {err.describe()}",
            )
        )

    def _get(self) -> None:
        result = self._repository.get_certificates()
        if result.is_failure():
            self._echo(f"Failed to retrieve certificates: {result.error().describe()}")
            return
        certificates = result.value()
        if not certificates:
            self._echo("No certificates stored.")
        for cert in certificates:
            self._echo(format_certificate(cert))


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
def main() -> None:
    """Interactive certificate registry shell."""
    settings_result = load_settings()
    if settings_result.is_failure():
        click.echo(f"FATAL: Configuration error — {settings_result.error().exception}", err=True)
        sys.exit(1)
    settings = settings_result.value()
    configure_structlog(settings.log_level)

    path = settings.database.resolve(SHELL_DATABASE_FILE)
    if path.exists():
        click.echo("Existing database found. Resuming operations...")
    else:
        click.echo("No existing database found. Creating a new database...")

    opened = open_repository(path, track_dates=True)
    if opened.is_failure():
        error = opened.error()
        log.info("shell.fatal", code=error.code.value, error=error.describe())
        click.echo(f"Failed to initialize database: {error.describe()}", err=True)
        sys.exit(1)

    with opened.value() as repository:
        click.echo("Database setup complete. Waiting for instructions...")
        try:
            CommandDispatcher(repository).run(sys.stdin)
        except KeyboardInterrupt:
            click.echo("\nExiting...")


if __name__ == "__main__":
    main()
