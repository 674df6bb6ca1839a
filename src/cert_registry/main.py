"""
Composition root — logging setup, settings loading and repository wiring.

Both front-ends (the interactive shell and the one-shot CLI) start here:
  1. Load and validate configuration from environment
  2. Configure structlog
  3. Open the SQLite repository with the front-end's schema flavour

This is the ONLY place where the concrete repository class is instantiated.
The front-ends work against the CertificateRepository port.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import structlog
from pydantic import ValidationError

from cert_registry.adapters.repository import SqliteCertificateRepository
from cert_registry.config import AppSettings
from cert_registry.railway import ErrorCode
from cert_registry.railway.result import Result


def _stderr_logger(*_args: object) -> structlog.PrintLogger:
    return structlog.PrintLogger(file=sys.stderr)


def configure_structlog(log_level: str = "INFO") -> None:
    """
    Configure structlog for human-readable console logging.

    Log lines go to whatever sys.stderr is at the time of the call, so
    command output on stdout stays clean.
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level.upper(), logging.INFO)
        ),
        context_class=dict,
        logger_factory=_stderr_logger,
        cache_logger_on_first_use=False,
    )


def load_settings() -> Result[AppSettings]:
    """Load settings, turning validation errors into CONFIGURATION_ERROR."""
    try:
        return Result.success(AppSettings())
    except ValidationError as e:
        return Result.failure(ErrorCode.CONFIGURATION_ERROR, "Configuration error", e)


def open_repository(path: Path, track_dates: bool) -> Result[SqliteCertificateRepository]:
    """Open the certificate store used by a front-end."""
    return SqliteCertificateRepository.open(path, track_dates=track_dates)
