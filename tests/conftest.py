"""
Shared test fixtures for the cert-registry test suite.

Every test runs in its own temporary working directory with no
CERT_REGISTRY_* variables set, so default database files never land in the
source tree and the developer's environment cannot leak into settings.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from datetime import UTC, datetime
from pathlib import Path

import pytest
import structlog

from cert_registry.adapters.repository import SqliteCertificateRepository
from cert_registry.railway import ResultAssertions

FIXED_NOW = datetime(2025, 1, 1, 12, 0, 0, tzinfo=UTC)


@pytest.fixture(autouse=True)
def _isolated_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Run in tmp_path, strip CERT_REGISTRY_* vars, reset structlog afterwards."""
    for name in list(os.environ):
        if name.startswith("CERT_REGISTRY_"):
            monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
    yield
    structlog.reset_defaults()


@pytest.fixture()
def fixed_now() -> datetime:
    """The instant the dated_repo clock is frozen at."""
    return FIXED_NOW


@pytest.fixture()
def db_path(tmp_path: Path) -> Path:
    """Path of a not-yet-created database file."""
    return tmp_path / "certificates.db"


@pytest.fixture()
def repo(db_path: Path) -> Iterator[SqliteCertificateRepository]:
    """Simple-schema repository over a fresh database file."""
    with ResultAssertions.assert_success(SqliteCertificateRepository.open(db_path)) as repository:
        yield repository


@pytest.fixture()
def dated_repo(tmp_path: Path) -> Iterator[SqliteCertificateRepository]:
    """Date-tracking repository whose clock always returns FIXED_NOW."""
    opened = SqliteCertificateRepository.open(
        tmp_path / "platform_certificates.db",
        track_dates=True,
        clock=lambda: FIXED_NOW,
    )
    with ResultAssertions.assert_success(opened) as repository:
        yield repository
