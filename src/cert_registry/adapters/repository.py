"""
SQLite repository adapter — certificate persistence in a single local file.

Adapter layer: implements the CertificateRepository port with the standard
library sqlite3 driver and raw parameterized SQL against one table:

  certificates (serial_number PK, signer, components [, issue_date, expiry_date])

Two schema flavours share one implementation:
  - simple:        serial_number, signer, components
  - date-tracking: the above plus issue_date / expiry_date (ISO-8601 text),
                   stamped at insert time with a one-year validity

Components are stored as a JSON array so values containing commas survive
the round trip. Rows written as plain comma-joined text are still readable.

Every public method returns a Result; sqlite3 exceptions never escape:
  sqlite3.IntegrityError → CONSTRAINT_VIOLATION
  any other failure      → STORAGE_ERROR
"""

from __future__ import annotations

import json
import sqlite3
from collections.abc import Callable, Sequence
from datetime import UTC, datetime
from os import PathLike
from types import TracebackType

import structlog

from cert_registry.domain.models import Certificate
from cert_registry.railway import ErrorCode
from cert_registry.railway.result import Result

log = structlog.get_logger()

Clock = Callable[[], datetime]

_SIMPLE_COLUMNS = ("serial_number", "signer", "components")
_DATED_COLUMNS = (*_SIMPLE_COLUMNS, "issue_date", "expiry_date")

_CREATE_SIMPLE = """
CREATE TABLE IF NOT EXISTS certificates (
    serial_number TEXT PRIMARY KEY,
    signer        TEXT NOT NULL,
    components    TEXT NOT NULL
)
"""

_CREATE_DATED = """
CREATE TABLE IF NOT EXISTS certificates (
    serial_number TEXT PRIMARY KEY,
    signer        TEXT NOT NULL,
    components    TEXT NOT NULL,
    issue_date    TEXT NOT NULL,
    expiry_date   TEXT NOT NULL
)
"""

_COUNT_BY_SERIAL = "SELECT count(*) FROM certificates WHERE serial_number = ?"


class SchemaMismatchError(Exception):
    """The existing certificates table does not have the expected columns."""


def encode_components(components: Sequence[str]) -> str:
    """Flatten a component sequence into its persisted text form (a JSON array)."""
    return json.dumps(list(components))


def decode_components(text: str) -> tuple[str, ...]:
    """
    Rebuild the component sequence from its persisted text form.

    Text that is not a JSON array of strings is treated as legacy
    comma-joined data and split on ",".
    """
    if text.startswith("["):
        try:
            decoded = json.loads(text)
        except json.JSONDecodeError:
            decoded = None
        if isinstance(decoded, list) and all(isinstance(c, str) for c in decoded):
            return tuple(decoded)
    return tuple(text.split(","))


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _create_schema(conn: sqlite3.Connection, track_dates: bool) -> None:
    """Create the certificates table if missing and verify its columns."""
    with conn:
        conn.execute(_CREATE_DATED if track_dates else _CREATE_SIMPLE)
    present = {row[1] for row in conn.execute("PRAGMA table_info(certificates)")}
    expected = _DATED_COLUMNS if track_dates else _SIMPLE_COLUMNS
    missing = [column for column in expected if column not in present]
    if missing:
        raise SchemaMismatchError(
            f"certificates table is missing columns: {', '.join(missing)}"
        )


def _connect(path: str | PathLike[str], track_dates: bool) -> sqlite3.Connection:
    """Open the database file and make sure the schema is in place."""
    conn = sqlite3.connect(path)
    try:
        _create_schema(conn, track_dates)
    except Exception:
        conn.close()
        raise
    return conn


class SqliteCertificateRepository:
    """
    Persist certificate metadata to a SQLite file.

    Implements the CertificateRepository port. Holds one connection for its
    whole lifetime; use it as a context manager (or call close()) to release
    the handle.
    """

    def __init__(
        self,
        conn: sqlite3.Connection,
        track_dates: bool = False,
        clock: Clock = _utcnow,
    ) -> None:
        self._conn = conn
        self._track_dates = track_dates
        self._clock = clock
        self._columns = _DATED_COLUMNS if track_dates else _SIMPLE_COLUMNS

    @classmethod
    def open(
        cls,
        path: str | PathLike[str],
        track_dates: bool = False,
        clock: Clock = _utcnow,
    ) -> Result[SqliteCertificateRepository]:
        """
        Open (creating if needed) the database at `path` and ensure the schema.

        Idempotent: an existing table with the right columns is left untouched.
        Returns STORAGE_ERROR when the file cannot be opened, the statement is
        rejected, or the existing table has a different shape.
        """
        return (
            Result.from_computation(
                lambda: _connect(path, track_dates),
                ErrorCode.STORAGE_ERROR,
                f"Failed to initialize database at {path}",
            )
            .map(lambda conn: cls(conn, track_dates=track_dates, clock=clock))
            .peek(lambda _: log.info("repository.opened", path=str(path), track_dates=track_dates))
        )

    @property
    def track_dates(self) -> bool:
        return self._track_dates

    def insert_certificate(self, cert: Certificate) -> Result[Certificate]:
        """
        Insert one certificate in a single atomic statement.

        When tracking dates, a certificate without validity dates is stamped
        with the current time and a one-year expiry before it is written.
        """
        if self._track_dates and not cert.has_validity:
            cert = cert.with_validity(self._clock())

        placeholders = ", ".join("?" for _ in self._columns)
        statement = (
            f"INSERT INTO certificates ({', '.join(self._columns)}) "  # noqa: S608
            f"VALUES ({placeholders})"
        )
        try:
            with self._conn:
                self._conn.execute(statement, self._to_row(cert))
        except sqlite3.IntegrityError as e:
            log.info("repository.insert_rejected", serial_number=cert.serial_number, error=str(e))
            if "UNIQUE" in str(e):
                message = f"Certificate with serial number {cert.serial_number} already exists"
            else:
                message = f"Certificate {cert.serial_number} violates a table constraint"
            return Result.failure(ErrorCode.CONSTRAINT_VIOLATION, message, e)
        except sqlite3.Error as e:
            log.info("repository.insert_failed", serial_number=cert.serial_number, error=str(e))
            return Result.failure(ErrorCode.STORAGE_ERROR, "Failed to insert certificate", e)

        log.info("repository.inserted", serial_number=cert.serial_number, components=len(cert.components))
        return Result.success(cert)

    def certificate_exists(self, serial_number: str) -> Result[bool]:
        """Count rows with this primary key; not found is Success(False)."""
        return Result.from_computation(
            lambda: self._count(serial_number) > 0,
            ErrorCode.STORAGE_ERROR,
            "Failed to check certificate existence",
        )

    def get_certificates(self) -> Result[list[Certificate]]:
        """Every stored certificate in insertion (rowid) order."""
        return Result.from_computation(
            self._fetch_all,
            ErrorCode.STORAGE_ERROR,
            "Failed to retrieve certificates",
        )

    def close(self) -> None:
        self._conn.close()
        log.debug("repository.closed")

    def __enter__(self) -> SqliteCertificateRepository:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def _count(self, serial_number: str) -> int:
        row = self._conn.execute(_COUNT_BY_SERIAL, (serial_number,)).fetchone()
        return row[0] if row else 0

    def _fetch_all(self) -> list[Certificate]:
        query = f"SELECT {', '.join(self._columns)} FROM certificates ORDER BY rowid"  # noqa: S608
        return [self._from_row(row) for row in self._conn.execute(query)]

    def _to_row(self, cert: Certificate) -> tuple[str, ...]:
        row = (cert.serial_number, cert.signer, encode_components(cert.components))
        if not self._track_dates:
            return row
        assert cert.issue_date is not None and cert.expiry_date is not None
        return (*row, cert.issue_date.isoformat(), cert.expiry_date.isoformat())

    def _from_row(self, row: tuple[str, ...]) -> Certificate:
        serial_number, signer, components = row[:3]
        if not self._track_dates:
            return Certificate(serial_number, signer, decode_components(components))
        return Certificate(
            serial_number,
            signer,
            decode_components(components),
            issue_date=datetime.fromisoformat(row[3]),
            expiry_date=datetime.fromisoformat(row[4]),
        )
