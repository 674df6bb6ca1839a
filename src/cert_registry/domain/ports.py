"""
Ports — Protocol-based interfaces the front-ends depend on.

The shell loop and the one-shot CLI only know this contract; the SQLite
adapter satisfies it structurally, and tests substitute a MagicMock.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from cert_registry.domain.models import Certificate
from cert_registry.railway.result import Result


@runtime_checkable
class CertificateRepository(Protocol):
    """
    Port: store and query certificate records.

    Every call is a single atomic statement against the store. Failures are
    returned, never raised:
      - CONSTRAINT_VIOLATION when inserting a serial number that already exists
      - STORAGE_ERROR for any other engine failure
    """

    def insert_certificate(self, cert: Certificate) -> Result[Certificate]:
        """Persist a new certificate, returning it as stored."""
        ...

    def certificate_exists(self, serial_number: str) -> Result[bool]:
        """Presence flag for a serial number. Absence is Success(False)."""
        ...

    def get_certificates(self) -> Result[list[Certificate]]:
        """All stored certificates; an empty list when there are none."""
        ...

    def close(self) -> None: ...
