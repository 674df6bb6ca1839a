"""
Domain models — the Certificate value object.

A Certificate is created once by an insert and never updated. It is a frozen
dataclass so a record read back from the store cannot be mutated by a caller.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime


def one_year_after(moment: datetime) -> datetime:
    """
    Same wall-clock time one calendar year later.

    29 February rolls forward to 1 March when the next year is not a leap year.
    """
    try:
        return moment.replace(year=moment.year + 1)
    except ValueError:
        return moment.replace(year=moment.year + 1, month=3, day=1)


@dataclass(frozen=True, slots=True)
class Certificate:
    """
    Metadata for a signed component bundle, identified by serial number.

    `issue_date` and `expiry_date` are only populated by the date-tracking
    store; the simple store leaves them as None.
    """

    serial_number: str
    signer: str
    components: tuple[str, ...] = field(default_factory=tuple)
    issue_date: datetime | None = None
    expiry_date: datetime | None = None

    def with_validity(self, issued_at: datetime) -> Certificate:
        """Return a copy issued at `issued_at` and expiring one year later."""
        return replace(self, issue_date=issued_at, expiry_date=one_year_after(issued_at))

    @property
    def has_validity(self) -> bool:
        return self.issue_date is not None and self.expiry_date is not None
