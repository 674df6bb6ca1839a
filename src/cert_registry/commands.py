"""
Input parsing and output rendering shared by both front-ends.

Turns raw user text (interactive tokens or CLI flag values) into validated
values on the railway. Bad input becomes an ARGUMENT_ERROR failure so the
caller can print usage without ever touching the repository.
"""

from __future__ import annotations

from cert_registry.domain.models import Certificate
from cert_registry.railway import ErrorCode
from cert_registry.railway.result import Result


def require(value: str | None, name: str) -> Result[str]:
    """Non-blank value, stripped of surrounding whitespace."""
    return (
        Result.success(value or "")
        .map(str.strip)
        .ensure(bool, ErrorCode.ARGUMENT_ERROR, f"{name} is required")
    )


def parse_components(text: str | None) -> Result[tuple[str, ...]]:
    """
    Split a comma-separated component list.

    Surrounding whitespace is stripped from each name; an empty name
    (e.g. "a,,b" or a trailing comma) is rejected.
    """
    return (
        require(text, "Components")
        .map(lambda t: tuple(part.strip() for part in t.split(",")))
        .ensure(
            all,
            ErrorCode.ARGUMENT_ERROR,
            "Component names must not be empty",
        )
    )


def build_certificate(
    serial_number: str | None,
    signer: str | None,
    components: str | None,
) -> Result[Certificate]:
    """Validate the three user-supplied fields and build a Certificate."""
    return require(serial_number, "Serial number").flat_map(
        lambda serial: require(signer, "Signer").flat_map(
            lambda sig: parse_components(components).map(
                lambda comps: Certificate(serial_number=serial, signer=sig, components=comps)
            )
        )
    )


def format_certificate(cert: Certificate) -> str:
    line = (
        f"Certificate: Serial={cert.serial_number}, Signer={cert.signer}, "
        f"Components=[{', '.join(cert.components)}]"
    )
    if cert.issue_date is not None and cert.expiry_date is not None:
        line += f", Issued={cert.issue_date.isoformat()}, Expires={cert.expiry_date.isoformat()}"
    return line


def format_existence(serial_number: str, exists: bool) -> str:
    verb = "exists" if exists else "does not exist"
    return f"Certificate with serial number {serial_number} {verb}."
