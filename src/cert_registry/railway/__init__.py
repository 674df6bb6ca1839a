"""
Railway-oriented error handling for cert_registry.

    from cert_registry.railway import Result, ErrorCode

    def require_serial(serial: str) -> Result[str]:
        if not serial.strip():
            return Result.failure(ErrorCode.ARGUMENT_ERROR, "Serial number is required")
        return Result.success(serial)
"""

from cert_registry.railway.assertions import ResultAssertions
from cert_registry.railway.failure import ErrorCode, FailureDescription
from cert_registry.railway.result import Failure, Result, Success

__all__ = [
    "Result",
    "Success",
    "Failure",
    "ErrorCode",
    "FailureDescription",
    "ResultAssertions",
]
