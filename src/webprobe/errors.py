from __future__ import annotations

from enum import StrEnum


class ErrorCode(StrEnum):
    CONNECT_FAILED = "CONNECT_FAILED"
    TIMEOUT = "TIMEOUT"
    PROTOCOL_ERROR = "PROTOCOL_ERROR"
    TRANSPORT_FAILED = "TRANSPORT_FAILED"
    INVALID_URL = "INVALID_URL"
    ABORTED = "ABORTED"
    INVALID_INPUT = "INVALID_INPUT"


class ProbeError(Exception):
    """Raised (or carried as a value) for all expected failure conditions.

    The HTTP client adapter returns it as a value instead of raising, so that a
    transport fault never crosses out of the background task. The classifier
    raises it, and the presentation layer catches it and stores it as the
    failed last result.
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        suggestion: str = "",
        recoverable: bool = True,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.recoverable = recoverable

    def to_dict(self) -> dict:
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "suggestion": self.suggestion,
                "recoverable": self.recoverable,
            }
        }
