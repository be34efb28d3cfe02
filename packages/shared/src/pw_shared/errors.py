"""Error variant shared by all handlers.

A single exception type carries a ``kind`` tag, the HTTP status derived from
it and a client-facing message. Handlers match on ``error.kind`` rather than
on exception subclasses.
"""

from typing import Any, Dict

from .constants import STATUS_CODES, ErrorKind
from .responses import message_response


class ConfigurationError(RuntimeError):
    """Required configuration is missing or malformed at startup."""


class ApiError(Exception):
    """Tagged handler error: ``{kind, status_code, message}``."""

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.status_code = STATUS_CODES[kind]
        self.message = message

    def __repr__(self) -> str:
        return f"ApiError(kind={self.kind.value!r}, status_code={self.status_code}, message={self.message!r})"

    @classmethod
    def validation(cls, message: str) -> "ApiError":
        return cls(ErrorKind.VALIDATION, message)

    @classmethod
    def not_found(cls, message: str) -> "ApiError":
        return cls(ErrorKind.NOT_FOUND, message)

    @classmethod
    def data_integrity(cls, message: str) -> "ApiError":
        return cls(ErrorKind.DATA_INTEGRITY, message)

    @classmethod
    def dependency(cls, message: str) -> "ApiError":
        return cls(ErrorKind.DEPENDENCY, message)

    @classmethod
    def internal(cls, message: str) -> "ApiError":
        return cls(ErrorKind.INTERNAL, message)

    def to_response(self) -> Dict[str, Any]:
        """Render as an API Gateway proxy result."""
        return message_response(self.status_code, self.message)
