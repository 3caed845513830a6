"""
Exception classes for the domain resolver.

All exceptions inherit from DomainResolverError and carry a machine-readable
code, a human-readable message and optional details.
"""

from typing import Optional


class DomainResolverError(Exception):
    """Base exception for all domain resolver errors."""

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[dict] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"

    def to_dict(self) -> dict:
        """Convert exception to dictionary for serialization."""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(DomainResolverError):
    """Raised when a domain string is malformed."""

    pass


class NetworkError(DomainResolverError):
    """Raised on transport failures (timeouts, connection errors, unexpected HTTP status)."""

    pass


class ProtocolError(DomainResolverError):
    """Raised when a remote document cannot be parsed (malformed bootstrap JSON)."""

    pass


class LegacyQueryError(DomainResolverError):
    """Raised when the WHOIS process fails, times out or exits non-zero."""

    pass


class LookupUnavailableError(DomainResolverError):
    """Raised when no lookup method exists for a domain (WHOIS client not installed)."""

    pass
