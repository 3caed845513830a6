"""
Enumeration types for the domain resolver.

These enums provide type-safe constants for status codes, error codes
and pipeline dispositions.
"""

from enum import Enum


class LogLevel(Enum):
    """Logging severity levels."""

    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"


class LookupSource(Enum):
    """Protocol that produced a lookup verdict."""

    RDAP = "rdap"
    WHOIS = "whois"


class Disposition(Enum):
    """What the resolver does with a structured-stage outcome."""

    FINAL = "final"
    NEEDS_FALLBACK = "needs_fallback"


class DomainValidationErrorCode(Enum):
    """Error codes for domain validation failures."""

    EMPTY_INPUT = "empty_input"
    FORBIDDEN_CHARS = "forbidden_chars"
    TOO_LONG = "too_long"
    INVALID_LABEL = "invalid_label"
    IDNA_ERROR = "idna_error"


class RDAPErrorCode(Enum):
    """Error codes for RDAP client operations."""

    NETWORK_ERROR = "network_error"
    TLS_ERROR = "tls_error"
    TIMEOUT = "timeout"
    RATE_LIMITED = "rate_limited"
    SERVER_ERROR = "server_error"
    UNEXPECTED_STATUS = "unexpected_status"


class RDAPStatus(Enum):
    """RDAP query result status."""

    FOUND = "found"
    NOT_FOUND = "not_found"
    ERROR = "error"


class WHOISErrorCode(Enum):
    """Error codes for WHOIS client operations."""

    PROCESS_ERROR = "process_error"
    TIMEOUT = "timeout"
    NOT_INSTALLED = "not_installed"


class WHOISStatus(Enum):
    """WHOIS query result status."""

    FOUND = "found"
    NOT_FOUND = "not_found"
    AMBIGUOUS = "ambiguous"
    ERROR = "error"
