"""
Domain Resolver - concurrent domain availability lookups over RDAP and WHOIS.

This package resolves whether domain names are registered, preferring RDAP
where a registry offers it and falling back to WHOIS, with per-protocol
concurrency ceilings, retries with linear backoff, and results returned in
the caller's input order.
"""

__version__ = "0.1.0"
__author__ = "Domain Resolver Team"

from domain_resolver.exceptions import (
    DomainResolverError,
    ValidationError,
    NetworkError,
    ProtocolError,
    LegacyQueryError,
    LookupUnavailableError,
)
from domain_resolver.enums import (
    LogLevel,
    LookupSource,
    Disposition,
    DomainValidationErrorCode,
    RDAPErrorCode,
    RDAPStatus,
    WHOISErrorCode,
    WHOISStatus,
)
from domain_resolver.config import (
    IANA_BOOTSTRAP_URL,
    RetryConfig,
    ConcurrencyConfig,
    TimeoutConfig,
    DirectoryConfig,
    LegacyConfig,
    LoggingConfig,
    ResolverConfig,
)
from domain_resolver.models import (
    DomainName,
    LookupResult,
)
from domain_resolver.audit_logger import (
    AuditLogger,
    LogEntry,
)
from domain_resolver.domain_validator import (
    DomainValidator,
    DomainValidationResult,
    DomainValidationError,
)
from domain_resolver.tld_registry import (
    FALLBACK_RDAP_SERVERS,
    LEGACY_WHOIS_SERVERS,
)
from domain_resolver.server_directory import (
    ServerDirectory,
)
from domain_resolver.retry_manager import (
    RetryManager,
)
from domain_resolver.rdap_client import (
    RDAPClient,
    RDAPResponse,
    RDAPError,
)
from domain_resolver.whois_client import (
    AVAILABILITY_SIGNATURES,
    AvailabilitySignature,
    LegacyQueryRunner,
    SubprocessWhoisRunner,
    WHOISClient,
    WHOISResponse,
    WHOISError,
    signatures_from_patterns,
)
from domain_resolver.pipeline import (
    ConcurrencyLimitedPipeline,
)
from domain_resolver.reconciler import (
    MISSING_RESULT_ERROR,
    ResultReconciler,
    StageOutcome,
)
from domain_resolver.resolver import (
    DomainResolver,
    check_domains,
)

__all__ = [
    # Exceptions
    "DomainResolverError",
    "ValidationError",
    "NetworkError",
    "ProtocolError",
    "LegacyQueryError",
    "LookupUnavailableError",
    # Enums
    "LogLevel",
    "LookupSource",
    "Disposition",
    "DomainValidationErrorCode",
    "RDAPErrorCode",
    "RDAPStatus",
    "WHOISErrorCode",
    "WHOISStatus",
    # Configuration
    "IANA_BOOTSTRAP_URL",
    "RetryConfig",
    "ConcurrencyConfig",
    "TimeoutConfig",
    "DirectoryConfig",
    "LegacyConfig",
    "LoggingConfig",
    "ResolverConfig",
    # Models
    "DomainName",
    "LookupResult",
    # Audit Logger
    "AuditLogger",
    "LogEntry",
    # Domain Validator
    "DomainValidator",
    "DomainValidationResult",
    "DomainValidationError",
    # TLD Registry
    "FALLBACK_RDAP_SERVERS",
    "LEGACY_WHOIS_SERVERS",
    # Server Directory
    "ServerDirectory",
    # Retry Manager
    "RetryManager",
    # RDAP Client
    "RDAPClient",
    "RDAPResponse",
    "RDAPError",
    # WHOIS Client
    "AVAILABILITY_SIGNATURES",
    "AvailabilitySignature",
    "LegacyQueryRunner",
    "SubprocessWhoisRunner",
    "WHOISClient",
    "WHOISResponse",
    "WHOISError",
    "signatures_from_patterns",
    # Pipeline
    "ConcurrencyLimitedPipeline",
    # Reconciler
    "MISSING_RESULT_ERROR",
    "ResultReconciler",
    "StageOutcome",
    # Resolver
    "DomainResolver",
    "check_domains",
]
