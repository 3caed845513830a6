"""
Configuration dataclasses for the domain resolver.

All settings have working defaults and are passed by constructor; nothing
is read from files or the environment.
"""

from dataclasses import dataclass, field
from typing import Optional

# IANA RDAP bootstrap registry for DNS
IANA_BOOTSTRAP_URL = "https://data.iana.org/rdap/dns.json"


@dataclass
class RetryConfig:
    """Retry behavior shared by the RDAP and WHOIS clients."""

    max_attempts: int = 3
    base_delay_seconds: float = 1.0
    max_delay_seconds: float = 60.0


@dataclass
class ConcurrencyConfig:
    """Maximum in-flight lookups per protocol pipeline."""

    structured_limit: int = 10
    legacy_limit: int = 3  # WHOIS servers ban aggressive clients


@dataclass
class TimeoutConfig:
    """Per-request timeouts in seconds."""

    directory_seconds: float = 5.0
    structured_seconds: float = 10.0
    legacy_seconds: float = 15.0


@dataclass
class DirectoryConfig:
    """
    Server directory configuration.

    fallback_servers=None selects FALLBACK_RDAP_SERVERS from tld_registry.
    """

    bootstrap_url: str = IANA_BOOTSTRAP_URL
    fallback_servers: Optional[dict[str, str]] = None


@dataclass
class LegacyConfig:
    """
    WHOIS client configuration.

    servers=None selects LEGACY_WHOIS_SERVERS from tld_registry. Extra
    patterns are case-insensitive regexes appended after the built-in
    availability signatures.
    """

    servers: Optional[dict[str, str]] = None
    executable: str = "whois"
    extra_available_patterns: list[str] = field(default_factory=list)


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "info"
    output_format: str = "text"  # 'json', 'text', 'both'


@dataclass
class ResolverConfig:
    """Main configuration combining all sub-configurations."""

    retry: RetryConfig = field(default_factory=RetryConfig)
    concurrency: ConcurrencyConfig = field(default_factory=ConcurrencyConfig)
    timeouts: TimeoutConfig = field(default_factory=TimeoutConfig)
    directory: DirectoryConfig = field(default_factory=DirectoryConfig)
    legacy: LegacyConfig = field(default_factory=LegacyConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
