"""
Data models for the domain resolver.

This module defines the validated domain name and the per-domain lookup
result returned to callers.
"""

from dataclasses import dataclass
from typing import Optional

from .enums import LookupSource


@dataclass(frozen=True)
class DomainName:
    """A validated, lowercase, dot-separated ASCII domain name."""

    name: str

    @property
    def labels(self) -> tuple[str, ...]:
        return tuple(self.name.split("."))

    @property
    def tld(self) -> str:
        """Final label, used as the lookup key into the server directory."""
        return self.labels[-1]

    def __str__(self) -> str:
        return self.name


@dataclass
class LookupResult:
    """Availability outcome for a single requested domain."""

    domain: str
    available: bool
    is_premium: bool = False  # Premium detection belongs to pricing lookups
    error: Optional[str] = None
    source: Optional[LookupSource] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict:
        """Convert result to a JSON-serializable dictionary."""
        return {
            "domain": self.domain,
            "available": self.available,
            "is_premium": self.is_premium,
            "error": self.error,
            "source": self.source.value if self.source else None,
        }

    @classmethod
    def failure(
        cls,
        domain: str,
        error: str,
        source: Optional[LookupSource] = None,
    ) -> "LookupResult":
        """Build a result for a domain whose availability could not be determined."""
        return cls(domain=domain, available=False, error=error, source=source)
