"""
Domain validation and normalization module.

Every domain string passes through here before any value derived from it
is interpolated into a URL path or handed to the WHOIS process.
"""

import re
from dataclasses import dataclass
from typing import Optional

import idna

from domain_resolver.enums import DomainValidationErrorCode
from domain_resolver.exceptions import ValidationError
from domain_resolver.models import DomainName


MAX_DOMAIN_LENGTH = 253
MAX_LABEL_LENGTH = 63

# Control characters, whitespace and shell/URL metacharacters
FORBIDDEN_CHARS_PATTERN = re.compile(
    r'[\x00-\x1f\x7f'
    r'\s'
    r'!@#$%^&*()+=\[\]{}|\\:;"\'<>,?/`~]'
)

# 1-63 alphanumerics with interior hyphens only
LABEL_PATTERN = re.compile(r"^[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?$")


@dataclass
class DomainValidationError:
    """Structured error information for domain validation failures."""

    code: DomainValidationErrorCode
    message: str
    details: dict


@dataclass
class DomainValidationResult:
    """Result of domain validation operation."""

    valid: bool
    domain: Optional[DomainName]
    error: Optional[DomainValidationError]


class DomainValidator:
    """
    Validates and normalizes domain names.

    Accepts one or more dot-separated labels, each 1-63 characters of
    [A-Za-z0-9] with optional interior hyphens, at most 253 characters
    overall. Output is lowercase. Internationalized names are accepted only
    when allow_idn is set, in which case they are converted to punycode
    before the ASCII rules are applied.
    """

    def __init__(self, allow_idn: bool = False) -> None:
        self._allow_idn = allow_idn

    def validate(self, raw_domain: str) -> DomainValidationResult:
        """
        Validate and normalize a domain string.

        Args:
            raw_domain: The raw domain string to validate

        Returns:
            DomainValidationResult with the DomainName or a structured error
        """
        if not isinstance(raw_domain, str) or not raw_domain.strip():
            return self._invalid(
                DomainValidationErrorCode.EMPTY_INPUT,
                "Domain input is empty",
                {"raw_input": raw_domain},
            )

        # Checked before normalization so IDNA mapping cannot hide metacharacters
        forbidden_found = FORBIDDEN_CHARS_PATTERN.findall(raw_domain)
        if forbidden_found:
            return self._invalid(
                DomainValidationErrorCode.FORBIDDEN_CHARS,
                "Domain contains forbidden characters",
                {"raw_input": raw_domain, "forbidden_chars": forbidden_found},
            )

        try:
            canonical = self.normalize_to_canonical(raw_domain)
        except ValidationError as e:
            return self._invalid(
                DomainValidationErrorCode(e.code),
                e.message,
                e.details,
            )

        if len(canonical) > MAX_DOMAIN_LENGTH:
            return self._invalid(
                DomainValidationErrorCode.TOO_LONG,
                f"Domain exceeds {MAX_DOMAIN_LENGTH} characters",
                {"raw_input": raw_domain, "length": len(canonical)},
            )

        for label in canonical.split("."):
            if len(label) > MAX_LABEL_LENGTH:
                return self._invalid(
                    DomainValidationErrorCode.TOO_LONG,
                    f"Label exceeds {MAX_LABEL_LENGTH} characters",
                    {"raw_input": raw_domain, "label": label},
                )
            if not LABEL_PATTERN.match(label):
                return self._invalid(
                    DomainValidationErrorCode.INVALID_LABEL,
                    f"Invalid label: {label!r}",
                    {"raw_input": raw_domain, "label": label},
                )

        return DomainValidationResult(
            valid=True,
            domain=DomainName(canonical),
            error=None,
        )

    def normalize_to_canonical(self, domain: str) -> str:
        """
        Convert domain to canonical form (lowercase, punycode if allowed).

        Raises:
            ValidationError: If the domain is non-ASCII and IDN is disabled,
                or IDNA encoding fails
        """
        domain_lower = domain.lower()

        if domain_lower.isascii():
            return domain_lower

        if not self._allow_idn:
            raise ValidationError(
                code=DomainValidationErrorCode.INVALID_LABEL.value,
                message="Domain contains non-ASCII characters",
                details={"domain": domain},
            )

        try:
            return idna.encode(domain_lower, uts46=True).decode("ascii")
        except idna.IDNAError as e:
            raise ValidationError(
                code=DomainValidationErrorCode.IDNA_ERROR.value,
                message=f"IDNA encoding failed: {e}",
                details={"domain": domain, "idna_error": str(e)},
            )

    def is_valid(self, raw_domain: str) -> bool:
        return self.validate(raw_domain).valid

    @staticmethod
    def _invalid(
        code: DomainValidationErrorCode,
        message: str,
        details: dict,
    ) -> DomainValidationResult:
        return DomainValidationResult(
            valid=False,
            domain=None,
            error=DomainValidationError(code=code, message=message, details=details),
        )
