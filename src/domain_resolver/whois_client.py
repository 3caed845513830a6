"""
WHOIS Client module for domain availability checking.

Runs the system whois client as a subprocess and classifies its free-text
output against an ordered table of availability signatures. The first
matching signature decides; a response that matches nothing is treated as
registered, so silence about availability is never reported as available.
"""

import asyncio
import re
from dataclasses import dataclass
from typing import Optional, Protocol, Sequence, runtime_checkable

from .audit_logger import AuditLogger
from .enums import LogLevel, LookupSource, WHOISErrorCode, WHOISStatus
from .exceptions import DomainResolverError, LegacyQueryError, LookupUnavailableError
from .models import DomainName, LookupResult
from .retry_manager import RetryManager
from .tld_registry import LEGACY_WHOIS_SERVERS


@dataclass(frozen=True)
class AvailabilitySignature:
    """A response pattern and the verdict it implies."""

    name: str
    pattern: re.Pattern
    verdict: WHOISStatus = WHOISStatus.NOT_FOUND

    def matches(self, text: str) -> bool:
        return self.pattern.search(text) is not None


def _signature(name: str, regex: str, flags: int = 0) -> AvailabilitySignature:
    return AvailabilitySignature(name, re.compile(regex, re.IGNORECASE | flags))


# Ordered; first match wins
AVAILABILITY_SIGNATURES: tuple[AvailabilitySignature, ...] = (
    # Common "not found" replies, anchored at line start
    _signature("no_match", r"^no match", re.MULTILINE),
    _signature("not_found", r"^not found", re.MULTILINE),
    _signature("no_data_found", r"^no data found", re.MULTILINE),
    _signature("no_entries_found", r"^no entries found", re.MULTILINE),
    _signature("nothing_found", r"^nothing found", re.MULTILINE),
    _signature("domain_not_found", r"domain not found"),
    _signature("no_match_for", r"no match for"),
    _signature("not_registered", r"not registered"),
    _signature("no_such_domain", r"no such domain"),
    _signature("object_not_found", r"object not found"),
    _signature("no_result", r"query didn't return any result"),
    # Status fields
    _signature("status_available", r"status:\s*available"),
    _signature("status_free", r"status:\s*free"),
    _signature("status_no_object", r"domain status:\s*no object found"),
    # Registry-specific phrasings
    _signature("object_does_not_exist", r"the queried object does not exist"),
    _signature("no_information", r"no information available"),
    _signature("not_known", r"domain you requested is not known"),
    _signature("domain_is_available", r"this domain is available"),
    _signature("available_for_registration", r"is available for registration"),
)

_WHOIS_CODES = {code.value for code in WHOISErrorCode}


def signatures_from_patterns(patterns: Sequence[str]) -> tuple[AvailabilitySignature, ...]:
    """Build availability signatures from case-insensitive regex strings."""
    return tuple(_signature(f"custom_{i}", regex) for i, regex in enumerate(patterns))


@dataclass
class WHOISError:
    """Error information from a WHOIS query."""

    code: WHOISErrorCode
    message: str


@dataclass
class WHOISResponse:
    """Response from a WHOIS query after retries."""

    status: WHOISStatus
    server: Optional[str]
    raw_response: Optional[str]
    matched_signature: Optional[str]
    error: Optional[WHOISError]
    attempts: int = 1


@runtime_checkable
class LegacyQueryRunner(Protocol):
    """Executes one WHOIS query and returns the raw response text."""

    async def __call__(self, server: Optional[str], domain: str, timeout: float) -> str:
        ...


class SubprocessWhoisRunner:
    """
    Runs the whois executable with a discrete argument vector.

    The domain and server are passed as separate argv entries and never
    through a shell.
    """

    def __init__(self, executable: str = "whois") -> None:
        self._executable = executable

    def build_args(self, server: Optional[str], domain: str) -> list[str]:
        if server:
            return [self._executable, "-h", server, domain]
        return [self._executable, domain]

    async def __call__(self, server: Optional[str], domain: str, timeout: float) -> str:
        """
        Raises:
            LookupUnavailableError: If the executable is not installed
            LegacyQueryError: On timeout or non-zero exit status
        """
        args = self.build_args(server, domain)

        try:
            process = await asyncio.create_subprocess_exec(
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError:
            raise LookupUnavailableError(
                code=WHOISErrorCode.NOT_INSTALLED.value,
                message=f"{self._executable} executable not found",
                details={"executable": self._executable},
            )

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            raise LegacyQueryError(
                code=WHOISErrorCode.TIMEOUT.value,
                message=f"WHOIS query timed out after {timeout}s",
                details={"server": server, "domain": domain},
            )

        if process.returncode != 0:
            detail = stderr.decode("utf-8", errors="replace").strip()
            raise LegacyQueryError(
                code=WHOISErrorCode.PROCESS_ERROR.value,
                message=f"whois exited with status {process.returncode}"
                + (f": {detail[:200]}" if detail else ""),
                details={"server": server, "domain": domain, "returncode": process.returncode},
            )

        return stdout.decode("utf-8", errors="replace")


class WHOISClient:
    """
    WHOIS client with table-driven response classification.

    Queries the TLD-specific server when one is known, otherwise leaves
    server selection to the whois executable.
    """

    def __init__(
        self,
        timeout: float = 15.0,
        runner: Optional[LegacyQueryRunner] = None,
        retry_manager: Optional[RetryManager] = None,
        servers: Optional[dict[str, str]] = None,
        extra_signatures: Sequence[AvailabilitySignature] = (),
        logger: Optional[AuditLogger] = None,
    ) -> None:
        """
        Initialize the WHOIS client.

        Args:
            timeout: Per-query timeout in seconds
            runner: Query capability (defaults to SubprocessWhoisRunner)
            retry_manager: Retry policy (defaults to 3 attempts, linear backoff)
            servers: TLD -> WHOIS server table (defaults to LEGACY_WHOIS_SERVERS)
            extra_signatures: Signatures checked after the built-in table
            logger: Optional audit logger
        """
        self._timeout = timeout
        self._runner = runner or SubprocessWhoisRunner()
        self._retry_manager = retry_manager or RetryManager()
        if servers is None:
            servers = LEGACY_WHOIS_SERVERS
        self._servers = {k.lower(): v for k, v in servers.items()}
        self._signatures = AVAILABILITY_SIGNATURES + tuple(extra_signatures)
        self._logger = logger

    @property
    def signatures(self) -> tuple[AvailabilitySignature, ...]:
        return self._signatures

    def get_server_for_tld(self, tld: str) -> Optional[str]:
        """Get the TLD-specific WHOIS server, or None for default routing."""
        return self._servers.get(tld.lower())

    def classify(self, raw_response: str) -> WHOISResponse:
        """
        Classify raw WHOIS text against the signature table.

        Empty output is AMBIGUOUS and a non-empty response without any
        matching signature is FOUND; both are reported as not available.
        """
        if not raw_response or not raw_response.strip():
            return WHOISResponse(
                status=WHOISStatus.AMBIGUOUS,
                server=None,
                raw_response=raw_response,
                matched_signature=None,
                error=None,
            )

        for signature in self._signatures:
            if signature.matches(raw_response):
                return WHOISResponse(
                    status=signature.verdict,
                    server=None,
                    raw_response=raw_response,
                    matched_signature=signature.name,
                    error=None,
                )

        return WHOISResponse(
            status=WHOISStatus.FOUND,
            server=None,
            raw_response=raw_response,
            matched_signature=None,
            error=None,
        )

    async def query(self, domain: DomainName) -> WHOISResponse:
        """
        Query WHOIS for a domain with retries.

        Every failure is returned as an ERROR response, never raised.

        "No lookup method for .<tld>" is reserved for a missing whois
        executable. A TLD without a known WHOIS server is still queried
        through the executable's default routing, so lacking a server
        entry alone never produces this message.

        Args:
            domain: Validated domain name

        Returns:
            WHOISResponse; status ERROR when the query could not be completed
        """
        server = self.get_server_for_tld(domain.tld)
        attempts = 0

        async def attempt() -> str:
            nonlocal attempts
            attempts += 1
            return await self._runner(server, str(domain), self._timeout)

        try:
            raw_response = await self._retry_manager.execute_with_retry(
                attempt,
                is_retryable=lambda e: not isinstance(e, LookupUnavailableError),
            )
        except LookupUnavailableError as e:
            self._log_failure(domain, server, e, attempts)
            return self._error_response(
                server,
                WHOISErrorCode.NOT_INSTALLED,
                f"No lookup method for .{domain.tld}",
                attempts,
            )
        except DomainResolverError as e:
            self._log_failure(domain, server, e, attempts)
            code = WHOISErrorCode(e.code) if e.code in _WHOIS_CODES else WHOISErrorCode.PROCESS_ERROR
            return self._error_response(server, code, e.message, attempts)
        except Exception as e:
            # Any runner failure is contained to this domain
            self._log_failure(domain, server, e, attempts)
            return self._error_response(
                server,
                WHOISErrorCode.PROCESS_ERROR,
                str(e) or "WHOIS lookup failed",
                attempts,
            )

        response = self.classify(raw_response)
        response.server = server
        response.attempts = attempts

        if self._logger:
            self._logger.log(
                LogLevel.DEBUG,
                "WHOISClient",
                f"WHOIS {response.status.value} for {domain}",
                {
                    "server": server or "default",
                    "signature": response.matched_signature,
                    "attempts": attempts,
                },
            )

        return response

    async def check(self, domain: DomainName) -> LookupResult:
        """Determine availability of one domain via WHOIS."""
        response = await self.query(domain)
        return self.to_lookup_result(domain, response)

    @staticmethod
    def to_lookup_result(domain: DomainName, response: WHOISResponse) -> LookupResult:
        if response.status == WHOISStatus.ERROR:
            message = response.error.message if response.error else "WHOIS lookup failed"
            return LookupResult.failure(str(domain), message, source=LookupSource.WHOIS)

        return LookupResult(
            domain=str(domain),
            available=response.status == WHOISStatus.NOT_FOUND,
            source=LookupSource.WHOIS,
        )

    @staticmethod
    def _error_response(
        server: Optional[str],
        code: WHOISErrorCode,
        message: str,
        attempts: int,
    ) -> WHOISResponse:
        return WHOISResponse(
            status=WHOISStatus.ERROR,
            server=server,
            raw_response=None,
            matched_signature=None,
            error=WHOISError(code=code, message=message),
            attempts=attempts,
        )

    def _log_failure(
        self,
        domain: DomainName,
        server: Optional[str],
        error: Exception,
        attempts: int,
    ) -> None:
        if self._logger:
            self._logger.log_error(
                "WHOISClient",
                f"WHOIS lookup failed for {domain}",
                error=error,
                additional_data={"server": server or "default", "attempts": attempts},
            )

