"""
RDAP Client for domain availability checking.

Queries a registry's RDAP endpoint for one domain. The HTTP status is the
whole answer: 404 means the registry has no record (available), 200 means a
record exists (registered). Anything else is a transport error that the
retry manager retries and the resolver eventually hands to WHOIS.
"""

import time
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlparse

import httpx

from .audit_logger import AuditLogger
from .enums import LogLevel, LookupSource, RDAPErrorCode, RDAPStatus
from .exceptions import NetworkError
from .models import DomainName, LookupResult
from .retry_manager import RetryManager

RDAP_ACCEPT = "application/rdap+json, application/json"


@dataclass
class RDAPError:
    """Error information from an RDAP query."""

    code: RDAPErrorCode
    message: str
    http_status_code: Optional[int] = None


@dataclass
class RDAPResponse:
    """Complete RDAP query response after retries."""

    status: RDAPStatus
    http_status_code: int
    error: Optional[RDAPError]
    attempts: int = 1
    response_time_ms: float = 0.0


class RDAPClient:
    """
    Async RDAP client with TLS enforcement.

    One client is shared by all concurrent structured lookups; it owns a
    single httpx.AsyncClient that is created lazily and closed by close()
    or the async context manager.
    """

    def __init__(
        self,
        timeout: float = 10.0,
        retry_manager: Optional[RetryManager] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        logger: Optional[AuditLogger] = None,
    ) -> None:
        """
        Initialize the RDAP client.

        Args:
            timeout: Per-request timeout in seconds
            retry_manager: Retry policy (defaults to 3 attempts, linear backoff)
            transport: Optional httpx transport (used by tests)
            logger: Optional audit logger
        """
        self._timeout = timeout
        self._retry_manager = retry_manager or RetryManager()
        self._transport = transport
        self._logger = logger
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "RDAPClient":
        self._ensure_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                verify=True,
                timeout=httpx.Timeout(self._timeout),
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    @staticmethod
    def build_url(endpoint: str, domain: DomainName) -> str:
        return f"{endpoint.rstrip('/')}/domain/{domain}"

    def _validate_endpoint_url(self, endpoint: str) -> None:
        """
        Validate that the endpoint uses HTTPS.

        Raises:
            NetworkError: If the endpoint does not use HTTPS
        """
        parsed = urlparse(endpoint)
        if parsed.scheme.lower() != "https":
            raise NetworkError(
                code=RDAPErrorCode.TLS_ERROR.value,
                message=f"RDAP endpoint must use HTTPS: {endpoint}",
                details={"endpoint": endpoint, "scheme": parsed.scheme},
            )

    async def _request_once(self, url: str) -> RDAPResponse:
        """
        Issue one RDAP request and interpret its status.

        Raises:
            NetworkError: On timeout, connection failure or any status
                other than 200/404
        """
        client = self._ensure_client()

        try:
            response = await client.get(url, headers={"Accept": RDAP_ACCEPT})
        except httpx.TimeoutException:
            raise NetworkError(
                code=RDAPErrorCode.TIMEOUT.value,
                message=f"RDAP request timed out after {self._timeout}s",
                details={"url": url},
            )
        except httpx.HTTPError as e:
            raise NetworkError(
                code=RDAPErrorCode.NETWORK_ERROR.value,
                message=f"Connection error: {e}",
                details={"url": url},
            )

        if response.status_code == 404:
            return RDAPResponse(status=RDAPStatus.NOT_FOUND, http_status_code=404, error=None)

        if response.status_code == 200:
            return RDAPResponse(status=RDAPStatus.FOUND, http_status_code=200, error=None)

        if response.status_code == 429:
            code = RDAPErrorCode.RATE_LIMITED
        elif response.status_code >= 500:
            code = RDAPErrorCode.SERVER_ERROR
        else:
            code = RDAPErrorCode.UNEXPECTED_STATUS

        raise NetworkError(
            code=code.value,
            message=f"RDAP returned {response.status_code}",
            details={"url": url, "status_code": response.status_code},
        )

    async def query(self, domain: DomainName, endpoint: str) -> RDAPResponse:
        """
        Query RDAP for a domain with retries.

        Args:
            domain: Validated domain name
            endpoint: RDAP base URL for the domain's TLD

        Returns:
            RDAPResponse with FOUND, NOT_FOUND, or ERROR after retries
        """
        start_time = time.perf_counter()

        try:
            self._validate_endpoint_url(endpoint)
        except NetworkError as e:
            return RDAPResponse(
                status=RDAPStatus.ERROR,
                http_status_code=0,
                error=RDAPError(code=RDAPErrorCode.TLS_ERROR, message=e.message),
                attempts=0,
                response_time_ms=self._elapsed_ms(start_time),
            )

        url = self.build_url(endpoint, domain)
        attempts = 0

        async def attempt() -> RDAPResponse:
            nonlocal attempts
            attempts += 1
            return await self._request_once(url)

        try:
            response = await self._retry_manager.execute_with_retry(attempt)
        except NetworkError as e:
            status_code = e.details.get("status_code", 0)
            if self._logger:
                self._logger.log_error(
                    "RDAPClient",
                    f"RDAP lookup failed for {domain}",
                    error=e,
                    request_url=url,
                    response_status_code=status_code or None,
                    additional_data={"attempts": attempts},
                )
            return RDAPResponse(
                status=RDAPStatus.ERROR,
                http_status_code=status_code,
                error=RDAPError(
                    code=RDAPErrorCode(e.code),
                    message=e.message,
                    http_status_code=status_code or None,
                ),
                attempts=attempts,
                response_time_ms=self._elapsed_ms(start_time),
            )
        except Exception as e:
            # Any other transport failure is contained to this domain
            if self._logger:
                self._logger.log_error(
                    "RDAPClient",
                    f"RDAP lookup failed for {domain}",
                    error=e,
                    request_url=url,
                    additional_data={"attempts": attempts},
                )
            return RDAPResponse(
                status=RDAPStatus.ERROR,
                http_status_code=0,
                error=RDAPError(
                    code=RDAPErrorCode.NETWORK_ERROR,
                    message=str(e) or "RDAP lookup failed",
                ),
                attempts=attempts,
                response_time_ms=self._elapsed_ms(start_time),
            )

        response.attempts = attempts
        response.response_time_ms = self._elapsed_ms(start_time)

        if self._logger:
            self._logger.log(
                LogLevel.DEBUG,
                "RDAPClient",
                f"RDAP {response.http_status_code} for {domain}",
                {"url": url, "attempts": attempts, "response_time_ms": response.response_time_ms},
            )

        return response

    async def check(self, domain: DomainName, endpoint: str) -> LookupResult:
        """
        Determine availability of one domain via RDAP.

        Returns:
            LookupResult; error is set when RDAP could not answer, which
            signals the resolver to fall back to WHOIS
        """
        response = await self.query(domain, endpoint)
        return self.to_lookup_result(domain, response)

    @staticmethod
    def to_lookup_result(domain: DomainName, response: RDAPResponse) -> LookupResult:
        if response.status == RDAPStatus.NOT_FOUND:
            return LookupResult(domain=str(domain), available=True, source=LookupSource.RDAP)

        if response.status == RDAPStatus.FOUND:
            return LookupResult(domain=str(domain), available=False, source=LookupSource.RDAP)

        message = response.error.message if response.error else "RDAP lookup failed"
        return LookupResult.failure(str(domain), message, source=LookupSource.RDAP)

    def _elapsed_ms(self, start_time: float) -> float:
        return (time.perf_counter() - start_time) * 1000

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
