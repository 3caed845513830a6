"""
Server Directory - TLD to RDAP endpoint resolution.

The directory is populated once, on first use, from the IANA RDAP bootstrap
document merged over a static fallback table. If the bootstrap cannot be
fetched or parsed, the static table is used alone. The populated map is
kept for the lifetime of the directory object and never refetched.
"""

import asyncio
from typing import Any, Optional

import httpx

from .audit_logger import AuditLogger
from .config import DirectoryConfig
from .enums import LogLevel
from .exceptions import DomainResolverError, NetworkError, ProtocolError
from .tld_registry import FALLBACK_RDAP_SERVERS


class ServerDirectory:
    """
    Process-wide TLD -> RDAP endpoint directory.

    Create one per process and share it by reference. Population is guarded
    by an asyncio.Lock: concurrent first callers wait for a single bootstrap
    fetch and never see a partially built map.
    """

    def __init__(
        self,
        config: Optional[DirectoryConfig] = None,
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        logger: Optional[AuditLogger] = None,
    ) -> None:
        """
        Initialize the directory.

        Args:
            config: Bootstrap URL and optional replacement fallback table
            timeout: Bootstrap fetch timeout in seconds
            transport: Optional httpx transport (used by tests)
            logger: Optional audit logger
        """
        self._config = config or DirectoryConfig()
        self._timeout = timeout
        self._transport = transport
        self._logger = logger

        fallback = self._config.fallback_servers
        if fallback is None:
            fallback = FALLBACK_RDAP_SERVERS
        self._fallback_servers = {k.lower(): v for k, v in fallback.items()}

        self._servers: Optional[dict[str, str]] = None
        self._lock = asyncio.Lock()
        self._fetch_attempts = 0

    @property
    def is_populated(self) -> bool:
        return self._servers is not None

    @property
    def fetch_attempts(self) -> int:
        """Number of bootstrap fetches issued so far (0 or 1)."""
        return self._fetch_attempts

    async def ensure_populated(self) -> None:
        """Populate the directory if this is the first access. Never raises."""
        if self._servers is not None:
            return

        async with self._lock:
            if self._servers is not None:
                return

            servers = dict(self._fallback_servers)
            try:
                remote = await self._fetch_bootstrap()
            except DomainResolverError as e:
                if self._logger:
                    self._logger.log_error(
                        "ServerDirectory",
                        "Bootstrap unavailable, using fallback table",
                        error=e,
                        request_url=self._config.bootstrap_url,
                        additional_data={"fallback_tlds": len(servers)},
                    )
            else:
                servers.update(remote)
                self._log(
                    LogLevel.INFO,
                    "Bootstrap loaded",
                    {"remote_tlds": len(remote), "total_tlds": len(servers)},
                )

            # Assigned in one step so readers never see a partial map
            self._servers = servers

    async def servers_for(self, tld: str) -> Optional[str]:
        """
        Get the RDAP base URL for a TLD.

        Returns:
            Endpoint URL without trailing slash, or None if the TLD has no
            structured endpoint
        """
        await self.ensure_populated()
        return self._servers.get(tld.lower())

    async def supported_tlds(self) -> list[str]:
        await self.ensure_populated()
        return sorted(self._servers.keys())

    async def _fetch_bootstrap(self) -> dict[str, str]:
        """
        Fetch and parse the bootstrap document.

        Raises:
            NetworkError: On transport failure or non-200 status
            ProtocolError: If the body is not a usable bootstrap document
        """
        self._fetch_attempts += 1
        url = self._config.bootstrap_url

        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout),
                transport=self._transport,
                follow_redirects=True,
            ) as client:
                response = await client.get(url, headers={"Accept": "application/json"})
        except httpx.HTTPError as e:
            raise NetworkError(
                code="bootstrap_unreachable",
                message=f"Bootstrap fetch failed: {e}",
                details={"url": url},
            )

        if response.status_code != 200:
            raise NetworkError(
                code="bootstrap_status",
                message=f"Bootstrap returned HTTP {response.status_code}",
                details={"url": url, "status_code": response.status_code},
            )

        try:
            data = response.json()
        except ValueError as e:
            raise ProtocolError(
                code="bootstrap_parse_error",
                message=f"Bootstrap is not valid JSON: {e}",
                details={"url": url},
            )

        return self.parse_bootstrap(data)

    @staticmethod
    def parse_bootstrap(data: Any) -> dict[str, str]:
        """
        Parse IANA bootstrap format into a TLD -> base URL mapping.

        Bootstrap format:
        {
            "services": [
                [["com", "net"], ["https://rdap.verisign.com/com/v1/"]],
                [["org"], ["https://rdap.publicinterestregistry.org/rdap/"]],
                ...
            ]
        }

        The first URL of each entry is used, with one trailing slash removed.
        Malformed entries are skipped.

        Raises:
            ProtocolError: If there is no services list at all
        """
        services = data.get("services") if isinstance(data, dict) else None
        if not isinstance(services, list):
            raise ProtocolError(
                code="bootstrap_parse_error",
                message="Bootstrap document has no services list",
            )

        servers: dict[str, str] = {}
        for entry in services:
            if not isinstance(entry, list) or len(entry) < 2:
                continue
            tlds, urls = entry[0], entry[1]
            if not isinstance(tlds, list) or not isinstance(urls, list) or not urls:
                continue
            url = urls[0]
            if not isinstance(url, str) or not url:
                continue
            if url.endswith("/"):
                url = url[:-1]
            for tld in tlds:
                if isinstance(tld, str) and tld:
                    servers[tld.lower()] = url

        return servers

    def _log(self, level: LogLevel, message: str, data: dict) -> None:
        if self._logger:
            self._logger.log(level, "ServerDirectory", message, data)
