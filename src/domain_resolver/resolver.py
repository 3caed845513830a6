"""
Domain Resolver - batch orchestration.

Coordinates all components for a batch of domain names:
- validation before any network access
- protocol selection through the server directory
- the RDAP pipeline, then the WHOIS pipeline for RDAP failures and for TLDs
  without an RDAP endpoint
- merging and reconciliation into the caller's input order

No single domain's failure aborts the batch; the result list always has
one entry per input.
"""

import time
from typing import Optional, Sequence

from .audit_logger import AuditLogger
from .config import ResolverConfig
from .domain_validator import DomainValidator
from .enums import LogLevel
from .models import DomainName, LookupResult
from .pipeline import ConcurrencyLimitedPipeline
from .rdap_client import RDAPClient
from .reconciler import PlanEntry, ResultReconciler, StageOutcome
from .retry_manager import RetryManager
from .server_directory import ServerDirectory
from .whois_client import SubprocessWhoisRunner, WHOISClient, signatures_from_patterns


class DomainResolver:
    """
    Resolves availability for a batch of domains over RDAP and WHOIS.

    The server directory should be shared across resolvers in a process so
    the bootstrap document is fetched only once.
    """

    async def __aenter__(self) -> "DomainResolver":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def __init__(
        self,
        config: Optional[ResolverConfig] = None,
        directory: Optional[ServerDirectory] = None,
        rdap_client: Optional[RDAPClient] = None,
        whois_client: Optional[WHOISClient] = None,
        validator: Optional[DomainValidator] = None,
        logger: Optional[AuditLogger] = None,
    ) -> None:
        """
        Initialize the resolver.

        Args:
            config: Resolver configuration (defaults apply when omitted)
            directory: Shared server directory; a private one is created if omitted
            rdap_client: RDAP client; built from config if omitted
            whois_client: WHOIS client; built from config if omitted
            validator: Domain validator (ASCII-only by default)
            logger: Audit logger; built from config.logging if omitted
        """
        self._config = config or ResolverConfig()
        self._logger = logger or AuditLogger.from_config(self._config.logging)

        retry_manager = RetryManager(self._config.retry)
        timeouts = self._config.timeouts

        self._validator = validator or DomainValidator()
        self._directory = directory or ServerDirectory(
            config=self._config.directory,
            timeout=timeouts.directory_seconds,
            logger=self._logger,
        )
        self._rdap_client = rdap_client or RDAPClient(
            timeout=timeouts.structured_seconds,
            retry_manager=retry_manager,
            logger=self._logger,
        )

        legacy = self._config.legacy
        self._whois_client = whois_client or WHOISClient(
            timeout=timeouts.legacy_seconds,
            runner=SubprocessWhoisRunner(legacy.executable),
            retry_manager=retry_manager,
            servers=legacy.servers,
            extra_signatures=signatures_from_patterns(legacy.extra_available_patterns),
            logger=self._logger,
        )

        concurrency = self._config.concurrency
        self._structured_pipeline = ConcurrencyLimitedPipeline(concurrency.structured_limit, name="rdap")
        self._legacy_pipeline = ConcurrencyLimitedPipeline(concurrency.legacy_limit, name="whois")
        self._reconciler = ResultReconciler()

    async def resolve(self, domains: Sequence[str]) -> list[LookupResult]:
        """
        Resolve availability for every input, preserving order.

        Args:
            domains: Raw domain strings; duplicates and invalid entries allowed

        Returns:
            One LookupResult per input, positionally aligned with domains
        """
        start_time = time.perf_counter()

        # Step 1: Validate; invalid entries never reach a client
        plan: list[PlanEntry] = []
        unique: dict[str, DomainName] = {}
        for raw in domains:
            validation = self._validator.validate(raw)
            if validation.valid:
                plan.append(validation.domain)
                unique.setdefault(validation.domain.name, validation.domain)
            else:
                self._log(
                    LogLevel.WARN,
                    f"Rejected domain input: {validation.error.message}",
                    {"raw_input": raw, "code": validation.error.code.value},
                )
                plan.append(LookupResult.failure(
                    str(raw),
                    f"Invalid domain format: {validation.error.message}",
                ))

        # Step 2: Partition by protocol
        structured_targets: list[tuple[DomainName, str]] = []
        legacy_targets: list[DomainName] = []
        for domain in unique.values():
            endpoint = await self._directory.servers_for(domain.tld)
            if endpoint:
                structured_targets.append((domain, endpoint))
            else:
                legacy_targets.append(domain)

        self._log(
            LogLevel.INFO,
            f"Resolving {len(unique)} domain(s)",
            {
                "inputs": len(plan),
                "rdap": len(structured_targets),
                "whois": len(legacy_targets),
            },
        )

        # Step 3: RDAP pipeline
        structured = await self._structured_pipeline.run(structured_targets, self._check_structured)

        # Step 4-5: WHOIS pipeline for RDAP failures and RDAP-less TLDs
        fallback = self._reconciler.fallback_domains(structured)
        if fallback:
            self._log(
                LogLevel.INFO,
                f"Falling back to WHOIS for {len(fallback)} domain(s)",
                {"domains": [d.name for d in fallback]},
            )
        legacy_input = fallback + legacy_targets
        legacy_results = await self._legacy_pipeline.run(legacy_input, self._whois_client.check)
        legacy = {domain.name: result for domain, result in zip(legacy_input, legacy_results)}

        # Step 6-7: Merge and restore input order
        merged = self._reconciler.merge(structured, legacy)
        results = self._reconciler.reconcile(plan, merged)

        self._log(
            LogLevel.INFO,
            "Batch completed",
            {
                "results": len(results),
                "available": sum(1 for r in results if r.available),
                "errors": sum(1 for r in results if r.error is not None),
                "duration_ms": (time.perf_counter() - start_time) * 1000,
            },
        )

        return results

    async def _check_structured(self, target: tuple[DomainName, str]) -> StageOutcome:
        domain, endpoint = target
        result = await self._rdap_client.check(domain, endpoint)
        return self._reconciler.classify_structured(domain, result)

    def _log(self, level: LogLevel, message: str, data: dict) -> None:
        self._logger.log(level, "DomainResolver", message, data)

    async def close(self) -> None:
        await self._rdap_client.close()

    @property
    def directory(self) -> ServerDirectory:
        return self._directory

    @property
    def structured_pipeline(self) -> ConcurrencyLimitedPipeline:
        return self._structured_pipeline

    @property
    def legacy_pipeline(self) -> ConcurrencyLimitedPipeline:
        return self._legacy_pipeline

    @property
    def logger(self) -> AuditLogger:
        return self._logger

    @property
    def config(self) -> ResolverConfig:
        return self._config


async def check_domains(
    domains: Sequence[str],
    config: Optional[ResolverConfig] = None,
    directory: Optional[ServerDirectory] = None,
    logger: Optional[AuditLogger] = None,
) -> list[LookupResult]:
    """
    Resolve one batch with a short-lived resolver.

    Pass a shared directory to avoid refetching the bootstrap document on
    every call.
    """
    async with DomainResolver(config=config, directory=directory, logger=logger) as resolver:
        return await resolver.resolve(domains)
