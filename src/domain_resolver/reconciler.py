"""
Result reconciliation for the domain resolver.

Decides which structured outcomes need the WHOIS fallback, merges the two
stages, and restores the caller's input order and multiplicity.
"""

from dataclasses import dataclass, replace
from typing import Mapping, Sequence, Union

from .enums import Disposition
from .models import DomainName, LookupResult

MISSING_RESULT_ERROR = "Result missing"

# One slot per input position: a short-circuited result or the domain to look up
PlanEntry = Union[LookupResult, DomainName]


@dataclass
class StageOutcome:
    """Structured-stage result tagged with what happens next."""

    domain: DomainName
    result: LookupResult
    disposition: Disposition

    @property
    def needs_fallback(self) -> bool:
        return self.disposition == Disposition.NEEDS_FALLBACK


class ResultReconciler:
    """
    Merge and ordering rules for a batch.

    A structured result that carries an error is never trusted as a
    negative answer: it is tagged NEEDS_FALLBACK and the WHOIS result
    becomes the result of record.
    """

    def classify_structured(self, domain: DomainName, result: LookupResult) -> StageOutcome:
        disposition = Disposition.NEEDS_FALLBACK if result.error is not None else Disposition.FINAL
        return StageOutcome(domain=domain, result=result, disposition=disposition)

    def fallback_domains(self, outcomes: Sequence[StageOutcome]) -> list[DomainName]:
        return [outcome.domain for outcome in outcomes if outcome.needs_fallback]

    def merge(
        self,
        structured: Sequence[StageOutcome],
        legacy: Mapping[str, LookupResult],
    ) -> dict[str, LookupResult]:
        """
        Combine both stages into one result per domain name.

        Structured FINAL results stand. For every other domain the legacy
        result replaces whatever the structured stage produced.
        """
        merged: dict[str, LookupResult] = {}
        final: set[str] = set()

        for outcome in structured:
            merged[outcome.domain.name] = outcome.result
            if not outcome.needs_fallback:
                final.add(outcome.domain.name)

        for name, result in legacy.items():
            if name not in final:
                merged[name] = result

        return merged

    def reconcile(
        self,
        plan: Sequence[PlanEntry],
        resolved: Mapping[str, LookupResult],
    ) -> list[LookupResult]:
        """
        Produce one result per plan entry, in plan order.

        Every position gets its own copy, so duplicates never share an
        object. A domain without a resolved result gets a "Result missing"
        error instead of being dropped.
        """
        results: list[LookupResult] = []

        for entry in plan:
            if isinstance(entry, LookupResult):
                results.append(replace(entry))
                continue

            result = resolved.get(entry.name)
            if result is None:
                results.append(LookupResult.failure(entry.name, MISSING_RESULT_ERROR))
            else:
                results.append(replace(result))

        return results
