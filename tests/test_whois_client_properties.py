"""
Property-based tests for WHOIS client module.

The whois process is replaced by an in-memory runner so classification,
server routing and retries can be checked deterministically. The subprocess
runner itself is exercised with `false` and `sleep` standing in for whois.
"""

import asyncio
import string
import time
from typing import Optional
from unittest.mock import patch

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from domain_resolver.config import RetryConfig
from domain_resolver.enums import LookupSource, WHOISErrorCode, WHOISStatus
from domain_resolver.exceptions import LegacyQueryError, LookupUnavailableError
from domain_resolver.models import DomainName
from domain_resolver.retry_manager import RetryManager
from domain_resolver.whois_client import (
    AVAILABILITY_SIGNATURES,
    LegacyQueryRunner,
    SubprocessWhoisRunner,
    WHOISClient,
    signatures_from_patterns,
)


REGISTERED_RESPONSE = """\
Domain Name: EXAMPLE.COM
Registry Domain ID: 2336799_DOMAIN_COM-VRSN
Registrar WHOIS Server: whois.iana.org
Creation Date: 1995-08-14T04:00:00Z
Registrant Organization: Internet Assigned Numbers Authority
Name Server: A.IANA-SERVERS.NET
DNSSEC: signedDelegation
"""

AVAILABLE_RESPONSES = [
    "No match for domain \"EXAMPLE-FREE.IO\".\n>>> Last update of WHOIS database <<<",
    "NOT FOUND\n",
    "Domain not found.\n",
    "Status: AVAILABLE\n",
    "Domain Status: No Object Found\n",
    "The queried object does not exist: no matching objects found\n",
    "%% This domain is available for registration\n",
    "No entries found for the selected source(s).\n",
]


class FakeRunner:
    """Records calls and replays scripted outputs or exceptions."""

    def __init__(self, outputs):
        self.outputs = list(outputs)
        self.calls: list[tuple[Optional[str], str, float]] = []

    async def __call__(self, server: Optional[str], domain: str, timeout: float) -> str:
        self.calls.append((server, domain, timeout))
        index = min(len(self.calls), len(self.outputs)) - 1
        output = self.outputs[index]
        if isinstance(output, Exception):
            raise output
        return output


def make_client(outputs, **kwargs) -> tuple[WHOISClient, FakeRunner]:
    runner = FakeRunner(outputs)
    client = WHOISClient(
        runner=runner,
        retry_manager=RetryManager(RetryConfig(max_attempts=3, base_delay_seconds=0)),
        **kwargs,
    )
    return client, runner


class TestClassificationProperty:
    """Free-text responses are classified against the signature table."""

    @pytest.mark.parametrize("text", AVAILABLE_RESPONSES)
    def test_availability_signatures_match(self, text: str) -> None:
        client = WHOISClient(runner=FakeRunner([""]))

        response = client.classify(text)

        assert response.status == WHOISStatus.NOT_FOUND
        assert response.matched_signature is not None

    def test_registration_record_is_found(self) -> None:
        response = WHOISClient(runner=FakeRunner([""])).classify(REGISTERED_RESPONSE)

        assert response.status == WHOISStatus.FOUND
        assert response.matched_signature is None

    @given(blank=st.text(alphabet=" \t\r\n", max_size=10))
    @settings(max_examples=20)
    def test_empty_output_is_ambiguous(self, blank: str) -> None:
        response = WHOISClient(runner=FakeRunner([""])).classify(blank)

        assert response.status == WHOISStatus.AMBIGUOUS

    @given(
        text=st.text(
            alphabet=string.digits + string.punctuation.replace("%", "") + " \n",
            min_size=1,
            max_size=200,
        ).filter(lambda s: s.strip())
    )
    @settings(max_examples=100)
    def test_unmatched_output_is_never_available(self, text: str) -> None:
        """
        *For any* non-empty response without letters, no signature can match
        and the domain SHALL be treated as registered.
        """
        response = WHOISClient(runner=FakeRunner([""])).classify(text)

        assert response.status == WHOISStatus.FOUND

    def test_first_matching_signature_wins(self) -> None:
        text = "No match for domain\nStatus: free\n"

        response = WHOISClient(runner=FakeRunner([""])).classify(text)

        assert response.matched_signature == AVAILABILITY_SIGNATURES[0].name

    def test_line_anchored_signatures_ignore_mid_line_text(self) -> None:
        client = WHOISClient(runner=FakeRunner([""]))

        assert client.classify("Remarks: nothing found here\n").status == WHOISStatus.FOUND
        assert client.classify("Remarks: x\nNothing found\n").status == WHOISStatus.NOT_FOUND

    def test_extra_signatures_are_appended(self) -> None:
        extra = signatures_from_patterns([r"libre para registro"])
        client = WHOISClient(runner=FakeRunner([""]), extra_signatures=extra)

        response = client.classify("Dominio LIBRE PARA REGISTRO\n")

        assert response.status == WHOISStatus.NOT_FOUND
        assert response.matched_signature == "custom_0"
        assert client.signatures[-1] is extra[0]


class TestQueryProperty:
    """Server routing, retries and conversion to LookupResult."""

    def test_available_domain(self) -> None:
        client, runner = make_client([AVAILABLE_RESPONSES[0]])

        result = asyncio.run(client.check(DomainName("example-free.io")))

        assert result.available is True
        assert result.error is None
        assert result.source == LookupSource.WHOIS
        assert runner.calls == [("whois.nic.io", "example-free.io", 15.0)]

    def test_registered_domain(self) -> None:
        client, _ = make_client([REGISTERED_RESPONSE])

        result = asyncio.run(client.check(DomainName("example.com")))

        assert result.available is False
        assert result.error is None

    def test_ambiguous_output_is_not_available(self) -> None:
        client, _ = make_client([""])

        response = asyncio.run(client.query(DomainName("example.xyz")))
        result = client.to_lookup_result(DomainName("example.xyz"), response)

        assert response.status == WHOISStatus.AMBIGUOUS
        assert result.available is False
        assert result.error is None

    @given(tld=st.sampled_from(["com", "xyz", "shop", "berlin"]))
    @settings(max_examples=10, deadline=None)
    def test_unlisted_tld_uses_default_routing(self, tld: str) -> None:
        client, runner = make_client([REGISTERED_RESPONSE])

        asyncio.run(client.query(DomainName(f"example.{tld}")))

        assert runner.calls[0][0] is None

    def test_custom_server_table(self) -> None:
        client, runner = make_client([REGISTERED_RESPONSE], servers={"XYZ": "whois.nic.xyz"})

        asyncio.run(client.query(DomainName("example.xyz")))

        assert client.get_server_for_tld("io") is None
        assert runner.calls[0][0] == "whois.nic.xyz"

    def test_process_failure_is_retried(self) -> None:
        failure = LegacyQueryError(code=WHOISErrorCode.PROCESS_ERROR.value, message="whois exited with status 1")
        client, runner = make_client([failure, failure, AVAILABLE_RESPONSES[1]])

        response = asyncio.run(client.query(DomainName("example.me")))

        assert response.status == WHOISStatus.NOT_FOUND
        assert response.attempts == 3
        assert len(runner.calls) == 3

    def test_exhausted_retries_report_error(self) -> None:
        failure = LegacyQueryError(code=WHOISErrorCode.TIMEOUT.value, message="WHOIS query timed out after 15.0s")
        client, runner = make_client([failure])

        response = asyncio.run(client.query(DomainName("example.tv")))
        result = client.to_lookup_result(DomainName("example.tv"), response)

        assert response.status == WHOISStatus.ERROR
        assert response.error.code == WHOISErrorCode.TIMEOUT
        assert len(runner.calls) == 3
        assert result.available is False
        assert result.error == "WHOIS query timed out after 15.0s"

    def test_unexpected_runner_error_is_contained(self) -> None:
        client, runner = make_client([RuntimeError("runner crashed")])

        result = asyncio.run(client.check(DomainName("example.io")))

        assert len(runner.calls) == 3
        assert result.available is False
        assert result.error == "runner crashed"

    def test_missing_executable_means_no_lookup_method(self) -> None:
        missing = LookupUnavailableError(code=WHOISErrorCode.NOT_INSTALLED.value, message="whois executable not found")
        client, runner = make_client([missing])

        result = asyncio.run(client.check(DomainName("example.zz")))

        assert len(runner.calls) == 1
        assert result.available is False
        assert result.error == "No lookup method for .zz"


class TestSubprocessRunnerProperty:
    """The system whois runner passes arguments as a discrete vector."""

    def test_runner_satisfies_protocol(self) -> None:
        assert isinstance(SubprocessWhoisRunner(), LegacyQueryRunner)

    def test_build_args_with_server(self) -> None:
        runner = SubprocessWhoisRunner()

        assert runner.build_args("whois.nic.io", "example.io") == ["whois", "-h", "whois.nic.io", "example.io"]

    def test_build_args_default_routing(self) -> None:
        runner = SubprocessWhoisRunner("/usr/bin/whois")

        assert runner.build_args(None, "example.com") == ["/usr/bin/whois", "example.com"]

    def test_missing_executable_raises_lookup_unavailable(self) -> None:
        runner = SubprocessWhoisRunner("whois-executable-that-does-not-exist")

        with pytest.raises(LookupUnavailableError) as exc_info:
            asyncio.run(runner(None, "example.com", 1.0))

        assert exc_info.value.code == WHOISErrorCode.NOT_INSTALLED.value

    def test_non_zero_exit_raises_process_error(self) -> None:
        # `false` ignores its arguments and exits with status 1
        runner = SubprocessWhoisRunner("false")

        with pytest.raises(LegacyQueryError) as exc_info:
            asyncio.run(runner(None, "example.com", 5.0))

        assert exc_info.value.code == WHOISErrorCode.PROCESS_ERROR.value
        assert exc_info.value.details["returncode"] == 1

    def test_non_zero_exit_reported_by_client(self) -> None:
        client = WHOISClient(
            runner=SubprocessWhoisRunner("false"),
            retry_manager=RetryManager(RetryConfig(max_attempts=2, base_delay_seconds=0)),
        )

        response = asyncio.run(client.query(DomainName("example.io")))

        assert response.status == WHOISStatus.ERROR
        assert response.error.code == WHOISErrorCode.PROCESS_ERROR
        assert response.attempts == 2

    def test_timeout_kills_and_reaps_process(self) -> None:
        # `sleep 5` stands in for a whois server that never answers
        runner = SubprocessWhoisRunner("sleep")
        spawned = []
        spawn = asyncio.create_subprocess_exec

        async def recording_spawn(*args, **kwargs):
            process = await spawn(*args, **kwargs)
            spawned.append(process)
            return process

        start = time.monotonic()
        with patch("asyncio.create_subprocess_exec", recording_spawn):
            with pytest.raises(LegacyQueryError) as exc_info:
                asyncio.run(runner(None, "5", 0.2))

        assert exc_info.value.code == WHOISErrorCode.TIMEOUT.value
        assert time.monotonic() - start < 4.0
        assert len(spawned) == 1
        # returncode is only set once the child has been waited on
        assert spawned[0].returncode is not None
