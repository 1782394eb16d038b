"""
Test Driver component - feeds fixtures to the engine one at a time.

For every test case the driver posts the input fixture to the engine's HTTP
input, then takes exactly one event off the channel and compares it with the
expected fixture. Events carry no correlation id; the n-th event received is
the output for the n-th fixture submitted. That only holds while the engine
runs one ordered worker, which the packaged pipelines.yml enforces.

Key behaviors:
- Cases run strictly in sequence, never overlapping
- The first mismatch raises ComparisonError and later cases are not sent
- A closed channel or an elapsed event timeout raises NoOutputError
- Every attempted case leaves a TestResult in ``results``
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import replace
from pathlib import Path
from typing import Any

import httpx

from lotus.components.compare import ComparisonOutput, compare_strict, render_report
from lotus.components.driver.models import TestResult
from lotus.core.channel import EventReceiver
from lotus.core.entities import TestCase
from lotus.core.errors import (
    ChannelClosedError,
    CommunicationError,
    ComparisonError,
    FileAccessError,
    LotusError,
    NoOutputError,
)
from lotus.core.payloads import loads_strict

logger = logging.getLogger(__name__)

DEFAULT_REQUEST_TIMEOUT_SECONDS = 30.0


def load_fixture(path: Path, kind: str) -> Any:
    """Read and parse one JSON fixture."""
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise FileAccessError(f"Reading the {kind} fixture", path) from e
    try:
        return loads_strict(raw)
    except ValueError as e:
        raise FileAccessError(f"Parsing the {kind} fixture as JSON ({e})", path) from e


def input_url(host: str, port: int) -> str:
    return f"http://{host}:{port}/"


class TestDriver:
    """Runs test cases against the engine through its HTTP input."""

    __test__ = False

    def __init__(
        self,
        client: httpx.AsyncClient,
        receiver: EventReceiver,
        url: str,
        event_timeout: float | None = None,
    ) -> None:
        self._client = client
        self._receiver = receiver
        self._url = url
        self._event_timeout = event_timeout
        self.results: list[TestResult] = []

    async def submit(self, payload: Any) -> None:
        try:
            response = await self._client.post(self._url, json=payload)
        except httpx.HTTPError as e:
            raise CommunicationError(f"Sending a test fixture to {self._url}: {e}") from e
        if not response.is_success:
            raise CommunicationError(
                f"The engine at {self._url} rejected a test fixture "
                f"with status {response.status_code}"
            )

    async def next_event(self, index: int, name: str) -> Any:
        try:
            event = await self._receiver.recv(timeout=self._event_timeout)
        except ChannelClosedError as e:
            raise NoOutputError(
                f"Test case {index} ({name}): no output produced, the event channel closed"
            ) from e
        except TimeoutError as e:
            raise NoOutputError(
                f"Test case {index} ({name}): no output produced "
                f"within {self._event_timeout} seconds"
            ) from e
        logger.debug("Received output event for test case %d", index)
        return event

    async def run_case(self, index: int, case: TestCase) -> TestResult:
        """
        Execute one case and return its result.

        A mismatch is returned as a failed result, not raised; errors from
        the fixtures, the engine or the channel propagate.
        """
        payload = load_fixture(case.input, "input")
        await self.submit(payload)
        actual = await self.next_event(index, case.name)
        expected = load_fixture(case.expected, "expected")

        comparison = compare_strict(actual, expected)
        status = "passed" if comparison.matches else "failed"
        return TestResult(
            index=index,
            name=case.name,
            status=status,
            actual=actual,
            expected=expected,
            differences=list(comparison.differences),
        )

    async def run(self, cases: Sequence[TestCase]) -> list[TestResult]:
        """
        Run every case in order, stopping at the first failure.

        Raises:
            ComparisonError: a case produced output that does not match.
            LotusError: a fixture, the engine or the channel failed.
        """
        for index, case in enumerate(cases):
            try:
                result = await self.run_case(index, case)
            except LotusError as e:
                errored = TestResult(index=index, name=case.name, status="errored", error=e)
                self.results.append(errored)
                raise

            if result.passed:
                self.results.append(result)
                logger.info("Test case %d (%s) passed", index, case.name)
                continue

            report = render_report(
                ComparisonOutput(differences=result.differences),
                result.actual,
                result.expected,
                include_payloads=True,
            )
            error = ComparisonError(
                index, case.name, result.actual, result.expected, result.differences, report
            )
            self.results.append(replace(result, error=error))
            logger.info("Test case %d (%s) failed", index, case.name)
            raise error

        return list(self.results)
