"""
Test Driver models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

from lotus.components.compare.models import Difference
from lotus.core.errors import LotusError

TestStatus = Literal["passed", "failed", "errored"]

INPUT_FILE = "input.json"
EXPECTED_FILE = "expected.json"


@dataclass(frozen=True)
class TestResult:
    """Outcome of one test case."""

    __test__ = False

    index: int
    name: str
    status: TestStatus
    actual: Any = None
    expected: Any = None
    differences: list[Difference] = field(default_factory=list)
    error: LotusError | None = None

    @property
    def passed(self) -> bool:
        return self.status == "passed"
