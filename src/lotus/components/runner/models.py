"""
Run Coordinator models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from lotus.components.archive.models import BuildContext
from lotus.components.collector import DEFAULT_COLLECTOR_HOST
from lotus.components.containers.models import (
    DEFAULT_HEALTH_DELAY_SECONDS,
    DEFAULT_HEALTH_RETRIES,
    LOCALHOST,
)
from lotus.components.driver.models import TestResult
from lotus.core.channel import DEFAULT_CAPACITY
from lotus.core.entities import TestCase
from lotus.core.errors import LotusError


@dataclass(frozen=True)
class RunPlan:
    """Everything one run needs: inputs, naming and tuning."""

    cache_dir: Path
    image_tag: str
    rules: list[Path]
    test_cases: list[TestCase]
    scripts: list[Path] = field(default_factory=list)
    patterns: list[Path] = field(default_factory=list)
    context: BuildContext = field(default_factory=BuildContext)
    engine_host: str = LOCALHOST
    collector_host: str = DEFAULT_COLLECTOR_HOST
    health_retries: int = DEFAULT_HEALTH_RETRIES
    health_delay: float = DEFAULT_HEALTH_DELAY_SECONDS
    channel_capacity: int = DEFAULT_CAPACITY
    event_timeout: float | None = None
    auto_remove: bool = True


@dataclass
class RunOutput:
    """
    Report of a run.

    error is the failure that ended the run. teardown_error and
    collector_error are reported on their own and never replace it.
    """

    results: list[TestResult] = field(default_factory=list)
    error: LotusError | None = None
    teardown_error: LotusError | None = None
    collector_error: LotusError | None = None

    @property
    def errors(self) -> list[LotusError]:
        return [
            e for e in (self.error, self.teardown_error, self.collector_error) if e is not None
        ]

    @property
    def success(self) -> bool:
        return not self.errors and all(r.passed for r in self.results)
