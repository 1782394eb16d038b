"""
Comparator models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

ROOT_PATH = "(root)"

# added: only in actual. removed: only in expected.
DifferenceKind = Literal["added", "removed", "changed"]


@dataclass(frozen=True)
class Difference:
    """One location where actual and expected disagree."""

    path: str
    kind: DifferenceKind
    actual: Any = None
    expected: Any = None


@dataclass(frozen=True)
class ComparisonOutput:
    """Outcome of comparing an actual document with an expected one."""

    differences: list[Difference] = field(default_factory=list)

    @property
    def matches(self) -> bool:
        return not self.differences
