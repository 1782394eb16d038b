from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class TestCase:
    """One input fixture paired with its expected output fixture."""

    __test__ = False

    name: str
    input: Path
    expected: Path

    @classmethod
    def from_directory(cls, directory: Path, input_name: str, expected_name: str) -> TestCase:
        return cls(
            name=directory.name,
            input=directory / input_name,
            expected=directory / expected_name,
        )


@dataclass(frozen=True)
class Image:
    id: str
    tag: str = ""


@dataclass(frozen=True)
class Container:
    id: str

    @property
    def short_id(self) -> str:
        return self.id[:12]
