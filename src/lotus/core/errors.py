"""
Error taxonomy for a test run.

Every failure that ends a run is a LotusError. Lower-level exceptions are
re-raised as one of these with the failing operation in the message and the
original exception chained as __cause__.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from lotus.components.compare.models import Difference


class LotusError(Exception):
    """Base class for all run failures."""


class ConfigurationError(LotusError):
    """Template, context, naming or configuration file failure."""


class FileAccessError(LotusError):
    """A fixture, rule or auxiliary file is missing or unreadable."""

    def __init__(self, message: str, path: Path) -> None:
        self.path = path
        super().__init__(f"{message}: {path}")


# --- Build ---


class BuildError(LotusError):
    """The container image could not be built."""


class BuildStreamError(BuildError):
    """The build stream reported a structured build-time error."""

    def __init__(self, message: str, detail: dict[str, Any] | None = None) -> None:
        self.detail = detail or {}
        super().__init__(message)


class BuildTransportError(BuildError):
    """The build endpoint could not be reached or the stream broke."""


# --- Container ---


class ContainerLifecycleError(LotusError):
    """Creating, starting or stopping the container failed."""

    def __init__(self, operation: str, container_id: str | None = None) -> None:
        self.operation = operation
        self.container_id = container_id
        if container_id:
            super().__init__(f"{operation} (container {container_id[:12]})")
        else:
            super().__init__(operation)


class HealthCheckError(LotusError):
    """The container never reported itself healthy."""


class RuntimeTransportError(LotusError):
    """Raised by runtime adapters when the container runtime call fails."""


# --- Communication ---


class CommunicationError(LotusError):
    """Sending fixtures to the engine or receiving its output failed."""


class NoOutputError(CommunicationError):
    """The engine did not produce an output event for a submitted fixture."""


class ChannelClosedError(LotusError):
    """The other end of the event channel has gone away."""


# --- Comparison ---


class ComparisonError(LotusError):
    """The engine output does not match the expected fixture."""

    def __init__(
        self,
        case_index: int,
        case_name: str,
        actual: Any,
        expected: Any,
        differences: Sequence[Difference],
        report: str,
    ) -> None:
        self.case_index = case_index
        self.case_name = case_name
        self.actual = actual
        self.expected = expected
        self.differences = list(differences)
        super().__init__(
            f"Test case {case_index} ({case_name}): actual output (lhs) does not "
            f"match the expected output (rhs)\n\n{report}"
        )
